from typing import Any, Awaitable, Callable, TypeVar

from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception, stop_after_attempt

from veil_client.dal.datamodel.market import Market
from veil_client.dal.datamodel.order import TokenType
from veil_client.exceptions import SessionRefreshExhaustedError, VeilApiError, VeilValidationError
from veil_client.utils.logger import setup_logger
from veil_client.utils.numeric import from_wei

logger = setup_logger(__name__)

T = TypeVar("T")


# ---------- session retry -------------

def is_session_expired(e: BaseException) -> bool:
    return isinstance(e, VeilApiError) and e.is_session_expired


def _log_refresh(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception()
    logger.warning(
        "Session expired at %s, refreshing (attempt %d)",
        getattr(error, "url", None), retry_state.attempt_number,
    )


async def with_session_refresh(
        op: Callable[[], Awaitable[T]],
        refresh: Callable[[], Awaitable[Any]],
        max_refreshes: int = 1,
) -> T:
    """Run ``op``; on an expired session call ``refresh`` and run ``op`` again.

    At most ``max_refreshes`` refreshes happen per call. Any error other than
    session expiry propagates unchanged on the first occurrence.
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception(is_session_expired),
        stop=stop_after_attempt(max_refreshes + 1),
        before_sleep=_log_refresh,
        reraise=False,
    )
    try:
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    await refresh()
                return await op()
    except RetryError as e:
        last = e.last_attempt.exception()
        raise SessionRefreshExhaustedError(max_refreshes, getattr(last, "url", None)) from last


# ---------- market -------------

def parse_token_type(token_type: TokenType | str) -> TokenType:
    try:
        return TokenType(token_type)
    except ValueError:
        raise VeilValidationError(
            f'Invalid tokenType: "{token_type}". Must be either "long" or "short".'
        ) from None


def token_for(market: Market, token_type: TokenType | str) -> str:
    return market.long_token if parse_token_type(token_type) == TokenType.LONG else market.short_token


def scalar_range(market: Market) -> tuple:
    if not market.is_scalar:
        raise VeilValidationError("Market does not have min and max price")
    return from_wei(market.min_price), from_wei(market.max_price)
