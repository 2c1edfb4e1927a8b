from decimal import Decimal
from functools import lru_cache
from typing import Any, AsyncGenerator, Awaitable, Callable, Dict, Optional, TypeVar

import httpx
from dotenv import load_dotenv

from veil_client.config.settings import settings
from veil_client.core.auth.session import Authenticator, SessionStore
from veil_client.core.auth.signer import MessageSigner, OrderSigner, build_wallet
from veil_client.core.client.http import HttpGateway
from veil_client.core.service.quote_service import AmountInput, build_quote_params
from veil_client.dal.datamodel.data_feed import DataFeed, DataFeedScope
from veil_client.dal.datamodel.market import Market, MarketStatus
from veil_client.dal.datamodel.order import Order, Side, TokenType
from veil_client.dal.datamodel.order_fill import OrderBookRow, OrderFill
from veil_client.dal.datamodel.page import Page
from veil_client.dal.datamodel.quote import Quote
from veil_client.dal.datamodel.session import Challenge, Session, SessionState
from veil_client.exceptions import AuthenticationPreconditionError, MarketNotFoundError, VeilValidationError
from veil_client.utils.logger import setup_logger
from veil_client.utils.market import parse_token_type, scalar_range, with_session_refresh

load_dotenv()
logger = setup_logger(__name__)

T = TypeVar("T")


class VeilClient:

    def __init__(
            self,
            api_host: Optional[str] = None,
            signer: Optional[MessageSigner] = None,
            address: Optional[str] = None,
            order_signer: Optional[OrderSigner] = None,
            http_client: Optional[httpx.AsyncClient] = None,
            timeout: Optional[float] = None,
            session_refresh_attempts: Optional[int] = None,
    ):
        self.api_host = (api_host or settings.VEIL_API_HOST).rstrip("/")
        address = address or getattr(signer, "address", None)
        self.address = address.lower() if address else None
        self.markets_endpoint = f"{self.api_host}/api/v1/markets"
        self.quotes_endpoint = f"{self.api_host}/api/v1/quotes"
        self.orders_endpoint = f"{self.api_host}/api/v1/orders"
        self.data_feeds_endpoint = f"{self.api_host}/api/v1/data_feeds"

        if session_refresh_attempts is None:
            session_refresh_attempts = settings.SESSION_REFRESH_ATTEMPTS
        self._refresh_attempts = session_refresh_attempts

        self._store = SessionStore()
        self._http = HttpGateway(self._store, timeout=timeout, client=http_client)
        self._auth = Authenticator(self._http, self._store, self.api_host, signer=signer, address=self.address)
        self._order_signer = order_signer

    @classmethod
    def from_settings(cls, **kwargs) -> "VeilClient":
        wallet = build_wallet(mnemonic=settings.VEIL_MNEMONIC, private_key=settings.VEIL_PRIVATE_KEY)
        address = settings.VEIL_ADDRESS or (wallet.address if wallet else None)
        return cls(signer=wallet, address=address, order_signer=wallet, **kwargs)

    # ---------- session ----------

    @property
    def session(self) -> Optional[Session]:
        return self._store.session

    @property
    def session_state(self) -> SessionState:
        return self._store.state

    async def authenticate(self) -> Session:
        return await self._auth.authenticate()

    async def create_session_challenge(self) -> Challenge:
        return await self._auth.create_session_challenge()

    async def create_session(self, challenge_uid: str, signature: str, message: str) -> str:
        return await self._auth.create_session(challenge_uid, signature, message)

    async def _session_call(self, op: Callable[[], Awaitable[T]]) -> T:
        await self._auth.ensure_session()
        return await with_session_refresh(op, self._auth.authenticate, self._refresh_attempts)

    # ---------- markets ----------

    async def get_markets(
            self,
            channel: Optional[str] = None,
            status: Optional[MarketStatus | str] = None,
            page: Optional[int] = None,
    ) -> Page[Market]:
        params: Dict[str, Any] = {}
        if channel is not None:
            params["channel"] = channel
        if status is not None:
            params["status"] = _parse_enum(MarketStatus, status, "status")
        if page is not None:
            params["page"] = page
        data = await self._http.request(self.markets_endpoint, params)
        return Page[Market].model_validate(data)

    async def iter_markets(
            self,
            channel: Optional[str] = None,
            status: Optional[MarketStatus | str] = None,
    ) -> AsyncGenerator[Market, None]:
        page_no = 1
        seen = 0
        while True:
            page = await self.get_markets(channel=channel, status=status, page=page_no)
            if not page.results:
                break
            for market in page.results:
                yield market
            seen += len(page.results)
            if seen >= page.total:
                break
            page_no += 1

    async def get_all_markets(
            self,
            channel: Optional[str] = None,
            status: Optional[MarketStatus | str] = None,
    ) -> list[Market]:
        results: list[Market] = []
        async for market in self.iter_markets(channel=channel, status=status):
            results.append(market)
        return results

    async def get_market(self, slug: str) -> Market:
        data = await self._http.request(f"{self.markets_endpoint}/{slug}")
        if not data:
            raise MarketNotFoundError(slug)
        return Market.model_validate(data)

    @staticmethod
    def get_scalar_range(market: Market) -> tuple[Decimal, Decimal]:
        return scalar_range(market)

    # ---------- order book ----------

    async def _market_page(self, market: Market, token_type: TokenType | str, resource: str, page: Optional[int]) -> Any:
        token_type = parse_token_type(token_type)
        url = f"{self.markets_endpoint}/{market.slug}/{token_type.value}/{resource}"
        return await self._http.request(url, {"page": page} if page is not None else {})

    async def get_bids(self, market: Market, token_type: TokenType | str, page: Optional[int] = None) -> Page[OrderBookRow]:
        data = await self._market_page(market, token_type, "bids", page)
        return Page[OrderBookRow].model_validate(data)

    async def get_asks(self, market: Market, token_type: TokenType | str, page: Optional[int] = None) -> Page[OrderBookRow]:
        data = await self._market_page(market, token_type, "asks", page)
        return Page[OrderBookRow].model_validate(data)

    async def get_order_fills(self, market: Market, token_type: TokenType | str, page: Optional[int] = None) -> Page[OrderFill]:
        data = await self._market_page(market, token_type, "order_fills", page)
        return Page[OrderFill].model_validate(data)

    # ---------- data feeds ----------

    async def get_data_feed(self, data_feed_slug: str, scope: DataFeedScope | str = DataFeedScope.MONTH) -> DataFeed:
        scope = _parse_enum(DataFeedScope, scope, "scope")
        data = await self._http.request(f"{self.data_feeds_endpoint}/{data_feed_slug}", {"scope": scope})
        return DataFeed.model_validate(data)

    # ---------- quotes & orders ----------

    async def create_quote(
            self,
            market: Market,
            side: Side | str,
            token_type: TokenType | str,
            amount: AmountInput,
            price: AmountInput,
    ) -> Quote:
        params = build_quote_params(market, side, token_type, amount, price)

        async def _create() -> Quote:
            data = await self._http.request(self.quotes_endpoint, params, "POST")
            return Quote.model_validate(data)

        quote = await self._session_call(_create)
        logger.info("Quote %s: %s", quote.uid, params["quote"])
        return quote

    async def create_order(self, quote: Quote, post_only: Optional[bool] = None) -> Order:
        if self._order_signer is None:
            raise AuthenticationPreconditionError("Creating orders requires a wallet to sign them")
        await self._auth.ensure_session()

        signed = await self._order_signer.sign_order(quote.zero_ex_order)
        order_params: Dict[str, Any] = {"zeroExOrder": signed.to_wire(), "quoteUid": quote.uid}
        if post_only is not None:
            order_params["postOnly"] = post_only
        params = {"order": order_params}

        async def _create() -> Order:
            data = await self._http.request(self.orders_endpoint, params, "POST")
            return Order.model_validate(data)

        order = await self._session_call(_create)
        logger.info("Order %s created from quote %s", order.uid, quote.uid)
        return order

    async def cancel_order(self, uid: str) -> Order:
        async def _cancel() -> Order:
            data = await self._http.request(f"{self.orders_endpoint}/{uid}", {}, "DELETE")
            return Order.model_validate(data)

        order = await self._session_call(_cancel)
        logger.info("Order %s canceled", uid)
        return order

    async def get_user_orders(self, market: Market, page: Optional[int] = None) -> Page[Order]:
        params: Dict[str, Any] = {}
        if page is not None:
            params["page"] = page
        params["market"] = market.slug

        async def _list() -> Page[Order]:
            data = await self._http.request(self.orders_endpoint, params)
            return Page[Order].model_validate(data)

        return await self._session_call(_list)

    # ---------- Lifecycle ----------

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()


def _parse_enum(enum_cls, value, name: str) -> str:
    try:
        return enum_cls(value).value
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise VeilValidationError(f'Invalid {name}: "{value}". Must be one of: {allowed}.') from None


@lru_cache(maxsize=1)
def get_veil_client() -> VeilClient:
    return VeilClient.from_settings()


if __name__ == "__main__":
    import asyncio

    async def main():
        async with get_veil_client() as veil:
            page = await veil.get_markets(status=MarketStatus.OPEN)
            for market in page.results:
                print(market.slug, market.num_ticks)

    asyncio.run(main())
