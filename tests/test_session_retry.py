import logging

import pytest

from veil_client.exceptions import SessionRefreshExhaustedError, VeilApiError, VeilTransportError
from veil_client.utils.market import is_session_expired, with_session_refresh


class ScriptedOp:
    """Raises the queued outcomes in order, then returns ``result``."""

    def __init__(self, *outcomes, result="ok"):
        self.outcomes = list(outcomes)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.outcomes:
            raise self.outcomes.pop(0)
        return self.result


class CountingRefresh:
    def __init__(self):
        self.calls = 0

    async def __call__(self):
        self.calls += 1


def expired():
    return VeilApiError([{"message": "jwt expired"}], "https://api/orders")


@pytest.mark.asyncio
async def test_success_needs_no_refresh():
    op, refresh = ScriptedOp(), CountingRefresh()
    assert await with_session_refresh(op, refresh) == "ok"
    assert (op.calls, refresh.calls) == (1, 0)


@pytest.mark.asyncio
async def test_expired_once_refreshes_once_and_retries_once():
    op, refresh = ScriptedOp(expired()), CountingRefresh()
    assert await with_session_refresh(op, refresh) == "ok"
    assert (op.calls, refresh.calls) == (2, 1)


@pytest.mark.asyncio
async def test_expired_twice_exhausts():
    last = expired()
    op, refresh = ScriptedOp(expired(), last), CountingRefresh()

    with pytest.raises(SessionRefreshExhaustedError) as exc:
        await with_session_refresh(op, refresh, max_refreshes=1)

    assert (op.calls, refresh.calls) == (2, 1)
    assert exc.value.__cause__ is last
    assert exc.value.url == "https://api/orders"


@pytest.mark.asyncio
async def test_zero_refreshes_allowed():
    op, refresh = ScriptedOp(expired()), CountingRefresh()
    with pytest.raises(SessionRefreshExhaustedError):
        await with_session_refresh(op, refresh, max_refreshes=0)
    assert (op.calls, refresh.calls) == (1, 0)


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    VeilApiError([{"message": "insufficient balance"}], "https://api/orders"),
    VeilTransportError("connection reset", "https://api/orders"),
    RuntimeError("boom"),
])
async def test_other_errors_propagate_unchanged(error):
    op, refresh = ScriptedOp(error), CountingRefresh()

    with pytest.raises(type(error)) as exc:
        await with_session_refresh(op, refresh)

    assert exc.value is error
    assert (op.calls, refresh.calls) == (1, 0)


@pytest.mark.asyncio
async def test_refresh_failure_propagates():
    failure = VeilApiError([{"message": "bad signature"}])

    async def refresh():
        raise failure

    op = ScriptedOp(expired())
    with pytest.raises(VeilApiError) as exc:
        await with_session_refresh(op, refresh)
    assert exc.value is failure
    assert op.calls == 1


def test_is_session_expired():
    assert is_session_expired(expired())
    assert not is_session_expired(VeilTransportError("jwt expired"))
    assert not is_session_expired(ValueError("jwt expired"))


@pytest.mark.asyncio
async def test_refresh_is_logged_with_url(caplog):
    op, refresh = ScriptedOp(expired()), CountingRefresh()

    with caplog.at_level(logging.WARNING, logger="veil_client.utils.market"):
        await with_session_refresh(op, refresh)

    assert "Session expired at https://api/orders" in caplog.text
    assert "<unknown>" not in caplog.text
