import json
import os
from urllib.parse import parse_qsl

os.environ.setdefault("LOG_FILE", "")

import httpx
import pytest

from veil_client.core.client.veil import VeilClient
from veil_client.dal.datamodel.market import Market
from veil_client.dal.datamodel.quote import SignedZeroExOrder, ZeroExOrder

API_HOST = "https://api.test.veil"
ADDRESS = "0xabcdef0000000000000000000000000000000001"

MARKET_WIRE = {
    "slug": "will-it-rain",
    "uid": "market-1",
    "endsAt": 1546300800000,
    "shortToken": "0x00000000000000000000000000000000000000aa",
    "longToken": "0x00000000000000000000000000000000000000bb",
    "numTicks": "100",
    "minPrice": None,
    "maxPrice": None,
    "index": "0",
    "limitPrice": "0",
    "type": "yesno",
}

ZEROEX_ORDER_WIRE = {
    "makerAddress": ADDRESS,
    "takerAddress": "0x0000000000000000000000000000000000000000",
    "feeRecipientAddress": "0x0000000000000000000000000000000000000000",
    "senderAddress": "0x0000000000000000000000000000000000000000",
    "makerAssetAmount": "1000",
    "takerAssetAmount": "2000",
    "makerFee": "0",
    "takerFee": "0",
    "expirationTimeSeconds": "1546300800",
    "salt": "42",
    "makerAssetData": "0xf47261b0",
    "takerAssetData": "0xf47261b0",
    "exchangeAddress": "0x0000000000000000000000000000000000000e0e",
}

ORDER_WIRE = {
    "uid": "order-1",
    "price": "40",
    "side": "buy",
    "tokenAmount": "10000000000000000",
    "tokenAmountUnfilled": "10000000000000000",
    "status": "open",
    "tokenType": "long",
}


def envelope(data):
    return {"data": data}


def error_envelope(*messages):
    return {"errors": [{"message": m} for m in messages]}


class FakeSigner:
    def __init__(self):
        self.calls = []
        self.orders = []

    async def sign(self, address, message):
        self.calls.append((address, message))
        return f"0xsig{len(self.calls)}"

    async def sign_order(self, order: ZeroExOrder) -> SignedZeroExOrder:
        self.orders.append(order)
        return SignedZeroExOrder(**order.model_dump(), signature="0xordersig")


class FakeVeilApi:
    """In-memory Veil API behind httpx.MockTransport.

    Session endpoints hand out numbered challenges and tokens. Any other
    route answers from a queue of envelopes; the last one is repeated.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}
        self.challenges = 0
        self.sessions = 0

    def add(self, method, path, *envelopes):
        self.routes[(method, path)] = list(envelopes)

    def calls(self, method, path):
        return [r for r in self.requests if r["method"] == method and r["path"] == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append({
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query.decode(),
            "params": dict(parse_qsl(request.url.query.decode())),
            "json": body,
            "auth": request.headers.get("Authorization"),
            "headers": request.headers,
        })
        key = (request.method, request.url.path)
        if key == ("POST", "/api/v1/session_challenges"):
            self.challenges += 1
            return httpx.Response(200, json=envelope({"uid": f"challenge-{self.challenges}"}))
        if key == ("POST", "/api/v1/sessions"):
            self.sessions += 1
            return httpx.Response(200, json=envelope({"token": f"token-{self.sessions}"}))
        queue = self.routes.get(key)
        if not queue:
            return httpx.Response(404, json=error_envelope(f"no route {key}"))
        payload = queue.pop(0) if len(queue) > 1 else queue[0]
        return httpx.Response(200, json=payload)


@pytest.fixture
def api():
    return FakeVeilApi()


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def http_client(api):
    return httpx.AsyncClient(transport=httpx.MockTransport(api.handler))


@pytest.fixture
def client(http_client, signer):
    return VeilClient(
        api_host=API_HOST,
        signer=signer,
        address=ADDRESS,
        order_signer=signer,
        http_client=http_client,
        session_refresh_attempts=1,
    )


@pytest.fixture
def anonymous_client(http_client):
    return VeilClient(api_host=API_HOST, http_client=http_client)


@pytest.fixture
def market():
    return Market(
        slug="will-it-rain",
        uid="market-1",
        short_token="0x00000000000000000000000000000000000000aa",
        long_token="0x00000000000000000000000000000000000000bb",
        num_ticks="100",
    )
