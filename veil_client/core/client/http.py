import json
from typing import Any, Literal, Mapping, Optional

import httpx

from veil_client.config.settings import settings
from veil_client.core.auth.session import SessionStore
from veil_client.exceptions import VeilApiError, VeilTransportError
from veil_client.utils.helper import encode_params, snake_case_keys
from veil_client.utils.logger import setup_logger

logger = setup_logger(__name__)

Method = Literal["GET", "POST", "DELETE"]


class HttpGateway:
    """Sends JSON requests to the Veil API and unwraps the ``{data, errors}`` envelope."""

    def __init__(self, store: SessionStore, timeout: Optional[float] = None, client: Optional[httpx.AsyncClient] = None):
        self._store = store
        self._client = client or httpx.AsyncClient(timeout=timeout if timeout is not None else settings.HTTP_TIMEOUT)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        token = self._store.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(self, url: str, params: Optional[Mapping[str, Any]] = None, method: Method = "GET") -> Any:
        params = params or {}
        content = None
        if method == "GET":
            query = encode_params(params)
            if query:
                url = f"{url}?{query}"
        else:
            content = json.dumps(params)

        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, content=content, headers=self._headers())
        except httpx.TransportError as e:
            logger.error("Transport error for %s %s: %s", method, url, e)
            raise VeilTransportError(str(e) or type(e).__name__, url) from e

        try:
            envelope = response.json()
        except ValueError as e:
            logger.error("Non-JSON response (%s) from %s", response.status_code, url)
            raise VeilTransportError(f"Non-JSON response with status {response.status_code}", url) from e

        if not isinstance(envelope, dict):
            raise VeilTransportError("Unexpected response envelope", url)

        if envelope.get("errors") is not None:
            logger.warning("API error from %s: %s", url, envelope["errors"])
            raise VeilApiError(envelope["errors"], url)

        return snake_case_keys(envelope.get("data"))

    # ---------- Lifecycle ----------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()
