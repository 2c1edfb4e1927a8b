"""Session token state and the challenge/signature handshake.

The token is process-wide shared state. Concurrent refreshes are not
serialized: each completed handshake replaces the stored session, so the
last one to finish wins. Only the lazy first-call setup is shared, so that
concurrent first calls run a single handshake.
"""
import asyncio
from typing import Optional, TYPE_CHECKING

from veil_client.core.auth.signer import MessageSigner
from veil_client.dal.datamodel.session import Challenge, Session, SessionState
from veil_client.exceptions import AuthenticationPreconditionError, VeilTransportError
from veil_client.utils.logger import setup_logger

if TYPE_CHECKING:
    from veil_client.core.client.http import HttpGateway

logger = setup_logger(__name__)


class SessionStore:

    def __init__(self):
        self._session: Optional[Session] = None
        self._state = SessionState.UNAUTHENTICATED

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def token(self) -> Optional[str]:
        return self._session.token if self._session else None

    @property
    def state(self) -> SessionState:
        return self._state

    def begin(self) -> None:
        self._state = SessionState.AUTHENTICATING

    def set(self, session: Session) -> None:
        self._session = session
        self._state = SessionState.AUTHENTICATED

    def abort(self) -> None:
        # a stale token is kept; the next expiry triggers another refresh
        self._state = SessionState.AUTHENTICATED if self._session else SessionState.UNAUTHENTICATED

    def clear(self) -> None:
        self._session = None
        self._state = SessionState.UNAUTHENTICATED


class Authenticator:

    def __init__(
            self,
            gateway: "HttpGateway",
            store: SessionStore,
            api_host: str,
            signer: Optional[MessageSigner] = None,
            address: Optional[str] = None,
    ):
        self._gateway = gateway
        self._store = store
        self._signer = signer
        self._address = address.lower() if address else None
        self.challenges_endpoint = f"{api_host}/api/v1/session_challenges"
        self.sessions_endpoint = f"{api_host}/api/v1/sessions"
        self._setup: Optional[asyncio.Future] = None

    @property
    def has_credentials(self) -> bool:
        return self._signer is not None and bool(self._address)

    # ---------- endpoints ----------

    async def create_session_challenge(self) -> Challenge:
        data = await self._gateway.request(self.challenges_endpoint, {}, "POST")
        return Challenge.model_validate(data)

    async def create_session(self, challenge_uid: str, signature: str, message: str) -> str:
        params = {"challengeUid": challenge_uid, "signature": signature, "message": message}
        data = await self._gateway.request(self.sessions_endpoint, params, "POST")
        token = (data or {}).get("token")
        if not token:
            raise VeilTransportError("Session response carried no token", self.sessions_endpoint)
        return token

    # ---------- handshake ----------

    async def authenticate(self) -> Session:
        if not self.has_credentials:
            raise AuthenticationPreconditionError()

        self._store.begin()
        try:
            challenge = await self.create_session_challenge()
            signature = await self._signer.sign(self._address, challenge.uid.encode("utf-8"))
            token = await self.create_session(challenge.uid, signature, challenge.uid)
        except BaseException:
            self._store.abort()
            raise

        session = Session(token=token, address=self._address)
        self._store.set(session)
        logger.info("Authenticated %s", self._address)
        return session

    async def ensure_session(self) -> Session:
        """Run the handshake once if no session exists yet."""
        if self._store.session is not None:
            return self._store.session
        if self._setup is None or self._setup.done():
            if not self.has_credentials:
                raise AuthenticationPreconditionError()
            self._setup = asyncio.ensure_future(self.authenticate())
        return await asyncio.shield(self._setup)
