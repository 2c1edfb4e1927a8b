from typing import Any, Optional

SESSION_EXPIRED_MESSAGE = "jwt expired"


class VeilException(Exception):
    pass


class VeilValidationError(VeilException, ValueError):
    """Caller input rejected before any request is made."""


class NumericParseError(VeilValidationError):
    pass


class AuthenticationPreconditionError(VeilException):
    def __init__(self, msg: str = "You tried calling an authenticated method without configuring "
                                  "a wallet mnemonic/private key and address"):
        super().__init__(msg)


class MarketNotFoundError(VeilException):
    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Market not found: {slug}")


class VeilTransportError(VeilException):
    def __init__(self, error_msg: str, url: Optional[str] = None):
        self.error_msg = error_msg
        self.url = url
        super().__init__(f"{error_msg} ({url})" if url else error_msg)


class VeilApiError(VeilException):
    """The API answered with an ``errors`` envelope."""

    def __init__(self, errors: list[Any], url: Optional[str] = None):
        self.errors = errors if isinstance(errors, list) else [errors]
        self.url = url
        super().__init__(f"Veil API error at {url}: {self.messages}")

    @property
    def messages(self) -> list[str]:
        out = []
        for err in self.errors:
            if isinstance(err, dict):
                out.append(str(err.get("message", "")))
            else:
                out.append(str(err))
        return out

    @property
    def is_session_expired(self) -> bool:
        return any(SESSION_EXPIRED_MESSAGE in m for m in self.messages)


class SessionRefreshExhaustedError(VeilException):
    def __init__(self, attempts: int, url: Optional[str] = None):
        self.attempts = attempts
        self.url = url
        super().__init__(f"Session still expired after {attempts} re-authentication attempt(s)")
