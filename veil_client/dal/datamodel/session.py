from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel
from pydantic.config import ConfigDict


class SessionState(StrEnum):
    UNAUTHENTICATED = "UNAUTHENTICATED"
    AUTHENTICATING = "AUTHENTICATING"
    AUTHENTICATED = "AUTHENTICATED"


class Challenge(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    uid: str


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)
    token: str
    address: str
