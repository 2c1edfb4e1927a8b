from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict


class Side(StrEnum):
    BUY = "buy"
    SELL = "sell"


class TokenType(StrEnum):
    LONG = "long"
    SHORT = "short"


class OrderStatus(StrEnum):
    OPEN = "open"
    FILLED = "filled"
    CANCELED = "canceled"


class Order(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    uid: str
    price: str
    side: Side
    token_amount: str
    token_amount_unfilled: Optional[str] = None
    status: OrderStatus
    token_type: Optional[TokenType] = None
    created_at: Optional[int | str] = None

    @property
    def is_open(self) -> bool:
        return self.status == OrderStatus.OPEN
