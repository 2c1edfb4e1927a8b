from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel
from pydantic.config import ConfigDict

from veil_client.dal.datamodel.order import Side


class OrderFillStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"


class OrderFill(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    uid: str
    price: str
    side: Side
    token_amount: str
    status: OrderFillStatus
    created_at: Optional[int | str] = None


class OrderBookRow(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    price: str
    token_amount: str
