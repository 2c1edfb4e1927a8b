from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from veil_client.dal.datamodel.order import Order


class MarketStatus(StrEnum):
    OPEN = "open"
    RESOLVED = "resolved"


class Market(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, coerce_numbers_to_str=True)
    slug: str
    uid: str
    ends_at: Optional[int | str] = None
    short_token: str
    long_token: str
    num_ticks: str
    min_price: Optional[str] = None
    max_price: Optional[str] = None
    orders: Optional[list[Order]] = None
    index: Optional[str] = None
    limit_price: Optional[str] = None
    type: Optional[str] = None
    name: Optional[str] = Field(default=None, description="Human-readable question")

    @property
    def is_scalar(self) -> bool:
        return bool(self.min_price) and bool(self.max_price)
