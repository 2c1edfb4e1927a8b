from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class DataFeedScope(StrEnum):
    DAY = "day"
    MONTH = "month"


class DataFeedEntry(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    value: str
    timestamp: int


class DataFeed(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    uid: str
    name: str
    description: Optional[str] = None
    denomination: Optional[str] = None
    entries: list[DataFeedEntry] = Field(default_factory=list)
