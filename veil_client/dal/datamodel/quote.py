from __future__ import annotations

from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict


class ZeroExOrder(BaseModel):
    """Unsigned 0x v2 order as handed out inside a quote.

    Fields are snake_case locally and serialize back to camelCase with
    ``to_wire()``.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)
    maker_address: str
    taker_address: str
    fee_recipient_address: str
    sender_address: str
    maker_asset_amount: str
    taker_asset_amount: str
    maker_fee: str
    taker_fee: str
    expiration_time_seconds: str
    salt: str
    maker_asset_data: str
    taker_asset_data: str
    exchange_address: str

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class SignedZeroExOrder(ZeroExOrder):
    signature: str


class Quote(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)
    uid: str
    zero_ex_order: ZeroExOrder
    price: Optional[str] = None
    token_amount: Optional[str] = None
