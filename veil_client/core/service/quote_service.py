"""Quote request normalization.

``amount`` and ``price`` accept two forms:

* ``int``/``float``: a human-readable decimal. Amounts go through
  ``to_shares``; prices are a fraction of the tick range and get multiplied
  by ``num_ticks``.
* ``Decimal``: already in integer tick units, taken as-is.

Both are then rounded to the nearest tick (ties away from zero) and the
price is clamped to ``[0, num_ticks]``.
"""
from decimal import Decimal
from typing import Any, Union

from veil_client.dal.datamodel.market import Market
from veil_client.dal.datamodel.order import Side, TokenType
from veil_client.exceptions import VeilValidationError
from veil_client.utils.market import token_for
from veil_client.utils.numeric import clamp, price_to_ticks, round_ticks, to_decimal, to_int_string, to_shares

AmountInput = Union[int, float, Decimal]

ORDER_TYPE_LIMIT = "limit"


def parse_side(side: Side | str) -> Side:
    try:
        return Side(side)
    except ValueError:
        raise VeilValidationError(f'Invalid side: "{side}". Must be either "buy" or "sell".') from None


def _check_input(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise VeilValidationError(f"{name} must be a number or a Decimal tick amount, got {value!r}")


def normalize_amount(amount: AmountInput, num_ticks: str) -> Decimal:
    _check_input("amount", amount)
    if not isinstance(amount, Decimal):
        amount = to_shares(amount, num_ticks)
    return round_ticks(amount)


def normalize_price(price: AmountInput, num_ticks: str) -> Decimal:
    _check_input("price", price)
    ticks = to_decimal(num_ticks)
    if isinstance(price, Decimal):
        price = to_decimal(price)
    else:
        price = price_to_ticks(price, ticks)
    return round_ticks(clamp(price, Decimal(0), ticks))


def build_quote_params(
        market: Market,
        side: Side | str,
        token_type: TokenType | str,
        amount: AmountInput,
        price: AmountInput,
) -> dict[str, Any]:
    side = parse_side(side)
    token = token_for(market, token_type)
    token_amount = normalize_amount(amount, market.num_ticks)
    tick_price = normalize_price(price, market.num_ticks)
    return {
        "quote": {
            "side": side.value,
            "token": token,
            "tokenAmount": to_int_string(token_amount),
            "price": to_int_string(tick_price),
            "type": ORDER_TYPE_LIMIT,
        }
    }
