"""Fixed-point conversions between decimal amounts, wei and market ticks.

Decimal amounts given as ``float``/``int`` are read through ``str()`` so a
float like ``0.1`` maps to ``Decimal("0.1")`` rather than its binary
approximation. All arithmetic runs in a 78-digit context, enough for any
uint256 value.
"""
from decimal import Context, Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_UP, localcontext
from typing import Union

from veil_client.exceptions import NumericParseError

Numeric = Union[Decimal, int, float, str]

WEI_DECIMALS = 18
TEN_18 = Decimal(10) ** WEI_DECIMALS

_CONTEXT = Context(prec=78, rounding=ROUND_HALF_UP)


def to_decimal(value: Numeric) -> Decimal:
    if isinstance(value, bool):
        raise NumericParseError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        out = value
    else:
        try:
            out = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as e:
            raise NumericParseError(f"Not a number: {value!r}") from e
    if not out.is_finite():
        raise NumericParseError(f"Not a finite number: {value!r}")
    return out


def to_wei(amount: Numeric) -> Decimal:
    with localcontext(_CONTEXT):
        return (to_decimal(amount) * TEN_18).to_integral_value(rounding=ROUND_DOWN)


def from_wei(amount: Numeric) -> Decimal:
    with localcontext(_CONTEXT):
        return to_decimal(amount) / TEN_18


def to_shares(amount: Numeric, num_ticks: Numeric) -> Decimal:
    """Decimal outcome-token quantity -> tick-denominated units (unrounded)."""
    with localcontext(_CONTEXT):
        return to_decimal(amount) * TEN_18 / _positive(num_ticks)


def from_shares(amount: Numeric, num_ticks: Numeric) -> Decimal:
    with localcontext(_CONTEXT):
        return to_decimal(amount) * _positive(num_ticks) / TEN_18


def price_to_ticks(price: Numeric, num_ticks: Numeric) -> Decimal:
    """Price as a fraction of the market range -> tick units (unrounded)."""
    with localcontext(_CONTEXT):
        return to_decimal(price) * _positive(num_ticks)


def round_ticks(value: Numeric) -> Decimal:
    # ties away from zero
    with localcontext(_CONTEXT):
        return to_decimal(value).to_integral_value(rounding=ROUND_HALF_UP)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    if value < low:
        return low
    if value > high:
        return high
    return value


def to_int_string(value: Numeric) -> str:
    """Wire form of an integral amount, never in exponent notation."""
    return str(int(round_ticks(value)))


def _positive(num_ticks: Numeric) -> Decimal:
    n = to_decimal(num_ticks)
    if n <= 0:
        raise NumericParseError(f"num_ticks must be positive, got {num_ticks!r}")
    return n
