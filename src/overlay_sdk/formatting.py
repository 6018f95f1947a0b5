"""Fixed-point formatting helpers.

On-chain values are integers scaled by ``10**decimals`` (18 for every
Overlay amount, price and rate). All rescaling is done with ``Decimal`` in a
wide local context so no integer digit is lost before the final rounding.
"""
from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

# uint256 has 78 digits; leave room for the fractional part on top.
DECIMAL_PRECISION = 120

SECONDS_PER_DAY = 86_400

FixedPointLike = Union[int, str, Decimal]


def _quantum(places: int) -> Decimal:
    return Decimal(1).scaleb(-places)


def to_decimal(value: FixedPointLike, decimals: int = 18) -> Decimal:
    """Rescale a fixed-point integer to a plain ``Decimal``, exactly."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return Decimal(int(value)).scaleb(-decimals)


def truncate_decimal(value: Decimal, places: int) -> Decimal:
    """Cut *value* to *places* fractional digits, rounding toward zero."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        return value.quantize(_quantum(places), rounding=ROUND_DOWN)


def format_fixed_point(
    value: FixedPointLike,
    source_decimals: int = 18,
    target_decimals: int = 4,
    as_number: bool = False,
) -> Union[str, float]:
    """Format a fixed-point integer with *target_decimals* fractional digits.

    Returns a plain decimal string (``"1234.5000"``) by default. With
    ``as_number`` the rounded value is returned as a ``float`` and standard
    double rounding applies.
    """
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        scaled = Decimal(int(value)).scaleb(-source_decimals)
        rounded = scaled.quantize(_quantum(target_decimals), rounding=ROUND_HALF_UP)
    if as_number:
        return float(rounded)
    return format(rounded, "f")


def format_funding_rate_to_daily(
    rate: FixedPointLike,
    decimals: int = 18,
    output_decimals: int = 2,
) -> str:
    """Convert a per-second funding rate into a daily percentage string."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        daily = to_decimal(rate, decimals) * SECONDS_PER_DAY * 100
        return format(
            daily.quantize(_quantum(output_decimals), rounding=ROUND_HALF_UP),
            "f",
        )


def percentage_of_total(part: int, total: int, places: int = 2) -> Optional[str]:
    """``part / total * 100`` truncated to *places*; ``None`` when total is zero."""
    if total == 0:
        return None
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        pct = Decimal(int(part)) * 100 / Decimal(int(total))
        return format(truncate_decimal(pct, places), "f")


def to_fixed_point(value: Union[str, int, float, Decimal], decimals: int = 18) -> int:
    """Parse a human amount (``"1.5"``) into a fixed-point integer, truncating."""
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        scaled = Decimal(str(value)).scaleb(decimals)
        return int(scaled.to_integral_value(rounding=ROUND_DOWN))
