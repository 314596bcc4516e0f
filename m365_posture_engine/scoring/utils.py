"""Numeric helpers shared by the scoring stages."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def to_decimal(value: Number) -> Decimal:
    # str() keeps the shortest repr, so 0.3 stays 0.3 instead of 0.2999…
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number) -> int:
    """Round to the nearest integer, halves away from zero (71.5 → 72)."""
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def ratio_percent(numerator: Optional[Number], denominator: Optional[Number]) -> Optional[Decimal]:
    """numerator / denominator × 100, or None when either is absent or the denominator is not positive."""
    if numerator is None or denominator is None:
        return None
    num, denom = to_decimal(numerator), to_decimal(denominator)
    if not (num.is_finite() and denom.is_finite()) or denom <= 0:
        return None
    return num / denom * 100


def clamp_score(value: Number) -> Decimal:
    return max(Decimal(0), min(Decimal(100), to_decimal(value)))
