# app/domain/money.py
"""Decimal money helpers shared by every computation module.

All published monetary values are rounded ROUND_HALF_UP to 2 places.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.domain.errors import InvalidInputError

ZERO = Decimal("0")
HUNDRED = Decimal("100")
PAISA = Decimal("0.01")


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """Convert int/str/float/Decimal/None to Decimal (``None`` -> 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        raise InvalidInputError(f"{field_name} must be a number")
    else:
        try:
            result = Decimal(str(value))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidInputError(f"{field_name} must be a number, got {value!r}")
    if not result.is_finite():
        raise InvalidInputError(f"{field_name} must be a finite number")
    return result


def money(value: Any) -> Decimal:
    """Round to paise, half-up."""
    return to_decimal(value).quantize(PAISA, rounding=ROUND_HALF_UP)


def non_negative(value: Any, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount < ZERO:
        raise InvalidInputError(f"{field_name} cannot be negative")
    return amount


def percent(value: Any, field_name: str) -> Decimal:
    """A percentage in [0, 100]."""
    pct = non_negative(value, field_name)
    if pct > HUNDRED:
        raise InvalidInputError(f"{field_name} cannot exceed 100%")
    return pct
