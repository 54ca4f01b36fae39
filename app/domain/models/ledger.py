"""Ledger and day-book value types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from app.domain.errors import InvalidInputError
from app.domain.money import ZERO


class PartyType(str, Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


@dataclass(frozen=True)
class DateRange:
    """Inclusive on both ends."""
    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidInputError(f"start date {self.start} is after end date {self.end}")

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class DayBookEntry:
    id: str
    date: date
    particulars: str
    voucher_type: str
    voucher_number: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LedgerEntry(DayBookEntry):
    running_balance: Decimal = ZERO
