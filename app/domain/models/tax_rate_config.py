# app/domain/models/tax_rate_config.py
"""
Income-tax slab tables and the parameters that go with them.

TaxSlab: one band ``[min, max)`` taxed at ``rate`` percent; ``max=None``
means unbounded and is only allowed on the last band.
ITRSlabConfig: slabs for both regimes plus rebate, deduction and cess limits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Sequence

from app.domain.errors import InvalidInputError

ZERO = Decimal("0")


@dataclass(frozen=True)
class TaxSlab:
    min: Decimal
    max: Decimal | None
    rate: Decimal

    @property
    def label(self) -> str:
        if self.max is None:
            return f"{int(self.min):,}+"
        return f"{int(self.min):,} - {int(self.max):,}"


def validate_slabs(slabs: Sequence[TaxSlab]) -> None:
    """Slabs must start at 0, be contiguous and end unbounded."""
    if not slabs:
        raise InvalidInputError("Slab table is empty")
    if slabs[0].min != ZERO:
        raise InvalidInputError("First slab must start at 0")
    for prev, cur in zip(slabs, slabs[1:]):
        if prev.max is None:
            raise InvalidInputError("Only the last slab may be unbounded")
        if cur.min != prev.max:
            raise InvalidInputError(
                f"Slabs must be contiguous: {prev.label} is followed by {cur.label}"
            )
    for slab in slabs:
        if slab.max is not None and slab.max <= slab.min:
            raise InvalidInputError(f"Slab {slab.label} is empty or inverted")
        if slab.rate < ZERO or slab.rate > Decimal("100"):
            raise InvalidInputError(f"Slab {slab.label} has rate outside 0-100%")
    if slabs[-1].max is not None:
        raise InvalidInputError("Last slab must be unbounded")


def _slabs(*bands: tuple[int, int | None, int]) -> list[TaxSlab]:
    return [
        TaxSlab(Decimal(lo), Decimal(hi) if hi is not None else None, Decimal(rate))
        for lo, hi, rate in bands
    ]


@dataclass
class ITRSlabConfig:
    """All income-tax parameters for one financial year."""

    financial_year: str = "2025-2026"

    old_regime_slabs: list[TaxSlab] = field(default_factory=lambda: _slabs(
        (0, 250000, 0),
        (250000, 500000, 5),
        (500000, 1000000, 20),
        (1000000, None, 30),
    ))
    new_regime_slabs: list[TaxSlab] = field(default_factory=lambda: _slabs(
        (0, 300000, 0),
        (300000, 700000, 5),
        (700000, 1000000, 10),
        (1000000, 1200000, 15),
        (1200000, 1500000, 20),
        (1500000, None, 30),
    ))

    # Rebate u/s 87A
    rebate_87a_old_limit: Decimal = Decimal("500000")
    rebate_87a_new_limit: Decimal = Decimal("700000")
    rebate_87a_max: Decimal = Decimal("12500")

    # Deductions
    standard_deduction: Decimal = Decimal("50000")
    section_80c_max: Decimal = Decimal("150000")

    # Presumptive taxation u/s 44ADA
    presumptive_receipts_cap: Decimal = Decimal("5000000")
    presumptive_rate: Decimal = Decimal("50")

    cess_rate: Decimal = Decimal("4")

    def __post_init__(self) -> None:
        validate_slabs(self.old_regime_slabs)
        validate_slabs(self.new_regime_slabs)

    def slabs_for(self, regime: str) -> list[TaxSlab]:
        if regime == "old":
            return self.old_regime_slabs
        if regime == "new":
            return self.new_regime_slabs
        raise InvalidInputError(f"Unknown tax regime: {regime!r}")

    def rebate_limit_for(self, regime: str) -> Decimal:
        return self.rebate_87a_old_limit if regime == "old" else self.rebate_87a_new_limit


DEFAULT_SLAB_CONFIG = ITRSlabConfig()
