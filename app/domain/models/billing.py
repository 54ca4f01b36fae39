"""Invoice line and GST breakdown value types."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from app.domain.money import HUNDRED, ZERO, money, non_negative, percent


@dataclass(frozen=True)
class LineItem:
    quantity: Decimal
    unit_price: Decimal
    discount_percent: Decimal = ZERO
    tax_rate_percent: Decimal = ZERO
    hsn_sac_code: str | None = None
    description: str = ""

    @classmethod
    def create(
        cls,
        quantity: Any,
        unit_price: Any,
        discount_percent: Any = 0,
        tax_rate_percent: Any = 0,
        hsn_sac_code: str | None = None,
        description: str = "",
    ) -> "LineItem":
        """Validated constructor; raises InvalidInputError on bad numbers."""
        return cls(
            quantity=non_negative(quantity, "quantity"),
            unit_price=non_negative(unit_price, "unit_price"),
            discount_percent=percent(discount_percent, "discount_percent"),
            tax_rate_percent=percent(tax_rate_percent, "tax_rate_percent"),
            hsn_sac_code=(hsn_sac_code or "").strip() or None,
            description=description or "",
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LineItem":
        """Build from an ``invoice_items`` row."""
        return cls.create(
            quantity=row.get("quantity"),
            unit_price=row.get("unit_price"),
            discount_percent=row.get("discount_percent") or 0,
            tax_rate_percent=row.get("tax_rate") or 0,
            hsn_sac_code=row.get("hsn_sac_code"),
            description=row.get("description") or "",
        )

    @property
    def gross_amount(self) -> Decimal:
        return money(self.quantity * self.unit_price)

    @property
    def discount_amount(self) -> Decimal:
        return money(self.gross_amount * self.discount_percent / HUNDRED)

    @property
    def taxable_value(self) -> Decimal:
        return self.gross_amount - self.discount_amount

    @property
    def tax_amount(self) -> Decimal:
        return money(self.taxable_value * self.tax_rate_percent / HUNDRED)


@dataclass(frozen=True)
class TaxBreakdown:
    """GST split for one line. ``igst`` is zero intrastate, ``cgst``/``sgst`` zero interstate."""
    taxable_value: Decimal
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO

    @property
    def tax_amount(self) -> Decimal:
        return self.cgst + self.sgst + self.igst

    @property
    def total(self) -> Decimal:
        return self.taxable_value + self.tax_amount

    def to_dict(self) -> dict[str, str]:
        return {
            "taxable_value": str(self.taxable_value),
            "cgst": str(self.cgst),
            "sgst": str(self.sgst),
            "igst": str(self.igst),
            "tax_amount": str(self.tax_amount),
            "total": str(self.total),
        }


@dataclass
class DocumentTotals:
    subtotal: Decimal = ZERO
    discount: Decimal = ZERO
    shipping_charges: Decimal = ZERO
    taxable_amount: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    total_tax: Decimal = ZERO
    grand_total: Decimal = ZERO
    is_interstate: bool = False
    lines: list[TaxBreakdown] = field(default_factory=list)
