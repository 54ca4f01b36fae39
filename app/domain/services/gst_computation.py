# app/domain/services/gst_computation.py
"""
Per-line and per-document GST computation.

Intrastate supplies split the tax into CGST + SGST, each computed at half
the rate and rounded independently so the two halves are always equal.
Interstate supplies carry the whole tax as IGST.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable

from app.domain.errors import InvalidInputError
from app.domain.models.billing import DocumentTotals, LineItem, TaxBreakdown
from app.domain.money import HUNDRED, ZERO, money, non_negative

logger = logging.getLogger("gst_computation")

TWO = Decimal("2")


def split_tax(taxable_value: Decimal, rate_percent: Decimal, is_interstate: bool) -> TaxBreakdown:
    """Apply *rate_percent* to an already-computed taxable value."""
    if rate_percent == ZERO or taxable_value == ZERO:
        return TaxBreakdown(taxable_value=taxable_value)

    if is_interstate:
        igst = money(taxable_value * rate_percent / HUNDRED)
        return TaxBreakdown(taxable_value=taxable_value, igst=igst)

    half = money(taxable_value * rate_percent / HUNDRED / TWO)
    return TaxBreakdown(taxable_value=taxable_value, cgst=half, sgst=half)


def compute_line(item: LineItem, is_interstate: bool) -> TaxBreakdown:
    """Tax breakdown for a single line item."""
    if item.quantity < ZERO or item.unit_price < ZERO:
        raise InvalidInputError("quantity and unit_price cannot be negative")
    if item.tax_rate_percent < ZERO or item.tax_rate_percent > HUNDRED:
        raise InvalidInputError("tax_rate_percent must be between 0 and 100")
    if item.discount_percent < ZERO or item.discount_percent > HUNDRED:
        raise InvalidInputError("discount_percent must be between 0 and 100")

    return split_tax(item.taxable_value, item.tax_rate_percent, is_interstate)


def compute_document(
    items: Iterable[LineItem],
    is_interstate: bool,
    shipping_charges: Any = 0,
    invoice_discount: Any = 0,
) -> DocumentTotals:
    """
    Sum per-line breakdowns into document totals.

    The invoice-level discount and shipping adjust the taxable amount after
    per-line tax has been computed; they do not change the tax itself.
    """
    shipping = money(non_negative(shipping_charges, "shipping_charges"))
    extra_discount = money(non_negative(invoice_discount, "invoice_discount"))

    totals = DocumentTotals(is_interstate=is_interstate, shipping_charges=shipping)
    line_discounts = ZERO

    for item in items:
        breakdown = compute_line(item, is_interstate)
        totals.lines.append(breakdown)
        totals.subtotal += item.gross_amount
        line_discounts += item.discount_amount
        totals.cgst += breakdown.cgst
        totals.sgst += breakdown.sgst
        totals.igst += breakdown.igst

    totals.discount = line_discounts + extra_discount
    totals.taxable_amount = totals.subtotal - totals.discount + shipping
    if totals.taxable_amount < ZERO:
        raise InvalidInputError("invoice_discount exceeds the discounted subtotal")

    totals.total_tax = totals.cgst + totals.sgst + totals.igst
    totals.grand_total = totals.taxable_amount + totals.total_tax

    logger.debug(
        "Computed document totals: lines=%d taxable=%s tax=%s interstate=%s",
        len(totals.lines), totals.taxable_amount, totals.total_tax, is_interstate,
    )
    return totals
