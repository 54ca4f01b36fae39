# app/domain/services/itr_workflow.py
"""
ITR computation workflow.

Aggregates a financial year's income and expense entries, runs the tax
computation and stores one ``itr_computations`` row per (user, FY).
Saving again for the same FY updates that row in place; its
``financial_year`` never changes.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from app.domain.money import ZERO, money, to_decimal
from app.domain.services.financial_year import parse_financial_year
from app.domain.services.itr_service import (
    Deductions,
    ITRComputation,
    ITRInput,
    compute_itr,
)
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("itr_workflow")

# Income categories that count as gross receipts from the profession
PROFESSIONAL_CATEGORIES = frozenset({"professional_fees"})


def _sum(rows: list[dict[str, Any]], key: str) -> Decimal:
    return money(sum((to_decimal(r.get(key)) for r in rows), ZERO))


async def _fetch_entries(
    gateway: PersistenceGateway, user_id: str, financial_year: str,
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    filters = {"user_id": user_id, "financial_year": financial_year}
    income = await gateway.query("income_entries", filters, order_by=["entry_date"])
    expenses = await gateway.query("expense_entries", filters, order_by=["entry_date"])
    return income, expenses


async def get_existing_computation(
    gateway: PersistenceGateway, user_id: str, financial_year: str,
) -> dict[str, Any] | None:
    rows = await gateway.query(
        "itr_computations", {"user_id": user_id, "financial_year": financial_year},
    )
    return rows[0] if rows else None


async def compute_and_save(
    gateway: PersistenceGateway,
    user_id: str,
    financial_year: str,
    regime: str = "new",
    use_presumptive: bool = False,
    deductions: Deductions | None = None,
    advance_tax_paid: Any = 0,
    self_assessment_tax: Any = 0,
) -> tuple[ITRComputation, dict[str, Any]]:
    """Compute the FY's tax from stored entries and upsert the result.

    Returns the computation and the stored row.
    """
    parse_financial_year(financial_year)
    income, expenses = await _fetch_entries(gateway, user_id, financial_year)

    professional = [r for r in income if (r.get("category") or "") in PROFESSIONAL_CATEGORIES]
    other = [r for r in income if (r.get("category") or "") not in PROFESSIONAL_CATEGORIES]
    deductible = [r for r in expenses if r.get("is_deductible") is not False]

    computation = compute_itr(ITRInput(
        financial_year=financial_year,
        regime=regime,
        gross_receipts=_sum(professional, "amount"),
        other_income=_sum(other, "amount"),
        total_expenses=_sum(deductible, "amount"),
        use_presumptive=use_presumptive,
        deductions=deductions or Deductions(),
        tds_paid=_sum(income, "tds_deducted"),
        advance_tax_paid=to_decimal(advance_tax_paid, "advance_tax_paid"),
        self_assessment_tax=to_decimal(self_assessment_tax, "self_assessment_tax"),
    ))

    record = computation.to_record()
    record["user_id"] = user_id
    existing = await get_existing_computation(gateway, user_id, financial_year)
    if existing:
        record["id"] = existing["id"]
        # the FY key is fixed once the row exists
        record["financial_year"] = existing["financial_year"]
        stored = await gateway.update("itr_computations", record)
        logger.info("Updated ITR computation %s for FY %s", existing["id"], financial_year)
    else:
        stored = await gateway.insert("itr_computations", record)
        logger.info("Saved new ITR computation for FY %s", financial_year)

    return computation, stored


async def get_itr_summary(
    gateway: PersistenceGateway, user_id: str, financial_year: str,
) -> dict[str, Any]:
    """Dashboard totals for a financial year."""
    parse_financial_year(financial_year)
    income, expenses = await _fetch_entries(gateway, user_id, financial_year)
    computation = await get_existing_computation(gateway, user_id, financial_year)

    total_income = _sum(income, "amount")
    total_expenses = _sum(expenses, "amount")
    return {
        "financial_year": financial_year,
        "total_income": total_income,
        "total_expenses": total_expenses,
        "total_tds": _sum(income, "tds_deducted"),
        "net_income": total_income - total_expenses,
        "tax_regime": computation.get("tax_regime") if computation else None,
        "tax_liability": money(to_decimal(computation.get("total_tax_liability"))) if computation else ZERO,
        "tax_payable": money(to_decimal(computation.get("tax_payable"))) if computation else ZERO,
        "refund_due": money(to_decimal(computation.get("refund_due"))) if computation else ZERO,
    }
