# app/domain/services/reports.py
"""
Profit & loss and bill-wise profit.

Bill-wise profit needs a cost per line.  When the item's purchase price is
unknown, cost falls back to ``settings.ASSUMED_COST_RATIO`` of the sale
price and the row is flagged ``cost_assumed`` so the figure is never
mistaken for an actual margin.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from app.core.config import settings
from app.domain.models.ledger import DateRange
from app.domain.money import HUNDRED, ZERO, money, to_decimal
from app.domain.services.ledger_service import CANCELLED, fetch_rows
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("reports")

WALK_IN = "Walk-in"


@dataclass
class ProfitAndLoss:
    total_revenue: Decimal = ZERO
    total_cost: Decimal = ZERO
    gross_profit: Decimal = ZERO
    total_tax: Decimal = ZERO
    net_profit: Decimal = ZERO
    invoice_count: int = 0
    purchase_count: int = 0


def _booked(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # drafts are filtered in the query; cancelled documents never count
    return [r for r in rows if r.get("status") != CANCELLED]


def _sales_filters(user_id: str, date_range: DateRange) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "document_type": "invoice",
        "status__ne": "draft",
        "invoice_date__gte": date_range.start,
        "invoice_date__lte": date_range.end,
    }


async def profit_and_loss(
    gateway: PersistenceGateway, user_id: str, date_range: DateRange,
) -> ProfitAndLoss:
    invoices = _booked(await fetch_rows(gateway, "invoices", _sales_filters(user_id, date_range)))
    orders = _booked(await fetch_rows(gateway, "purchase_orders", {
        "user_id": user_id,
        "status__ne": "draft",
        "order_date__gte": date_range.start,
        "order_date__lte": date_range.end,
    }))

    revenue = money(sum((to_decimal(i.get("subtotal")) for i in invoices), ZERO))
    tax = money(sum((to_decimal(i.get("tax_amount")) for i in invoices), ZERO))
    cost = money(sum((to_decimal(p.get("total_amount")) for p in orders), ZERO))
    gross = revenue - cost

    return ProfitAndLoss(
        total_revenue=revenue,
        total_cost=cost,
        gross_profit=gross,
        total_tax=tax,
        # no operating expenses are tracked against sales yet
        net_profit=gross,
        invoice_count=len(invoices),
        purchase_count=len(orders),
    )


def line_cost(item: dict[str, Any], cost_ratio: Decimal) -> tuple[Decimal, bool]:
    """(cost of the line, whether the cost was assumed)."""
    quantity = to_decimal(item.get("quantity"))
    purchase_price = item.get("purchase_price")
    if purchase_price is not None and to_decimal(purchase_price) > ZERO:
        return to_decimal(purchase_price) * quantity, False
    return to_decimal(item.get("unit_price")) * cost_ratio * quantity, True


async def bill_wise_profit(
    gateway: PersistenceGateway,
    user_id: str,
    date_range: DateRange,
    cost_ratio: Decimal | None = None,
) -> list[dict[str, Any]]:
    """Per-invoice revenue, cost, profit and margin, newest first."""
    ratio = settings.ASSUMED_COST_RATIO if cost_ratio is None else to_decimal(cost_ratio)
    invoices = _booked(await fetch_rows(
        gateway, "invoices", _sales_filters(user_id, date_range), order_by=["-invoice_date"],
    ))
    if not invoices:
        return []

    invoice_ids = sorted(str(i["id"]) for i in invoices)
    items = await fetch_rows(gateway, "invoice_items", {"invoice_id__in": invoice_ids})
    customer_ids = sorted({str(i["customer_id"]) for i in invoices if i.get("customer_id")})
    customers = (
        await fetch_rows(gateway, "customers", {"user_id": user_id, "id__in": customer_ids})
        if customer_ids else []
    )
    names = {str(c["id"]): c.get("name") for c in customers}

    items_by_invoice: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for item in items:
        items_by_invoice[str(item["invoice_id"])].append(item)

    rows = []
    assumed_count = 0
    for inv in invoices:
        cost = ZERO
        assumed = False
        for item in items_by_invoice.get(str(inv["id"]), []):
            amount, was_assumed = line_cost(item, ratio)
            cost += amount
            assumed = assumed or was_assumed
        cost = money(cost)
        revenue = money(inv.get("subtotal"))
        profit = revenue - cost
        margin = money(profit / revenue * HUNDRED) if revenue else ZERO
        assumed_count += assumed

        rows.append({
            "id": str(inv["id"]),
            "invoice_number": inv.get("invoice_number"),
            "invoice_date": inv.get("invoice_date"),
            "customer_name": names.get(str(inv.get("customer_id"))) or WALK_IN,
            "revenue": revenue,
            "cost": cost,
            "profit": profit,
            "profit_margin": margin,
            "cost_assumed": assumed,
        })

    if assumed_count:
        logger.info(
            "Bill-wise profit: %d of %d invoices use the assumed cost ratio %s",
            assumed_count, len(rows), ratio,
        )
    return rows
