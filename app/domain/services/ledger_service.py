# app/domain/services/ledger_service.py
"""
Party ledger and day book.

Both views merge three independently fetched event streams (sales
invoices, payment receipts, purchase orders) and sort them by date.  On the
same date, sales come before receipts, which come before purchases; within a
stream the fetch order is kept, and a purchase payment follows its order.

The party ledger then runs a balance from 0 across the window (no carry in
from earlier periods).  If any fetch fails the whole view fails with
AggregationError; a ledger is never built from partial data.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.errors import AggregationError
from app.domain.models.ledger import DateRange, DayBookEntry, LedgerEntry, PartyType
from app.domain.money import ZERO, money, to_decimal
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("ledger_service")

SALES, RECEIPTS, PURCHASES = "sales", "receipts", "purchases"

# same-date ordering
STREAM_RANK = {SALES: 0, RECEIPTS: 1, PURCHASES: 2}

# stream -> (side, ledger particulars, ledger voucher type, day-book voucher type)
LEDGER_MAPPING = {
    SALES: ("debit", "Sales Invoice", "Invoice", "Sales"),
    RECEIPTS: ("credit", "Payment Received", "Receipt", "Receipt"),
    PURCHASES: ("credit", "Purchase Order", "Purchase", "Purchase"),
    "purchase_payments": ("debit", "Payment Made", "Payment", "Payment"),
}

WALK_IN_CUSTOMER = "Walk-in Customer"
UNKNOWN_SUPPLIER = "Unknown Supplier"

# cancelled documents never reach the books
CANCELLED = "cancelled"


def _as_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


async def fetch_rows(
    gateway: PersistenceGateway,
    collection: str,
    filters: dict[str, Any],
    order_by: list[str] | None = None,
) -> list[dict[str, Any]]:
    try:
        return await gateway.query(collection, filters, order_by=order_by)
    except Exception as exc:
        logger.error("Fetch from %s failed: %s", collection, exc)
        raise AggregationError(f"Could not load {collection}", cause=exc) from exc


def _range_filters(field_name: str, date_range: DateRange) -> dict[str, Any]:
    return {f"{field_name}__gte": date_range.start, f"{field_name}__lte": date_range.end}


def _voucher_for_payment(payment: dict[str, Any]) -> str:
    return payment.get("reference_number") or str(payment["id"])[:8]


def _sorted(entries: list[tuple[date, int, DayBookEntry]]) -> list[DayBookEntry]:
    # sorted() is stable, so insertion order breaks any remaining ties.
    # Zero-value documents post nothing to either side and are dropped.
    return [
        e for _, _, e in sorted(entries, key=lambda t: (t[0], t[1]))
        if e.debit != ZERO or e.credit != ZERO
    ]


def _entry(cls, stream: str, row_id: str, day: date, particulars: str,
           voucher_type: str, voucher_number: str, amount: Decimal) -> DayBookEntry:
    side = LEDGER_MAPPING[stream][0]
    value = money(amount)
    return cls(
        id=str(row_id),
        date=day,
        particulars=particulars,
        voucher_type=voucher_type,
        voucher_number=voucher_number or "",
        debit=value if side == "debit" else ZERO,
        credit=value if side == "credit" else ZERO,
    )


# ---------------------------------------------------------------------------
# Party ledger
# ---------------------------------------------------------------------------

async def build_ledger(
    gateway: PersistenceGateway,
    user_id: str,
    party_id: str,
    party_type: PartyType | str,
    date_range: DateRange,
) -> list[LedgerEntry]:
    party_type = PartyType(party_type)
    staged: list[tuple[date, int, DayBookEntry]] = []

    if party_type is PartyType.CUSTOMER:
        invoices = await fetch_rows(gateway, "invoices", {
            "user_id": user_id,
            "customer_id": party_id,
            "status__ne": CANCELLED,
            **_range_filters("invoice_date", date_range),
        }, order_by=["invoice_date"])
        payments = await fetch_rows(gateway, "payments", {
            "user_id": user_id,
            "customer_id": party_id,
            **_range_filters("payment_date", date_range),
        }, order_by=["payment_date"])

        _, particulars, voucher_type, _ = LEDGER_MAPPING[SALES]
        for inv in invoices:
            day = _as_date(inv["invoice_date"])
            staged.append((day, STREAM_RANK[SALES], _entry(
                LedgerEntry, SALES, inv["id"], day, particulars, voucher_type,
                inv.get("invoice_number"), to_decimal(inv.get("total_amount")),
            )))

        _, particulars, voucher_type, _ = LEDGER_MAPPING[RECEIPTS]
        for pay in payments:
            day = _as_date(pay["payment_date"])
            staged.append((day, STREAM_RANK[RECEIPTS], _entry(
                LedgerEntry, RECEIPTS, pay["id"], day, particulars, voucher_type,
                _voucher_for_payment(pay), to_decimal(pay.get("amount")),
            )))
    else:
        orders = await fetch_rows(gateway, "purchase_orders", {
            "user_id": user_id,
            "supplier_id": party_id,
            "status__ne": CANCELLED,
            **_range_filters("order_date", date_range),
        }, order_by=["order_date"])

        for po in orders:
            day = _as_date(po["order_date"])
            _, particulars, voucher_type, _ = LEDGER_MAPPING[PURCHASES]
            staged.append((day, STREAM_RANK[PURCHASES], _entry(
                LedgerEntry, PURCHASES, po["id"], day, particulars, voucher_type,
                po.get("order_number"), to_decimal(po.get("total_amount")),
            )))
            paid = to_decimal(po.get("paid_amount"))
            if paid > ZERO:
                _, particulars, voucher_type, _ = LEDGER_MAPPING["purchase_payments"]
                staged.append((day, STREAM_RANK[PURCHASES], _entry(
                    LedgerEntry, "purchase_payments", f"{po['id']}-payment", day,
                    particulars, voucher_type, po.get("order_number"), paid,
                )))

    entries = _sorted(staged)
    balance = ZERO
    for entry in entries:
        balance += entry.debit - entry.credit
        entry.running_balance = balance

    logger.debug("Built %s ledger for %s: %d entries", party_type.value, party_id, len(entries))
    return entries


# ---------------------------------------------------------------------------
# Day book
# ---------------------------------------------------------------------------

async def _names(gateway: PersistenceGateway, collection: str, user_id: str, ids: set[str]) -> dict[str, str]:
    if not ids:
        return {}
    rows = await fetch_rows(gateway, collection, {"user_id": user_id, "id__in": sorted(ids)})
    return {str(r["id"]): r.get("name") or "" for r in rows}


async def build_day_book(
    gateway: PersistenceGateway,
    user_id: str,
    date_range: DateRange,
) -> list[DayBookEntry]:
    """Every sale, receipt and purchase in the window, across all parties."""
    invoices = await fetch_rows(gateway, "invoices", {
        "user_id": user_id,
        "status__ne": CANCELLED,
        **_range_filters("invoice_date", date_range),
    }, order_by=["invoice_date"])
    payments = await fetch_rows(gateway, "payments", {
        "user_id": user_id,
        **_range_filters("payment_date", date_range),
    }, order_by=["payment_date"])
    orders = await fetch_rows(gateway, "purchase_orders", {
        "user_id": user_id,
        "status__ne": CANCELLED,
        **_range_filters("order_date", date_range),
    }, order_by=["order_date"])

    customers = await _names(
        gateway, "customers", user_id, {str(i["customer_id"]) for i in invoices if i.get("customer_id")},
    )
    suppliers = await _names(
        gateway, "suppliers", user_id, {str(p["supplier_id"]) for p in orders if p.get("supplier_id")},
    )

    staged: list[tuple[date, int, DayBookEntry]] = []
    for inv in invoices:
        day = _as_date(inv["invoice_date"])
        name = customers.get(str(inv.get("customer_id"))) or WALK_IN_CUSTOMER
        staged.append((day, STREAM_RANK[SALES], _entry(
            DayBookEntry, SALES, inv["id"], day, name, LEDGER_MAPPING[SALES][3],
            inv.get("invoice_number"), to_decimal(inv.get("total_amount")),
        )))
    for pay in payments:
        day = _as_date(pay["payment_date"])
        particulars = f"Payment for {pay.get('invoice_number') or 'N/A'} ({pay.get('payment_method') or 'cash'})"
        staged.append((day, STREAM_RANK[RECEIPTS], _entry(
            DayBookEntry, RECEIPTS, pay["id"], day, particulars, LEDGER_MAPPING[RECEIPTS][3],
            _voucher_for_payment(pay), to_decimal(pay.get("amount")),
        )))
    for po in orders:
        day = _as_date(po["order_date"])
        name = suppliers.get(str(po.get("supplier_id"))) or UNKNOWN_SUPPLIER
        staged.append((day, STREAM_RANK[PURCHASES], _entry(
            DayBookEntry, PURCHASES, po["id"], day, name, LEDGER_MAPPING[PURCHASES][3],
            po.get("order_number"), to_decimal(po.get("total_amount")),
        )))

    return _sorted(staged)


def day_book_totals(entries: list[DayBookEntry]) -> dict[str, Decimal]:
    debit = sum((e.debit for e in entries), ZERO)
    credit = sum((e.credit for e in entries), ZERO)
    return {"total_debit": debit, "total_credit": credit, "net": debit - credit}


# ---------------------------------------------------------------------------
# Outstanding balances
# ---------------------------------------------------------------------------

async def party_outstanding(
    gateway: PersistenceGateway,
    user_id: str,
    party_type: PartyType | str,
) -> list[dict[str, Any]]:
    """Parties that owe (customers) or are owed (suppliers) money, largest first."""
    party_type = PartyType(party_type)
    owed: dict[str, Decimal] = defaultdict(lambda: ZERO)

    if party_type is PartyType.CUSTOMER:
        invoices = await fetch_rows(gateway, "invoices", {
            "user_id": user_id, "status__in": ["sent", "partial", "overdue"],
        })
        for inv in invoices:
            if inv.get("customer_id"):
                owed[str(inv["customer_id"])] += to_decimal(inv.get("balance_due"))
        collection = "customers"
    else:
        orders = await fetch_rows(gateway, "purchase_orders", {
            "user_id": user_id, "status__ne": CANCELLED,
        })
        for po in orders:
            if po.get("supplier_id") and po.get("status") != "draft":
                owed[str(po["supplier_id"])] += (
                    to_decimal(po.get("total_amount")) - to_decimal(po.get("paid_amount"))
                )
        collection = "suppliers"

    positive = {pid: money(amount) for pid, amount in owed.items() if amount > ZERO}
    if not positive:
        return []
    parties = await fetch_rows(gateway, collection, {"user_id": user_id, "id__in": sorted(positive)})
    result = [
        {
            "id": str(p["id"]),
            "name": p.get("name"),
            "phone": p.get("phone"),
            "outstanding_balance": positive[str(p["id"])],
        }
        for p in parties
    ]
    result.sort(key=lambda r: r["outstanding_balance"], reverse=True)
    return result
