# app/domain/services/gst_reports.py
"""
GSTR-1 and GSTR-3B summaries built from the books.

The summaries are pure functions over invoice / purchase rows; the
``fetch_*`` wrappers load one month from the gateway.  Taxable value of an
invoice is ``total_amount - tax_amount``.
"""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.errors import InvalidInputError
from app.domain.money import HUNDRED, ZERO, money, to_decimal
from app.domain.services.ledger_service import fetch_rows
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("gst_reports")

# B2C invoices above this value are reported individually (B2CL)
B2CL_THRESHOLD = Decimal("250000")
UNKNOWN_STATE = "Unknown"


def _dec(value: Any) -> Decimal:
    return to_decimal(value)


def _taxable(inv: dict[str, Any]) -> Decimal:
    return _dec(inv.get("total_amount")) - _dec(inv.get("tax_amount"))


# ---------------------------------------------------------------------------
# GSTR-1
# ---------------------------------------------------------------------------

def gstr1_summary(invoices: list[dict[str, Any]]) -> dict[str, Any]:
    """
    B2B rows (customer has a GSTIN), B2C totals grouped by customer state,
    and an overall summary.  Rows are invoice dicts with ``customer_name``,
    ``customer_gstin`` and ``customer_state`` joined in.
    """
    b2b = []
    b2c_by_state: dict[str, dict[str, Any]] = {}

    for inv in invoices:
        taxable = _taxable(inv)
        if inv.get("customer_gstin"):
            b2b.append({
                "invoice_number": inv.get("invoice_number"),
                "invoice_date": inv.get("invoice_date"),
                "customer_name": inv.get("customer_name") or "",
                "customer_gstin": inv["customer_gstin"],
                "place_of_supply": inv.get("place_of_supply") or "",
                "taxable_value": money(taxable),
                "cgst": money(inv.get("cgst_amount")),
                "sgst": money(inv.get("sgst_amount")),
                "igst": money(inv.get("igst_amount")),
                "total_value": money(inv.get("total_amount")),
            })
            continue

        state = inv.get("customer_state") or UNKNOWN_STATE
        bucket = b2c_by_state.setdefault(state, {
            "state": state, "taxable_value": ZERO, "cgst": ZERO,
            "sgst": ZERO, "igst": ZERO, "total_value": ZERO,
        })
        bucket["taxable_value"] += taxable
        bucket["cgst"] += _dec(inv.get("cgst_amount"))
        bucket["sgst"] += _dec(inv.get("sgst_amount"))
        bucket["igst"] += _dec(inv.get("igst_amount"))
        bucket["total_value"] += _dec(inv.get("total_amount"))

    b2c = [
        {k: money(v) if isinstance(v, Decimal) else v for k, v in bucket.items()}
        for bucket in b2c_by_state.values()
    ]

    summary = {
        "total_invoices": len(invoices),
        "total_taxable_value": money(sum((_taxable(i) for i in invoices), ZERO)),
        "total_cgst": money(sum((_dec(i.get("cgst_amount")) for i in invoices), ZERO)),
        "total_sgst": money(sum((_dec(i.get("sgst_amount")) for i in invoices), ZERO)),
        "total_igst": money(sum((_dec(i.get("igst_amount")) for i in invoices), ZERO)),
        "total_tax": money(sum((_dec(i.get("tax_amount")) for i in invoices), ZERO)),
    }
    return {"b2b": b2b, "b2c": b2c, "summary": summary}


def _effective_rate(taxable: Decimal, cgst: Decimal, igst: Decimal) -> Decimal:
    if not taxable:
        return ZERO
    if igst > ZERO:
        return money(igst / taxable * HUNDRED)
    return money(cgst / taxable * HUNDRED * 2)


def _item_detail(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "txval": float(row["taxable_value"]),
        "rt": float(_effective_rate(row["taxable_value"], row["cgst"], row["igst"])),
        "iamt": float(row["igst"]),
        "camt": float(row["cgst"]),
        "samt": float(row["sgst"]),
        "csamt": 0,
    }


def export_gstr1_json(data: dict[str, Any], month: int, year: int, gstin: str) -> dict[str, Any]:
    """GST portal GSTR-1 offline-tool JSON."""
    period = f"{month:02d}{year}"
    b2cl = [row for row in data["b2c"] if row["total_value"] > B2CL_THRESHOLD]
    b2cs = [row for row in data["b2c"] if row["total_value"] <= B2CL_THRESHOLD]
    total_tax = float(data["summary"]["total_tax"])

    return {
        "gstin": gstin,
        "fp": period,
        "gt": total_tax,
        "cur_gt": total_tax,
        "b2b": [
            {
                "ctin": row["customer_gstin"],
                "inv": [{
                    "inum": row["invoice_number"],
                    "idt": str(row["invoice_date"]),
                    "val": float(row["total_value"]),
                    "pos": (row["place_of_supply"] or "").split("-")[0],
                    "rchrg": "N",
                    "inv_typ": "R",
                    "itms": [{"num": 1, "itm_det": _item_detail(row)}],
                }],
            }
            for row in data["b2b"]
        ],
        "b2cl": [
            {
                "pos": row["state"],
                "inv": [{
                    "inum": "Consolidated",
                    "idt": date(year, month, calendar.monthrange(year, month)[1]).isoformat(),
                    "val": float(row["total_value"]),
                    "itms": [{"num": 1, "itm_det": _item_detail(row)}],
                }],
            }
            for row in b2cl
        ],
        "b2cs": [
            {"pos": row["state"], "typ": "OE", **_item_detail(row)}
            for row in b2cs
        ],
    }


# ---------------------------------------------------------------------------
# GSTR-3B
# ---------------------------------------------------------------------------

@dataclass
class TaxHeads:
    taxable_value: Decimal = ZERO
    igst: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    cess: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.igst + self.cgst + self.sgst + self.cess


@dataclass
class Gstr3bSummary:
    outward_supplies: TaxHeads = field(default_factory=TaxHeads)
    itc: TaxHeads = field(default_factory=TaxHeads)
    net_tax_liability: TaxHeads = field(default_factory=TaxHeads)
    total_net_liability: Decimal = ZERO


def gstr3b_summary(invoices: list[dict[str, Any]], purchases: list[dict[str, Any]]) -> Gstr3bSummary:
    """
    Output tax from sales, input tax credit from ITC-eligible purchases.
    Reversed ITC comes off IGST in full and off CGST/SGST half each.
    """
    comp = Gstr3bSummary()

    out = comp.outward_supplies
    for inv in invoices:
        out.taxable_value += _taxable(inv)
        out.igst += _dec(inv.get("igst_amount"))
        out.cgst += _dec(inv.get("cgst_amount"))
        out.sgst += _dec(inv.get("sgst_amount"))

    itc = comp.itc
    for p in purchases:
        if not p.get("itc_eligible", True):
            continue
        reversed_itc = _dec(p.get("itc_reversed"))
        itc.igst += _dec(p.get("igst_amount")) - reversed_itc
        itc.cgst += _dec(p.get("cgst_amount")) - reversed_itc / 2
        itc.sgst += _dec(p.get("sgst_amount")) - reversed_itc / 2

    for heads in (out, itc):
        heads.taxable_value = money(heads.taxable_value)
        heads.igst = money(heads.igst)
        heads.cgst = money(heads.cgst)
        heads.sgst = money(heads.sgst)

    net = comp.net_tax_liability
    net.igst = out.igst - itc.igst
    net.cgst = out.cgst - itc.cgst
    net.sgst = out.sgst - itc.sgst
    net.cess = out.cess - itc.cess
    comp.total_net_liability = out.total - itc.total
    return comp


def export_gstr3b_json(data: Gstr3bSummary, month: int, year: int, gstin: str) -> dict[str, Any]:
    out, itc = data.outward_supplies, data.itc
    return {
        "gstin": gstin,
        "ret_period": f"{month:02d}{year}",
        "sup_details": {
            "osup_det": {
                "txval": float(out.taxable_value),
                "iamt": float(out.igst),
                "camt": float(out.cgst),
                "samt": float(out.sgst),
                "csamt": float(out.cess),
            },
        },
        "itc_elg": {
            "itc_avl": [{
                "ty": "OTH",
                "iamt": float(itc.igst),
                "camt": float(itc.cgst),
                "samt": float(itc.sgst),
                "csamt": float(itc.cess),
            }],
        },
    }


# ---------------------------------------------------------------------------
# Gateway wrappers
# ---------------------------------------------------------------------------

def month_bounds(month: int, year: int) -> tuple[date, date]:
    if not 1 <= month <= 12:
        raise InvalidInputError(f"month must be 1-12, got {month}")
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


async def _sales_for_month(gateway: PersistenceGateway, user_id: str, month: int, year: int) -> list[dict[str, Any]]:
    start, end = month_bounds(month, year)
    invoices = await fetch_rows(gateway, "invoices", {
        "user_id": user_id,
        "status__ne": "cancelled",
        "invoice_date__gte": start,
        "invoice_date__lte": end,
    }, order_by=["invoice_date"])
    return invoices


async def fetch_gstr1(gateway: PersistenceGateway, user_id: str, month: int, year: int) -> dict[str, Any]:
    invoices = await _sales_for_month(gateway, user_id, month, year)
    customer_ids = sorted({str(i["customer_id"]) for i in invoices if i.get("customer_id")})
    customers = (
        await fetch_rows(gateway, "customers", {"user_id": user_id, "id__in": customer_ids})
        if customer_ids else []
    )
    by_id = {str(c["id"]): c for c in customers}

    joined = []
    for inv in invoices:
        customer = by_id.get(str(inv.get("customer_id")), {})
        joined.append({
            **inv,
            "customer_name": customer.get("name"),
            "customer_gstin": customer.get("gstin"),
            "customer_state": customer.get("state"),
        })
    logger.info("GSTR-1 %02d/%d: %d invoices", month, year, len(joined))
    return gstr1_summary(joined)


async def fetch_gstr3b(gateway: PersistenceGateway, user_id: str, month: int, year: int) -> Gstr3bSummary:
    start, end = month_bounds(month, year)
    invoices = await _sales_for_month(gateway, user_id, month, year)
    purchases = await fetch_rows(gateway, "purchases", {
        "user_id": user_id,
        "itc_eligible": True,
        "purchase_date__gte": start,
        "purchase_date__lte": end,
    })
    return gstr3b_summary(invoices, purchases)
