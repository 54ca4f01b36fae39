# app/api/v1/routes/gst.py
"""
GST endpoints: line and document tax, GSTIN lookup, GSTR-1 / GSTR-3B.
"""

from __future__ import annotations

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import get_current_user_id, get_gateway
from app.api.v1.envelope import ok
from app.api.v1.schemas.gst import DocumentTaxRequest, LineTaxRequest
from app.domain.models.billing import DocumentTotals
from app.domain.services import gst_reports
from app.domain.services.amount_in_words import amount_in_words
from app.domain.services.gst_computation import compute_document, compute_line
from app.domain.services.gstin_utils import (
    determine_interstate,
    format_gstin,
    is_valid_gstin,
    place_of_supply,
    state_code_from_gstin,
)
from app.domain.services.ledger_service import fetch_rows
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.gst")

router = APIRouter(prefix="/gst", tags=["GST"])


def _totals_to_dict(totals: DocumentTotals) -> dict:
    data = asdict(totals)
    data["lines"] = [line.to_dict() for line in totals.lines]
    return data


@router.post("/line", response_model=dict)
async def line_tax(body: LineTaxRequest):
    """CGST/SGST or IGST for a single invoice line."""
    breakdown = compute_line(body.item.to_line_item(), body.is_interstate)
    return ok(data=breakdown.to_dict())


@router.post("/document", response_model=dict)
async def document_tax(body: DocumentTaxRequest):
    """Invoice totals.  Interstate is taken from the GSTINs when not given."""
    is_interstate = body.is_interstate
    if is_interstate is None:
        is_interstate = determine_interstate(body.business_gstin, body.customer_gstin)
    totals = compute_document(
        [item.to_line_item() for item in body.items],
        is_interstate,
        shipping_charges=body.shipping_charges,
        invoice_discount=body.invoice_discount,
    )
    data = _totals_to_dict(totals)
    data["amount_in_words"] = amount_in_words(totals.grand_total)
    return ok(data=data)


@router.get("/gstin/{gstin}", response_model=dict)
async def gstin_lookup(gstin: str):
    gstin = gstin.strip().upper()
    valid = is_valid_gstin(gstin)
    state_code = state_code_from_gstin(gstin) if valid else None
    return ok(data={
        "gstin": gstin,
        "valid": valid,
        "formatted": format_gstin(gstin) if valid else None,
        "state_code": state_code,
        "place_of_supply": place_of_supply(state_code) if state_code else None,
    })


async def _business_gstin(gateway: PersistenceGateway, user_id: str) -> str:
    rows = await fetch_rows(gateway, "business_settings", {"user_id": user_id})
    return (rows[0].get("gstin") if rows else None) or ""


@router.get("/reports/gstr1", response_model=dict)
async def gstr1_report(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2017),
    export: bool = Query(False, description="Return the portal JSON instead of the summary"),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    data = await gst_reports.fetch_gstr1(gateway, user_id, month, year)
    if export:
        gstin = await _business_gstin(gateway, user_id)
        return ok(data=gst_reports.export_gstr1_json(data, month, year, gstin))
    return ok(data=data)


@router.get("/reports/gstr3b", response_model=dict)
async def gstr3b_report(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=2017),
    export: bool = Query(False, description="Return the portal JSON instead of the summary"),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    summary = await gst_reports.fetch_gstr3b(gateway, user_id, month, year)
    if export:
        gstin = await _business_gstin(gateway, user_id)
        return ok(data=gst_reports.export_gstr3b_json(summary, month, year, gstin))
    data = asdict(summary)
    for heads in ("outward_supplies", "itc", "net_tax_liability"):
        data[heads]["total"] = getattr(summary, heads).total
    return ok(data=data)
