# app/api/v1/routes/ewaybill.py
"""
E-way bill endpoints: eligibility check, generate, cancel, list.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from app.api.v1.deps import get_current_user_id, get_gateway
from app.api.v1.envelope import PaginationParams, ok, paginated
from app.api.v1.schemas.ewaybill import EWayBillCheckRequest, TransportRequest
from app.domain.services.ewaybill_rules import (
    EWAY_BILL_THRESHOLD,
    EWayBillService,
    compute_validity_days,
    has_eligible_goods_line,
    is_required,
)
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.ewaybill")

router = APIRouter(prefix="/ewaybill", tags=["E-Way Bill"])

BILL_FIELDS = (
    "id", "invoice_number", "invoice_date", "total_amount", "eway_bill_number",
    "eway_bill_status", "eway_bill_date", "eway_valid_till", "transport_mode",
    "vehicle_number", "transporter_name", "transporter_id", "distance_km",
    "consignment_value",
)


def _bill(invoice: dict) -> dict:
    return {k: invoice.get(k) for k in BILL_FIELDS}


@router.post("/check", response_model=dict)
async def check_eligibility(body: EWayBillCheckRequest):
    """Whether a consignment needs an e-way bill, and how long one would last."""
    items = [item.to_line_item() for item in body.items]
    return ok(data={
        "threshold": EWAY_BILL_THRESHOLD,
        "required": is_required(body.consignment_value),
        "has_goods": has_eligible_goods_line(items),
        "validity_days": compute_validity_days(body.distance_km),
    })


@router.post("/{invoice_id}/generate", response_model=dict)
async def generate_eway_bill(
    invoice_id: str,
    body: TransportRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    invoice = await EWayBillService(gateway).generate_for_invoice(user_id, invoice_id, body.to_details())
    return ok(data=_bill(invoice), message=f"E-way bill {invoice.get('eway_bill_number')} generated")


@router.post("/{invoice_id}/cancel", response_model=dict)
async def cancel_eway_bill(
    invoice_id: str,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    invoice = await EWayBillService(gateway).cancel(user_id, invoice_id)
    return ok(data=_bill(invoice), message="E-way bill cancelled")


@router.get("", response_model=dict)
async def list_eway_bills(
    invoice_id: str | None = Query(None),
    page: PaginationParams = Depends(),
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    bills = await EWayBillService(gateway).list_bills(user_id, invoice_id)
    return paginated([_bill(b) for b in bills], page)
