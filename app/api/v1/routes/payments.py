# app/api/v1/routes/payments.py
"""Payment receipts against invoices."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from app.api.v1.deps import get_current_user_id, get_gateway
from app.api.v1.envelope import ok
from app.api.v1.schemas.payments import PaymentCreateRequest
from app.domain.services import payment_service
from app.infrastructure.db.gateway import PersistenceGateway

logger = logging.getLogger("api.v1.payments")

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
async def record_payment(
    body: PaymentCreateRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    stored = await payment_service.record_payment(gateway, user_id, body.model_dump(exclude_none=True))
    return ok(data=stored, message="Payment recorded")


@router.delete("/{payment_id}", response_model=dict)
async def delete_payment(
    payment_id: str,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
):
    payment = await payment_service.delete_payment(gateway, user_id, payment_id)
    return ok(data=payment, message="Payment deleted")
