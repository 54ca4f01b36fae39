# app/api/v1/routes/rentals.py
"""Rental return reminders."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.v1.deps import get_current_user_id, get_email_client, get_gateway
from app.api.v1.envelope import ok
from app.api.v1.schemas.rentals import ReminderRequest
from app.domain.services.rental_reminders import RentalReminderService
from app.infrastructure.db.gateway import PersistenceGateway
from app.infrastructure.external.email_client import EmailClient

logger = logging.getLogger("api.v1.rentals")

router = APIRouter(prefix="/rentals", tags=["Rentals"])


@router.post("/reminders", response_model=dict)
async def send_reminders(
    body: ReminderRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: PersistenceGateway = Depends(get_gateway),
    email_client: EmailClient = Depends(get_email_client),
):
    service = RentalReminderService(gateway, email_client)
    results = await service.send_reminders(user_id, body.type, rental_id=body.rental_id, today=body.as_of)
    return ok(
        data=[r.to_dict() for r in results],
        message=f"Processed {len(results)} reminders",
    )
