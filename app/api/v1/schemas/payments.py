# app/api/v1/schemas/payments.py
"""Request schema for recording a payment receipt."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


class PaymentCreateRequest(BaseModel):
    invoice_id: str | None = None
    amount: Decimal
    payment_date: date | None = Field(default=None, description="Defaults to today")
    payment_method: str = Field(default="cash", description="cash/upi/card/bank_transfer/cheque/other")
    reference_number: str | None = Field(default=None, max_length=60)
    notes: str | None = None
