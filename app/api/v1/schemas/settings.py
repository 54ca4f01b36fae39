# app/api/v1/schemas/settings.py
"""Request schema for business settings."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BusinessSettingsUpdate(BaseModel):
    business_name: str | None = Field(default=None, max_length=200)
    gstin: str | None = Field(default=None, max_length=15)
    phone: str | None = Field(default=None, max_length=20)
    state_code: str | None = Field(default=None, max_length=2)
    industry: str | None = None
    gst_enabled: bool | None = None
    invoice_prefix: str | None = Field(default=None, max_length=20)
