# app/api/v1/schemas/rentals.py
"""Request schema for rental reminders."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, model_validator


class ReminderRequest(BaseModel):
    type: str = Field(default="overdue", pattern="^(overdue|due_today|manual)$")
    rental_id: str | None = None
    as_of: date | None = None

    @model_validator(mode="after")
    def _manual_needs_rental(self) -> "ReminderRequest":
        if self.type == "manual" and not self.rental_id:
            raise ValueError("rental_id is required for a manual reminder")
        return self
