# app/api/v1/schemas/ewaybill.py
"""Request schemas for e-way bill endpoints."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field

from app.api.v1.schemas.gst import LineItemSchema
from app.domain.models.ewaybill import TransportDetails, TransportMode


class EWayBillCheckRequest(BaseModel):
    consignment_value: Decimal
    items: list[LineItemSchema] = Field(default_factory=list)
    distance_km: Decimal = Decimal("0")


class TransportRequest(BaseModel):
    transport_mode: TransportMode = TransportMode.ROAD
    distance_km: Decimal = Field(gt=0)
    vehicle_number: str | None = Field(default=None, max_length=20)
    transporter_name: str | None = Field(default=None, max_length=200)
    transporter_id: str | None = Field(default=None, max_length=15)

    def to_details(self) -> TransportDetails:
        return TransportDetails(
            transport_mode=self.transport_mode,
            distance_km=self.distance_km,
            vehicle_number=(self.vehicle_number or "").upper() or None,
            transporter_name=self.transporter_name,
            transporter_id=self.transporter_id,
        )
