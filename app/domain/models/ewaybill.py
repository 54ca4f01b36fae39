"""E-way bill request / result types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from app.domain.models.billing import LineItem


class TransportMode(str, Enum):
    ROAD = "road"
    RAIL = "rail"
    AIR = "air"
    SHIP = "ship"


class EWayBillStatus(str, Enum):
    GENERATED = "generated"
    CANCELLED = "cancelled"  # terminal


@dataclass
class TransportDetails:
    transport_mode: TransportMode = TransportMode.ROAD
    distance_km: Decimal = Decimal("0")
    vehicle_number: str | None = None
    transporter_name: str | None = None
    transporter_id: str | None = None


@dataclass
class EWayBillRequest:
    consignment_value: Decimal
    items: list[LineItem] = field(default_factory=list)
    distance_km: Decimal = Decimal("0")
    transport_mode: TransportMode = TransportMode.ROAD


@dataclass(frozen=True)
class EWayBill:
    eway_bill_number: str
    issue_date: date
    validity_days: int
    valid_till: date
    status: EWayBillStatus = EWayBillStatus.GENERATED
