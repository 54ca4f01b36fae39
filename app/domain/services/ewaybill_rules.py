# app/domain/services/ewaybill_rules.py
"""
e-WayBill eligibility, validity and lifecycle.

Pure rules (``is_required``, ``has_eligible_goods_line``,
``compute_validity_days``, ``generate``) plus :class:`EWayBillService`,
which stores the bill on the invoice row it covers.

Lifecycle: no bill -> ``generated`` -> ``cancelled``.  ``cancelled`` is
terminal; the invoice can never get a new bill once its bill is cancelled.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, timedelta
from decimal import ROUND_CEILING, Decimal
from typing import Any, Callable, Iterable

from app.domain.errors import (
    AlreadyCancelledError,
    IneligibleConsignmentError,
    InvalidInputError,
    ServicesOnlyError,
)
from app.domain.models.billing import LineItem
from app.domain.models.ewaybill import (
    EWayBill,
    EWayBillRequest,
    EWayBillStatus,
    TransportDetails,
    TransportMode,
)
from app.domain.money import ZERO, non_negative, to_decimal
from app.domain.services.gstin_utils import is_goods_code
from app.infrastructure.db.gateway import NotFoundError, PersistenceGateway

logger = logging.getLogger("ewaybill_rules")

EWAY_BILL_THRESHOLD = Decimal("50000")
KM_PER_DAY = Decimal("100")

# NIC portal transport mode codes
TRANSPORT_MODES = {
    TransportMode.ROAD: ("1", "Road"),
    TransportMode.RAIL: ("2", "Rail"),
    TransportMode.AIR: ("3", "Air"),
    TransportMode.SHIP: ("4", "Ship"),
}


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def is_required(consignment_value: Any) -> bool:
    return non_negative(consignment_value, "consignment_value") >= EWAY_BILL_THRESHOLD


def has_eligible_goods_line(items: Iterable[LineItem]) -> bool:
    """True if any line carries an HSN goods code (not a chapter-99 SAC)."""
    return any(is_goods_code(item.hsn_sac_code) for item in items)


def compute_validity_days(distance_km: Any) -> int:
    """One day for the first 100 km, one more per further 100 km or part."""
    distance = to_decimal(distance_km, "distance_km")
    if distance < ZERO:
        raise InvalidInputError("distance_km cannot be negative")
    extra = max(ZERO, distance - KM_PER_DAY) / KM_PER_DAY
    return 1 + int(extra.to_integral_value(rounding=ROUND_CEILING))


def new_eway_bill_number() -> str:
    return f"EWB{uuid.uuid4().int % 10**12:012d}"


def generate(
    request: EWayBillRequest,
    issue_date: date | None = None,
    allocate_number: Callable[[], str] | None = None,
) -> EWayBill:
    """Validate *request* and issue a bill.

    Raises IneligibleConsignmentError below the threshold and
    ServicesOnlyError when no line is a goods line.
    """
    if not is_required(request.consignment_value):
        raise IneligibleConsignmentError(
            f"Consignment value below ₹{EWAY_BILL_THRESHOLD:,.0f} threshold; e-way bill not required"
        )
    if not has_eligible_goods_line(request.items):
        raise ServicesOnlyError(
            "E-way bill requires at least one goods item with an HSN code; services only"
        )
    if to_decimal(request.distance_km, "distance_km") <= ZERO:
        raise InvalidInputError("distance_km must be positive")

    issued_on = issue_date or date.today()
    days = compute_validity_days(request.distance_km)
    number = (allocate_number or new_eway_bill_number)()
    return EWayBill(
        eway_bill_number=number,
        issue_date=issued_on,
        validity_days=days,
        valid_till=issued_on + timedelta(days=days),
    )


def build_portal_payload(invoice: dict[str, Any], gstin: str, transport: TransportDetails) -> dict[str, Any]:
    """The NIC portal generation payload for *invoice*."""
    mode_code, _ = TRANSPORT_MODES[transport.transport_mode]
    invoice_date = invoice.get("invoice_date")
    return {
        "supplyType": "O",  # Outward
        "docType": "INV",
        "docNo": invoice.get("invoice_number", ""),
        "docDate": invoice_date.strftime("%d/%m/%Y") if isinstance(invoice_date, date) else invoice_date or "",
        "fromGstin": gstin,
        "toGstin": invoice.get("customer_gstin") or "URP",
        "totInvValue": float(to_decimal(invoice.get("total_amount"))),
        "transMode": mode_code,
        "transactionType": 1,
        "vehicleNo": transport.vehicle_number or "",
        "transporterName": transport.transporter_name or "",
        "transporterId": transport.transporter_id or "",
        "transDistance": str(int(to_decimal(transport.distance_km))),
    }


# ---------------------------------------------------------------------------
# Persistence-backed service
# ---------------------------------------------------------------------------

class EWayBillService:
    def __init__(
        self,
        gateway: PersistenceGateway,
        allocate_number: Callable[[], str] | None = None,
    ) -> None:
        self.gateway = gateway
        self.allocate_number = allocate_number or new_eway_bill_number

    async def _load_invoice(self, user_id: str, invoice_id: str) -> dict[str, Any]:
        invoice = await self.gateway.get("invoices", invoice_id)
        if str(invoice.get("user_id")) != str(user_id):
            # other tenants' invoices are invisible
            raise NotFoundError("invoices", invoice_id)
        return invoice

    async def generate_for_invoice(
        self,
        user_id: str,
        invoice_id: str,
        transport: TransportDetails,
        issue_date: date | None = None,
    ) -> dict[str, Any]:
        invoice = await self._load_invoice(user_id, invoice_id)

        status = invoice.get("eway_bill_status")
        if status == EWayBillStatus.CANCELLED.value:
            raise AlreadyCancelledError(
                f"E-way bill {invoice.get('eway_bill_number')} is cancelled; invoice cannot be re-issued"
            )
        if status == EWayBillStatus.GENERATED.value:
            raise InvalidInputError(
                f"E-way bill {invoice.get('eway_bill_number')} already generated for this invoice"
            )

        rows = await self.gateway.query("invoice_items", {"invoice_id": invoice_id})
        request = EWayBillRequest(
            consignment_value=to_decimal(invoice.get("total_amount")),
            items=[LineItem.from_row(r) for r in rows],
            distance_km=to_decimal(transport.distance_km, "distance_km"),
            transport_mode=transport.transport_mode,
        )
        bill = generate(request, issue_date=issue_date, allocate_number=self.allocate_number)

        updated = await self.gateway.update("invoices", {
            "id": invoice_id,
            "eway_bill_number": bill.eway_bill_number,
            "eway_bill_status": bill.status.value,
            "eway_bill_date": bill.issue_date,
            "eway_valid_till": bill.valid_till,
            "transport_mode": transport.transport_mode.value,
            "vehicle_number": transport.vehicle_number,
            "transporter_name": transport.transporter_name,
            "transporter_id": transport.transporter_id,
            "distance_km": request.distance_km,
            "consignment_value": request.consignment_value,
        })
        logger.info(
            "Generated e-way bill %s for invoice %s (valid %d days)",
            bill.eway_bill_number, invoice_id, bill.validity_days,
        )
        return updated

    async def cancel(self, user_id: str, invoice_id: str) -> dict[str, Any]:
        invoice = await self._load_invoice(user_id, invoice_id)
        status = invoice.get("eway_bill_status")
        if status == EWayBillStatus.CANCELLED.value:
            raise AlreadyCancelledError(
                f"E-way bill {invoice.get('eway_bill_number')} is already cancelled"
            )
        if not invoice.get("eway_bill_number"):
            raise InvalidInputError("No e-way bill has been generated for this invoice")

        updated = await self.gateway.update("invoices", {
            "id": invoice_id,
            "eway_bill_status": EWayBillStatus.CANCELLED.value,
        })
        logger.info("Cancelled e-way bill %s", invoice.get("eway_bill_number"))
        return updated

    async def list_bills(self, user_id: str, invoice_id: str | None = None) -> list[dict[str, Any]]:
        filters: dict[str, Any] = {"user_id": user_id, "eway_bill_number__isnull": False}
        if invoice_id:
            filters["id"] = invoice_id
        return await self.gateway.query("invoices", filters, order_by=["-eway_bill_date"])
