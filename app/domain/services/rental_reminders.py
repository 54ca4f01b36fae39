# app/domain/services/rental_reminders.py
"""
Rental return reminders.

Three modes:
  - ``overdue``   : active/overdue rentals whose expected return date has
                    passed; their status is moved to ``overdue``.
  - ``due_today`` : active rentals due back today.
  - ``manual``    : one rental, picked by id.

One e-mail per rental whose customer has an address.  A failed send is
recorded on that rental's result and does not stop the batch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from app.core.config import settings
from app.domain.errors import InvalidInputError
from app.domain.money import ZERO, money, to_decimal
from app.domain.services.ledger_service import fetch_rows
from app.infrastructure.db.gateway import NotFoundError, PersistenceGateway
from app.infrastructure.external.email_client import EmailClient, EmailDeliveryError

logger = logging.getLogger("rental_reminders")

IST = timezone(timedelta(hours=5, minutes=30))

OVERDUE, DUE_TODAY, MANUAL = "overdue", "due_today", "manual"
REMINDER_TYPES = (OVERDUE, DUE_TODAY, MANUAL)

NOT_CONFIGURED = "RESEND_API_KEY not configured"


@dataclass
class ReminderResult:
    rental_id: str
    rental_number: str
    email: str
    success: bool
    message_id: str = ""
    error: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "rental_id": self.rental_id,
            "rental_number": self.rental_number,
            "email": self.email,
            "success": self.success,
            "message_id": self.message_id,
            "error": self.error,
        }


def _as_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def select_rentals(rentals: list[dict[str, Any]], reminder_type: str, today: date) -> list[dict[str, Any]]:
    """Rentals that a scheduled ``overdue`` / ``due_today`` run should notify."""
    if reminder_type == OVERDUE:
        return [
            r for r in rentals
            if r.get("status") in ("active", "overdue")
            and _as_date(r["expected_return_date"]) < today
        ]
    if reminder_type == DUE_TODAY:
        return [
            r for r in rentals
            if r.get("status") == "active"
            and _as_date(r["expected_return_date"]) == today
        ]
    raise InvalidInputError(f"Unknown reminder type: {reminder_type}")


def days_overdue(expected_return_date: Any, today: date) -> int:
    return max(0, (today - _as_date(expected_return_date)).days)


def late_fees(rental: dict[str, Any], today: date) -> Decimal:
    days = days_overdue(rental["expected_return_date"], today)
    return money(to_decimal(rental.get("late_fee_per_day")) * days)


def build_reminder(
    rental: dict[str, Any],
    customer_name: str,
    business: dict[str, Any],
    is_overdue: bool,
    today: date,
) -> tuple[str, str, str]:
    """(subject, html, text) for one rental."""
    business_name = business.get("business_name") or settings.DEFAULT_BUSINESS_NAME
    number = rental.get("rental_number") or ""
    due = _as_date(rental["expected_return_date"]).strftime("%d/%m/%Y")
    deposit = money(rental.get("security_deposit"))

    lines = [f"Dear {customer_name},"]
    if is_overdue:
        days = days_overdue(rental["expected_return_date"], today)
        subject = f"Overdue Rental Return - {number}"
        lines.append(f"Your rental {number} was due for return on {due} and is now {days} day(s) overdue.")
        fees = late_fees(rental, today)
        if fees > ZERO:
            lines.append(f"Late fees accrued: Rs. {fees}")
            lines.append(f"Late fees of Rs. {money(rental.get('late_fee_per_day'))} per day are being applied.")
    else:
        subject = f"Rental Return Reminder - {number}"
        if _as_date(rental["expected_return_date"]) == today:
            lines.append(f"Your rental {number} is due for return today ({due}).")
        else:
            lines.append(f"Your rental {number} is due for return on {due}.")

    lines.append(f"Your security deposit of Rs. {deposit} will be refunded on satisfactory return.")
    if business.get("phone"):
        lines.append(f"For questions, contact us at: {business['phone']}")
    lines.append(f"Thank you for choosing {business_name}!")

    text = "\n\n".join(lines)
    html = "".join(f"<p>{line}</p>" for line in lines)
    return subject, html, text


class RentalReminderService:
    def __init__(self, gateway: PersistenceGateway, email_client: Optional[EmailClient] = None) -> None:
        self.gateway = gateway
        self.email_client = email_client or EmailClient()

    async def _targets(
        self, user_id: str, reminder_type: str, rental_id: Optional[str], today: date,
    ) -> list[dict[str, Any]]:
        if rental_id:
            rental = await self.gateway.get("rental_invoices", rental_id)
            if str(rental.get("user_id")) != str(user_id):
                raise NotFoundError("rental_invoices", rental_id)
            return [rental]

        if reminder_type == OVERDUE:
            rows = await fetch_rows(self.gateway, "rental_invoices", {
                "user_id": user_id,
                "status__in": ["active", "overdue"],
                "expected_return_date__lt": today,
            })
        elif reminder_type == DUE_TODAY:
            rows = await fetch_rows(self.gateway, "rental_invoices", {
                "user_id": user_id,
                "status": "active",
                "expected_return_date": today,
            })
        else:
            raise InvalidInputError("A manual reminder needs a rental id")
        return select_rentals(rows, reminder_type, today)

    async def send_reminders(
        self,
        user_id: str,
        reminder_type: str,
        rental_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> list[ReminderResult]:
        if reminder_type not in REMINDER_TYPES:
            raise InvalidInputError(f"Unknown reminder type: {reminder_type}")
        today = today or datetime.now(IST).date()

        rentals = await self._targets(user_id, reminder_type, rental_id, today)
        if not rentals:
            return []

        overdue_ids = {str(r["id"]) for r in select_rentals(rentals, OVERDUE, today)}
        # targeted sends never change a rental's status
        if reminder_type == OVERDUE and rental_id is None:
            for rental in rentals:
                if rental.get("status") != "overdue":
                    await self.gateway.update("rental_invoices", {"id": rental["id"], "status": "overdue"})
                    rental["status"] = "overdue"

        customer_ids = sorted({str(r["rental_customer_id"]) for r in rentals if r.get("rental_customer_id")})
        customers = (
            await fetch_rows(self.gateway, "rental_customers", {"user_id": user_id, "id__in": customer_ids})
            if customer_ids else []
        )
        by_id = {str(c["id"]): c for c in customers}

        settings_rows = await fetch_rows(self.gateway, "business_settings", {"user_id": user_id})
        business = settings_rows[0] if settings_rows else {}
        configured = EmailClient.is_configured()

        results: list[ReminderResult] = []
        for rental in rentals:
            customer = by_id.get(str(rental.get("rental_customer_id")), {})
            email = customer.get("email")
            if not email:
                logger.info("Rental %s: customer has no e-mail, skipped", rental.get("rental_number"))
                continue

            result = ReminderResult(
                rental_id=str(rental["id"]),
                rental_number=rental.get("rental_number") or "",
                email=email,
                success=False,
            )
            if not configured:
                result.error = NOT_CONFIGURED
                results.append(result)
                continue

            is_overdue = str(rental["id"]) in overdue_ids
            subject, html, text = build_reminder(
                rental, customer.get("name") or "Customer", business, is_overdue, today,
            )
            try:
                result.message_id = await self.email_client.send_email(email, subject, html, text)
                result.success = True
            except EmailDeliveryError as exc:
                logger.warning("Reminder for rental %s failed: %s", result.rental_number, exc)
                result.error = str(exc)
            results.append(result)

        logger.info(
            "Processed %d %s reminders for user %s (%d sent)",
            len(results), reminder_type, user_id, sum(r.success for r in results),
        )
        return results
