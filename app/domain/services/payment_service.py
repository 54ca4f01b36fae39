# app/domain/services/payment_service.py
"""
Payment receipts against invoices.

``apply_payment`` / ``revert_payment`` are the pure balance arithmetic;
``record_payment`` / ``delete_payment`` write the payment and then the
invoice through the gateway.  Each gateway call is atomic on its own; the
pair is not, so callers must serialise writers on the same invoice.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any

from app.domain.errors import InvalidInputError
from app.domain.money import ZERO, money, to_decimal
from app.infrastructure.db.gateway import NotFoundError, PersistenceGateway

logger = logging.getLogger("payment_service")

PAYMENT_METHODS = ("cash", "upi", "card", "bank_transfer", "cheque", "other")


def _positive_amount(amount: Any) -> Decimal:
    value = money(to_decimal(amount, "amount"))
    if value <= ZERO:
        raise InvalidInputError("Payment amount must be greater than zero")
    return value


def apply_payment(invoice: dict[str, Any], amount: Any) -> dict[str, Any]:
    """Invoice fields after receiving *amount*."""
    value = _positive_amount(amount)
    total = money(invoice.get("total_amount"))
    paid = money(invoice.get("paid_amount")) + value
    balance = total - paid
    return {
        "paid_amount": paid,
        "balance_due": max(ZERO, balance),
        "status": "paid" if balance <= ZERO else "partial",
    }


def revert_payment(invoice: dict[str, Any], amount: Any) -> dict[str, Any]:
    """Invoice fields after a payment of *amount* is removed."""
    value = _positive_amount(amount)
    total = money(invoice.get("total_amount"))
    paid = max(ZERO, money(invoice.get("paid_amount")) - value)
    return {
        "paid_amount": paid,
        "balance_due": max(ZERO, total - paid),
        "status": "sent" if paid == ZERO else "partial",
    }


async def _owned(gateway: PersistenceGateway, collection: str, record_id: str, user_id: str) -> dict[str, Any]:
    row = await gateway.get(collection, record_id)
    if str(row.get("user_id")) != str(user_id):
        raise NotFoundError(collection, record_id)
    return row


async def record_payment(gateway: PersistenceGateway, user_id: str, payment: dict[str, Any]) -> dict[str, Any]:
    """Insert a payment and bring its invoice's balance up to date."""
    amount = _positive_amount(payment.get("amount"))
    method = payment.get("payment_method") or "cash"
    if method not in PAYMENT_METHODS:
        raise InvalidInputError(f"Unknown payment method: {method}")

    record = {
        **payment,
        "user_id": user_id,
        "amount": amount,
        "payment_method": method,
        "payment_date": payment.get("payment_date") or date.today(),
    }

    invoice = None
    invoice_id = payment.get("invoice_id")
    if invoice_id:
        invoice = await _owned(gateway, "invoices", invoice_id, user_id)
        if invoice.get("status") == "cancelled":
            raise InvalidInputError(f"Invoice {invoice.get('invoice_number')} is cancelled")
        # denormalised for ledgers and the day book
        record["customer_id"] = invoice.get("customer_id")
        record["invoice_number"] = invoice.get("invoice_number")

    stored = await gateway.insert("payments", record)

    if invoice:
        changes = apply_payment(invoice, amount)
        await gateway.update("invoices", {"id": invoice_id, **changes})
        logger.info(
            "Payment %s of %s applied to invoice %s (status=%s)",
            stored.get("id"), amount, invoice.get("invoice_number"), changes["status"],
        )
    return stored


async def delete_payment(gateway: PersistenceGateway, user_id: str, payment_id: str) -> dict[str, Any]:
    """Delete a payment and restore its invoice's balance."""
    payment = await _owned(gateway, "payments", payment_id, user_id)
    await gateway.delete("payments", {"id": payment_id})

    invoice_id = payment.get("invoice_id")
    if invoice_id:
        invoice = await gateway.get("invoices", invoice_id)
        changes = revert_payment(invoice, payment.get("amount"))
        await gateway.update("invoices", {"id": invoice_id, **changes})
        logger.info("Payment %s reverted on invoice %s", payment_id, invoice.get("invoice_number"))
    return payment
