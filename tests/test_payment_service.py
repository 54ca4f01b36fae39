# tests/test_payment_service.py
"""Tests for payment receipts and invoice balances."""

from decimal import Decimal

import pytest

from app.domain.errors import InvalidInputError
from app.domain.services.payment_service import (
    apply_payment,
    delete_payment,
    record_payment,
    revert_payment,
)
from app.infrastructure.db.gateway import NotFoundError

from tests.fakes import USER_ID


class TestBalanceArithmetic:
    def test_partial_then_paid(self):
        invoice = {"total_amount": Decimal("590"), "paid_amount": Decimal("0")}
        assert apply_payment(invoice, 200) == {
            "paid_amount": Decimal("200.00"), "balance_due": Decimal("390.00"), "status": "partial",
        }
        assert apply_payment(invoice, 590)["status"] == "paid"

    def test_overpayment_never_goes_negative(self):
        changes = apply_payment({"total_amount": 100, "paid_amount": 0}, 150)
        assert changes["balance_due"] == Decimal("0")
        assert changes["status"] == "paid"

    def test_revert_to_sent(self):
        changes = revert_payment({"total_amount": 100, "paid_amount": 100}, 100)
        assert changes == {"paid_amount": Decimal("0.00"), "balance_due": Decimal("100.00"), "status": "sent"}

    @pytest.mark.parametrize("amount", [0, -5, "abc"])
    def test_rejects_non_positive(self, amount):
        with pytest.raises(InvalidInputError):
            apply_payment({"total_amount": 100}, amount)


class TestRecordPayment:
    def test_settles_invoice(self, event_loop, books):
        stored = event_loop.run_until_complete(
            record_payment(books, USER_ID, {"invoice_id": "inv-2", "amount": "590", "payment_method": "cash"})
        )
        assert stored["customer_id"] == "c-2"
        assert stored["invoice_number"] == "INV-002"
        invoice = next(i for i in books.data["invoices"] if i["id"] == "inv-2")
        assert invoice["status"] == "paid"
        assert invoice["balance_due"] == Decimal("0")

    def test_cancelled_invoice(self, event_loop, books):
        with pytest.raises(InvalidInputError):
            event_loop.run_until_complete(record_payment(books, USER_ID, {"invoice_id": "inv-3", "amount": 10}))

    def test_other_tenants_invoice(self, event_loop, books):
        with pytest.raises(NotFoundError):
            event_loop.run_until_complete(record_payment(books, USER_ID, {"invoice_id": "inv-x", "amount": 10}))

    def test_unknown_method(self, event_loop, books):
        with pytest.raises(InvalidInputError):
            event_loop.run_until_complete(
                record_payment(books, USER_ID, {"invoice_id": "inv-2", "amount": 10, "payment_method": "barter"})
            )
        assert ("insert", "payments") not in books.calls


def test_delete_restores_balance(event_loop, books):
    event_loop.run_until_complete(delete_payment(books, USER_ID, "pay-1"))
    invoice = next(i for i in books.data["invoices"] if i["id"] == "inv-1")
    assert invoice["paid_amount"] == Decimal("0")
    assert invoice["balance_due"] == Decimal("1000.00")
    assert invoice["status"] == "sent"
    assert books.data["payments"] == []
