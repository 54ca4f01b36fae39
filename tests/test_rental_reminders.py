# tests/test_rental_reminders.py
"""Tests for rental return reminders."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest

from app.core.config import settings
from app.domain.errors import InvalidInputError
from app.domain.services.rental_reminders import (
    NOT_CONFIGURED,
    RentalReminderService,
    build_reminder,
    days_overdue,
    late_fees,
    select_rentals,
)
from app.infrastructure.db.gateway import NotFoundError
from app.infrastructure.external.email_client import EmailDeliveryError

from tests.fakes import FakeGateway, OTHER_USER_ID, USER_ID

TODAY = date(2024, 6, 10)


def _rental(rid, status, due, customer="rc-1", fee="50"):
    return {
        "id": rid, "user_id": USER_ID, "rental_number": f"RNT-{rid}", "rental_customer_id": customer,
        "status": status, "expected_return_date": due, "late_fee_per_day": Decimal(fee),
        "security_deposit": Decimal("2000"),
    }


@pytest.fixture
def rentals_gateway():
    return FakeGateway({
        "business_settings": [{"id": "bs-1", "user_id": USER_ID, "business_name": "Sharma Rentals",
                               "phone": "9800000000"}],
        "rental_customers": [
            {"id": "rc-1", "user_id": USER_ID, "name": "Ravi", "email": "ravi@example.com"},
            {"id": "rc-2", "user_id": USER_ID, "name": "No Mail", "email": None},
        ],
        "rental_invoices": [
            _rental("r1", "active", date(2024, 6, 7)),
            _rental("r2", "overdue", date(2024, 6, 1)),
            _rental("r3", "active", TODAY),
            _rental("r4", "returned", date(2024, 6, 1)),
            _rental("r5", "active", date(2024, 6, 5), customer="rc-2"),
            {**_rental("r9", "active", date(2024, 6, 1)), "user_id": OTHER_USER_ID},
        ],
    })


@pytest.fixture
def configured():
    with patch.object(settings, "RESEND_API_KEY", "re_test_key"):
        yield


class TestSelection:
    def test_overdue(self):
        rows = [_rental("a", "active", date(2024, 6, 9)), _rental("b", "overdue", date(2024, 6, 1)),
                _rental("c", "active", TODAY), _rental("d", "returned", date(2024, 6, 1))]
        assert [r["id"] for r in select_rentals(rows, "overdue", TODAY)] == ["a", "b"]

    def test_due_today(self):
        rows = [_rental("a", "active", TODAY), _rental("b", "overdue", TODAY)]
        assert [r["id"] for r in select_rentals(rows, "due_today", TODAY)] == ["a"]

    def test_unknown_type(self):
        with pytest.raises(InvalidInputError):
            select_rentals([], "weekly", TODAY)


def test_days_and_fees():
    assert days_overdue(date(2024, 6, 7), TODAY) == 3
    assert days_overdue("2024-06-20", TODAY) == 0
    assert late_fees(_rental("a", "active", date(2024, 6, 7)), TODAY) == Decimal("150.00")


def test_overdue_message_mentions_fees_and_contact():
    subject, html, text = build_reminder(
        _rental("a", "overdue", date(2024, 6, 7)), "Ravi", {"business_name": "Sharma Rentals", "phone": "98"},
        True, TODAY,
    )
    assert subject == "Overdue Rental Return - RNT-a"
    assert "3 day(s) overdue" in text
    assert "Late fees accrued: Rs. 150.00" in text
    assert "Rs. 2000.00" in text
    assert "contact us at: 98" in text
    assert html.startswith("<p>Dear Ravi,</p>")


class TestService:
    def test_overdue_run(self, event_loop, rentals_gateway, configured):
        client = AsyncMock()
        client.send_email.return_value = "msg-1"
        service = RentalReminderService(rentals_gateway, client)

        results = event_loop.run_until_complete(service.send_reminders(USER_ID, "overdue", today=TODAY))

        # r5's customer has no address, r9 belongs to someone else
        assert [r.rental_id for r in results] == ["r1", "r2"]
        assert all(r.success and r.message_id == "msg-1" for r in results)
        statuses = {r["id"]: r["status"] for r in rentals_gateway.data["rental_invoices"]}
        assert statuses["r1"] == "overdue"
        assert statuses["r5"] == "overdue"
        assert statuses["r9"] == "active"
        assert client.send_email.await_count == 2

    def test_due_today(self, event_loop, rentals_gateway, configured):
        client = AsyncMock()
        client.send_email.return_value = "msg-2"
        service = RentalReminderService(rentals_gateway, client)
        results = event_loop.run_until_complete(service.send_reminders(USER_ID, "due_today", today=TODAY))
        assert [r.rental_number for r in results] == ["RNT-r3"]
        subject = client.send_email.await_args.args[1]
        assert subject == "Rental Return Reminder - RNT-r3"

    def test_failed_send_does_not_stop_batch(self, event_loop, rentals_gateway, configured):
        client = AsyncMock()
        client.send_email.side_effect = [EmailDeliveryError("rate limited", status_code=429), "msg-3"]
        service = RentalReminderService(rentals_gateway, client)
        results = event_loop.run_until_complete(service.send_reminders(USER_ID, "overdue", today=TODAY))
        assert [(r.success, r.error) for r in results] == [(False, "rate limited"), (True, "")]

    def test_not_configured(self, event_loop, rentals_gateway):
        client = AsyncMock()
        service = RentalReminderService(rentals_gateway, client)
        with patch.object(settings, "RESEND_API_KEY", ""):
            results = event_loop.run_until_complete(service.send_reminders(USER_ID, "overdue", today=TODAY))
        assert results and all(r.error == NOT_CONFIGURED for r in results)
        client.send_email.assert_not_awaited()

    def test_manual(self, event_loop, rentals_gateway, configured):
        client = AsyncMock()
        client.send_email.return_value = "msg-4"
        service = RentalReminderService(rentals_gateway, client)
        results = event_loop.run_until_complete(
            service.send_reminders(USER_ID, "manual", rental_id="r3", today=TODAY)
        )
        assert [r.rental_id for r in results] == ["r3"]

    def test_targeted_overdue_keeps_returned_status(self, event_loop, rentals_gateway, configured):
        client = AsyncMock()
        client.send_email.return_value = "msg-5"
        service = RentalReminderService(rentals_gateway, client)
        results = event_loop.run_until_complete(
            service.send_reminders(USER_ID, "overdue", rental_id="r4", today=TODAY)
        )
        assert [r.rental_id for r in results] == ["r4"]
        statuses = {r["id"]: r["status"] for r in rentals_gateway.data["rental_invoices"]}
        assert statuses["r4"] == "returned"
        assert statuses["r1"] == "active"

    def test_targeted_overdue_before_due_date(self, event_loop, rentals_gateway, configured):
        rentals_gateway.data["rental_invoices"].append(_rental("r6", "active", date(2024, 6, 20)))
        client = AsyncMock()
        client.send_email.return_value = "msg-6"
        service = RentalReminderService(rentals_gateway, client)
        results = event_loop.run_until_complete(
            service.send_reminders(USER_ID, "overdue", rental_id="r6", today=TODAY)
        )
        assert [r.success for r in results] == [True]
        statuses = {r["id"]: r["status"] for r in rentals_gateway.data["rental_invoices"]}
        assert statuses["r6"] == "active"
        _, subject, _, text = client.send_email.await_args.args
        assert subject == "Rental Return Reminder - RNT-r6"
        assert "overdue" not in text

    def test_manual_needs_an_owned_rental(self, event_loop, rentals_gateway):
        service = RentalReminderService(rentals_gateway, AsyncMock())
        with pytest.raises(InvalidInputError):
            event_loop.run_until_complete(service.send_reminders(USER_ID, "manual", today=TODAY))
        with pytest.raises(NotFoundError):
            event_loop.run_until_complete(
                service.send_reminders(USER_ID, "manual", rental_id="r9", today=TODAY)
            )

    def test_unknown_type(self, event_loop, rentals_gateway):
        service = RentalReminderService(rentals_gateway, AsyncMock())
        with pytest.raises(InvalidInputError):
            event_loop.run_until_complete(service.send_reminders(USER_ID, "weekly", today=TODAY))
