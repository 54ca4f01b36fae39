# tests/test_ledger_service.py
"""Tests for party ledger, day book and outstanding balances."""

from datetime import date
from decimal import Decimal

import pytest

from app.domain.errors import AggregationError, InvalidInputError
from app.domain.models.ledger import DateRange, LedgerEntry, PartyType
from app.domain.services.ledger_service import (
    RECEIPTS,
    SALES,
    STREAM_RANK,
    _sorted,
    build_day_book,
    build_ledger,
    day_book_totals,
    party_outstanding,
)

from tests.fakes import FakeGateway, USER_ID

APRIL = DateRange(date(2024, 4, 1), date(2024, 4, 30))


def _invoice(iid, number, day, total):
    return {"id": iid, "user_id": USER_ID, "customer_id": "c-1", "invoice_number": number,
            "status": "sent", "invoice_date": day, "total_amount": Decimal(total)}


def _payment(pid, day, amount):
    return {"id": pid, "user_id": USER_ID, "customer_id": "c-1", "amount": Decimal(amount),
            "payment_date": day, "invoice_number": "INV-10", "payment_method": "cash"}


def _customer_books(invoices, payments):
    return FakeGateway({
        "invoices": invoices,
        "payments": payments,
        "customers": [{"id": "c-1", "user_id": USER_ID, "name": "Acme Retail"}],
    })


def test_date_range_rejects_inverted_window():
    with pytest.raises(InvalidInputError):
        DateRange(date(2024, 5, 1), date(2024, 4, 1))


def test_date_range_is_inclusive():
    assert APRIL.contains(date(2024, 4, 30))
    assert not APRIL.contains(date(2024, 5, 1))


class TestCustomerLedger:
    def test_invoice_then_receipt_same_day(self, event_loop, books):
        entries = event_loop.run_until_complete(
            build_ledger(books, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
        )
        assert [e.voucher_type for e in entries] == ["Invoice", "Receipt"]
        assert [e.running_balance for e in entries] == [Decimal("1000.00"), Decimal("600.00")]
        assert entries[0].debit == Decimal("1000.00")
        assert entries[1].credit == Decimal("400.00")
        assert entries[1].voucher_number == "UPI-77"

    def test_sale_then_receipt_on_later_day(self, event_loop):
        gw = _customer_books(
            [_invoice("i-1", "INV-10", date(2024, 4, 1), "1000")],
            [_payment("p-1", date(2024, 4, 2), "400")],
        )
        entries = event_loop.run_until_complete(
            build_ledger(gw, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
        )
        assert [(e.date, e.voucher_type) for e in entries] == [
            (date(2024, 4, 1), "Invoice"), (date(2024, 4, 2), "Receipt"),
        ]
        assert [e.running_balance for e in entries] == [Decimal("1000.00"), Decimal("600.00")]

    def test_earlier_receipt_comes_first(self, event_loop):
        gw = _customer_books(
            [_invoice("i-1", "INV-10", date(2024, 4, 2), "1000")],
            [_payment("p-1", date(2024, 4, 1), "400")],
        )
        entries = event_loop.run_until_complete(
            build_ledger(gw, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
        )
        assert [e.voucher_type for e in entries] == ["Receipt", "Invoice"]
        assert [e.running_balance for e in entries] == [Decimal("-400.00"), Decimal("600.00")]

    def test_same_day_invoice_precedes_receipt(self, event_loop):
        gw = _customer_books(
            [_invoice("i-1", "INV-10", date(2024, 4, 5), "1000")],
            [_payment("p-1", date(2024, 4, 5), "400")],
        )
        entries = event_loop.run_until_complete(
            build_ledger(gw, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
        )
        assert [e.voucher_type for e in entries] == ["Invoice", "Receipt"]
        assert entries[-1].running_balance == Decimal("600.00")

        day = date(2024, 4, 5)
        receipt = LedgerEntry("p-1", day, "By Payment Received", "Receipt", "R-1", credit=Decimal("400"))
        sale = LedgerEntry("i-1", day, "To Sales", "Invoice", "INV-10", debit=Decimal("1000"))
        staged = [(day, STREAM_RANK[RECEIPTS], receipt), (day, STREAM_RANK[SALES], sale)]
        assert _sorted(staged) == [sale, receipt]

    def test_zero_value_invoice_is_skipped(self, event_loop):
        gw = _customer_books(
            [_invoice("i-0", "INV-00", date(2024, 4, 1), "0"),
             _invoice("i-1", "INV-10", date(2024, 4, 2), "250")],
            [],
        )
        entries = event_loop.run_until_complete(
            build_ledger(gw, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
        )
        assert [e.voucher_number for e in entries] == ["INV-10"]
        assert all((e.debit == 0) != (e.credit == 0) for e in entries)

        book = event_loop.run_until_complete(build_day_book(gw, USER_ID, APRIL))
        assert [e.voucher_number for e in book] == ["INV-10"]

    def test_cancelled_invoices_are_left_out(self, event_loop, books):
        entries = event_loop.run_until_complete(
            build_ledger(books, USER_ID, "c-1", "customer", APRIL)
        )
        assert "INV-003" not in [e.voucher_number for e in entries]

    def test_window_outside_activity_is_empty(self, event_loop, books):
        window = DateRange(date(2024, 6, 1), date(2024, 6, 30))
        entries = event_loop.run_until_complete(
            build_ledger(books, USER_ID, "c-1", PartyType.CUSTOMER, window)
        )
        assert entries == []

    def test_payment_fetch_failure(self, event_loop, books):
        books.fail_on.add("payments")
        with pytest.raises(AggregationError) as exc_info:
            event_loop.run_until_complete(
                build_ledger(books, USER_ID, "c-1", PartyType.CUSTOMER, APRIL)
            )
        assert exc_info.value.cause is not None


def test_supplier_ledger(event_loop, books):
    entries = event_loop.run_until_complete(
        build_ledger(books, USER_ID, "s-1", PartyType.SUPPLIER, APRIL)
    )
    assert [(e.voucher_type, e.debit, e.credit) for e in entries] == [
        ("Purchase", Decimal("0"), Decimal("300.00")),
        ("Payment", Decimal("100.00"), Decimal("0")),
        ("Purchase", Decimal("0"), Decimal("50.00")),
    ]
    assert entries[-1].running_balance == Decimal("-250.00")


def test_same_day_ordering_follows_stream_rank(event_loop):
    gw = FakeGateway({
        "invoices": [{"id": "i", "user_id": USER_ID, "invoice_number": "INV-9", "status": "sent",
                      "invoice_date": date(2024, 4, 2), "total_amount": Decimal("10")}],
        "payments": [{"id": "p", "user_id": USER_ID, "amount": Decimal("5"), "payment_date": date(2024, 4, 2),
                      "invoice_number": "INV-9", "payment_method": "cash"}],
        "purchase_orders": [{"id": "o", "user_id": USER_ID, "order_number": "PO-9", "status": "received",
                             "order_date": date(2024, 4, 2), "total_amount": Decimal("7")}],
    })
    entries = event_loop.run_until_complete(build_day_book(gw, USER_ID, APRIL))
    assert [e.voucher_type for e in entries] == ["Sales", "Receipt", "Purchase"]


class TestDayBook:
    def test_merges_all_parties(self, event_loop, books):
        entries = event_loop.run_until_complete(build_day_book(books, USER_ID, APRIL))
        assert [e.voucher_number for e in entries] == ["INV-001", "UPI-77", "PO-001", "PO-002", "INV-002"]
        assert entries[0].particulars == "Acme Retail"
        assert entries[1].particulars == "Payment for INV-001 (upi)"
        assert entries[2].particulars == "Steel Supply Co"

        totals = day_book_totals(entries)
        assert totals["total_debit"] == Decimal("1590.00")
        assert totals["total_credit"] == Decimal("750.00")

    def test_missing_party_names(self, event_loop):
        gw = FakeGateway({
            "invoices": [{"id": "i", "user_id": USER_ID, "invoice_number": "INV-1", "status": "sent",
                          "invoice_date": date(2024, 4, 2), "total_amount": Decimal("10")}],
            "purchase_orders": [{"id": "o", "user_id": USER_ID, "supplier_id": "gone", "order_number": "PO-1",
                                 "status": "received", "order_date": date(2024, 4, 3),
                                 "total_amount": Decimal("7")}],
        })
        entries = event_loop.run_until_complete(build_day_book(gw, USER_ID, APRIL))
        assert [e.particulars for e in entries] == ["Walk-in Customer", "Unknown Supplier"]

    def test_any_failure_fails_the_view(self, event_loop, books):
        books.fail_on.add("purchase_orders")
        with pytest.raises(AggregationError):
            event_loop.run_until_complete(build_day_book(books, USER_ID, APRIL))


class TestOutstanding:
    def test_customers(self, event_loop, books):
        rows = event_loop.run_until_complete(party_outstanding(books, USER_ID, PartyType.CUSTOMER))
        assert [(r["id"], r["outstanding_balance"]) for r in rows] == [
            ("c-1", Decimal("600.00")),
            ("c-2", Decimal("590.00")),
        ]

    def test_suppliers_skip_drafts(self, event_loop, books):
        rows = event_loop.run_until_complete(party_outstanding(books, USER_ID, PartyType.SUPPLIER))
        assert rows == [{"id": "s-1", "name": "Steel Supply Co", "phone": "9000000002",
                         "outstanding_balance": Decimal("200.00")}]
