"""Shared test fixtures for the billing core test suite."""

import asyncio
from datetime import date
from decimal import Decimal

import pytest

from tests.fakes import OTHER_USER_ID, USER_ID, FakeGateway


@pytest.fixture(scope="session")
def event_loop():
    """Use a single event loop for the entire test session."""
    loop = asyncio.new_event_loop()
    yield loop
    loop.close()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def books() -> FakeGateway:
    """A small set of books for one tenant in April 2024, plus one foreign row."""
    return FakeGateway({
        "business_settings": [
            {"id": "bs-1", "user_id": USER_ID, "business_name": "Sharma Traders",
             "gstin": "27AAPFU0939F1ZV", "industry": "retail", "gst_enabled": True, "phone": "9800000000"},
        ],
        "customers": [
            {"id": "c-1", "user_id": USER_ID, "name": "Acme Retail", "gstin": "29AABCU9603R1ZM",
             "state": "Karnataka", "phone": "9000000001"},
            {"id": "c-2", "user_id": USER_ID, "name": "Walk In Buyer", "gstin": None,
             "state": "Maharashtra", "phone": None},
        ],
        "suppliers": [
            {"id": "s-1", "user_id": USER_ID, "name": "Steel Supply Co", "phone": "9000000002"},
        ],
        "invoices": [
            {"id": "inv-1", "user_id": USER_ID, "customer_id": "c-1", "invoice_number": "INV-001",
             "invoice_date": date(2024, 4, 1), "document_type": "invoice", "status": "partial",
             "subtotal": Decimal("820.00"), "tax_amount": Decimal("180.00"),
             "cgst_amount": Decimal("0"), "sgst_amount": Decimal("0"), "igst_amount": Decimal("180.00"),
             "total_amount": Decimal("1000.00"), "paid_amount": Decimal("400.00"),
             "balance_due": Decimal("600.00"), "place_of_supply": "29-Karnataka"},
            {"id": "inv-2", "user_id": USER_ID, "customer_id": "c-2", "invoice_number": "INV-002",
             "invoice_date": date(2024, 4, 3), "document_type": "invoice", "status": "sent",
             "subtotal": Decimal("500.00"), "tax_amount": Decimal("90.00"),
             "cgst_amount": Decimal("45.00"), "sgst_amount": Decimal("45.00"), "igst_amount": Decimal("0"),
             "total_amount": Decimal("590.00"), "paid_amount": Decimal("0"),
             "balance_due": Decimal("590.00"), "place_of_supply": "27-Maharashtra"},
            {"id": "inv-3", "user_id": USER_ID, "customer_id": "c-1", "invoice_number": "INV-003",
             "invoice_date": date(2024, 4, 5), "document_type": "invoice", "status": "cancelled",
             "subtotal": Decimal("700.00"), "tax_amount": Decimal("0"),
             "total_amount": Decimal("700.00"), "paid_amount": Decimal("0"), "balance_due": Decimal("700.00")},
            {"id": "inv-x", "user_id": OTHER_USER_ID, "customer_id": "c-9", "invoice_number": "INV-900",
             "invoice_date": date(2024, 4, 1), "document_type": "invoice", "status": "sent",
             "subtotal": Decimal("9000.00"), "tax_amount": Decimal("0"),
             "total_amount": Decimal("9000.00"), "paid_amount": Decimal("0"), "balance_due": Decimal("9000.00")},
        ],
        "invoice_items": [
            {"id": "it-1", "invoice_id": "inv-1", "description": "Steel rod", "hsn_sac_code": "7214",
             "quantity": Decimal("10"), "unit_price": Decimal("82"), "purchase_price": Decimal("50"),
             "discount_percent": Decimal("0"), "tax_rate": Decimal("18")},
            {"id": "it-2", "invoice_id": "inv-2", "description": "Consulting", "hsn_sac_code": "998311",
             "quantity": Decimal("1"), "unit_price": Decimal("500"), "purchase_price": None,
             "discount_percent": Decimal("0"), "tax_rate": Decimal("18")},
        ],
        "payments": [
            {"id": "pay-1", "user_id": USER_ID, "invoice_id": "inv-1", "customer_id": "c-1",
             "invoice_number": "INV-001", "amount": Decimal("400.00"), "payment_date": date(2024, 4, 1),
             "payment_method": "upi", "reference_number": "UPI-77"},
        ],
        "purchase_orders": [
            {"id": "po-1", "user_id": USER_ID, "supplier_id": "s-1", "order_number": "PO-001",
             "order_date": date(2024, 4, 1), "status": "received", "subtotal": Decimal("300.00"),
             "tax_amount": Decimal("0"), "total_amount": Decimal("300.00"), "paid_amount": Decimal("100.00")},
            {"id": "po-2", "user_id": USER_ID, "supplier_id": "s-1", "order_number": "PO-002",
             "order_date": date(2024, 4, 2), "status": "draft", "subtotal": Decimal("50.00"),
             "tax_amount": Decimal("0"), "total_amount": Decimal("50.00"), "paid_amount": Decimal("0")},
        ],
        "purchases": [
            {"id": "pu-1", "user_id": USER_ID, "purchase_date": date(2024, 4, 10),
             "taxable_value": Decimal("1000"), "cgst_amount": Decimal("0"), "sgst_amount": Decimal("0"),
             "igst_amount": Decimal("100"), "total_amount": Decimal("1100"),
             "itc_eligible": True, "itc_reversed": Decimal("0")},
        ],
    })
