# tests/test_api.py
"""HTTP-level tests for the v1 API, with the gateway, cache and mailer overridden."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from app.api.v1.deps import get_business_cache, get_email_client, get_gateway
from app.infrastructure.cache.business_cache import BusinessContextCache
from app.main import app

from tests.fakes import FakeRedis, USER_ID

HEADERS = {"X-User-Id": USER_ID}
APRIL = {"start": "2024-04-01", "end": "2024-04-30"}


@pytest.fixture
def client(books):
    cache = BusinessContextCache(FakeRedis())
    app.dependency_overrides[get_gateway] = lambda: books
    app.dependency_overrides[get_business_cache] = lambda: cache
    app.dependency_overrides[get_email_client] = lambda: AsyncMock()
    # no context manager: startup would try to reach the database
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_missing_user_header(client):
    r = client.get("/api/v1/ledger/day-book", params=APRIL)
    assert r.status_code == 401


class TestGst:
    def test_line(self, client):
        r = client.post("/api/v1/gst/line", json={
            "item": {"quantity": 2, "unit_price": 100, "tax_rate": 18}, "is_interstate": False,
        })
        assert r.status_code == 200
        data = r.json()["data"]
        assert float(data["cgst"]) == 18.0
        assert float(data["igst"]) == 0.0

    def test_document_interstate_from_gstins(self, client):
        r = client.post("/api/v1/gst/document", json={
            "items": [{"quantity": 1, "unit_price": 1000, "tax_rate": 18}],
            "business_gstin": "27AAPFU0939F1ZV",
            "customer_gstin": "29AABCU9603R1ZM",
        })
        assert r.status_code == 200
        assert float(r.json()["data"]["igst"]) == 180.0
        assert r.json()["data"]["amount_in_words"] == "One Thousand One Hundred Eighty Rupees Only"

    def test_negative_price_is_rejected(self, client):
        r = client.post("/api/v1/gst/line", json={"item": {"quantity": 1, "unit_price": -5, "tax_rate": 18}})
        assert r.status_code == 422
        assert r.json()["status"] == "error"

    def test_gstin_lookup(self, client):
        r = client.get("/api/v1/gst/gstin/27aapfu0939f1zv")
        assert r.json()["data"]["valid"] is True
        assert r.json()["data"]["state_code"] == "27"

    def test_gstr1(self, client):
        r = client.get("/api/v1/gst/reports/gstr1", params={"month": 4, "year": 2024}, headers=HEADERS)
        assert r.status_code == 200
        assert r.json()["data"]["summary"]["total_invoices"] == 2

    def test_gstr3b_export(self, client):
        r = client.get(
            "/api/v1/gst/reports/gstr3b", params={"month": 4, "year": 2024, "export": True}, headers=HEADERS,
        )
        assert r.json()["data"]["gstin"] == "27AAPFU0939F1ZV"


class TestBooks:
    def test_party_ledger(self, client):
        r = client.get("/api/v1/ledger/party/customer/c-1", params=APRIL, headers=HEADERS)
        assert r.status_code == 200
        assert float(r.json()["data"]["closing_balance"]) == 600.0

    def test_inverted_window(self, client):
        r = client.get("/api/v1/ledger/day-book", params={"start": "2024-05-01", "end": "2024-04-01"},
                       headers=HEADERS)
        assert r.status_code == 422

    def test_aggregation_failure(self, client, books):
        books.fail_on.add("payments")
        r = client.get("/api/v1/ledger/day-book", params=APRIL, headers=HEADERS)
        assert r.status_code == 502
        assert r.json()["errors"][0]["code"] == "aggregation_failed"

    def test_profit_loss(self, client):
        r = client.get("/api/v1/reports/profit-loss", params=APRIL, headers=HEADERS)
        assert float(r.json()["data"]["total_revenue"]) == 1320.0


class TestPayments:
    def test_record_and_delete(self, client, books):
        r = client.post("/api/v1/payments", json={"invoice_id": "inv-2", "amount": 90}, headers=HEADERS)
        assert r.status_code == 201
        payment_id = r.json()["data"]["id"]

        r = client.delete(f"/api/v1/payments/{payment_id}", headers=HEADERS)
        assert r.status_code == 200
        invoice = next(i for i in books.data["invoices"] if i["id"] == "inv-2")
        assert invoice["status"] == "sent"

    def test_other_tenants_invoice_is_not_found(self, client):
        r = client.post("/api/v1/payments", json={"invoice_id": "inv-x", "amount": 10}, headers=HEADERS)
        assert r.status_code == 404


class TestEWayBill:
    def test_lifecycle(self, client, books):
        books.data["invoices"][0]["total_amount"] = Decimal("60000.00")
        url = "/api/v1/ewaybill/inv-1"
        r = client.post(f"{url}/generate", json={"distance_km": 250, "vehicle_number": "mh12ab1234"},
                        headers=HEADERS)
        assert r.status_code == 200
        assert r.json()["data"]["vehicle_number"] == "MH12AB1234"

        assert client.post(f"{url}/cancel", headers=HEADERS).status_code == 200
        assert client.post(f"{url}/cancel", headers=HEADERS).status_code == 409

        r = client.get("/api/v1/ewaybill", headers=HEADERS)
        assert r.json()["data"]["total"] == 1


class TestSettings:
    def test_context_and_update(self, client):
        r = client.get("/api/v1/settings/context", headers=HEADERS)
        assert r.json()["data"]["industry"] == "retail"

        r = client.put("/api/v1/settings", json={"industry": "restaurant"}, headers=HEADERS)
        assert r.status_code == 200
        r = client.get("/api/v1/settings/context", headers=HEADERS)
        assert r.json()["data"]["features"]["show_table_billing"] is True

    def test_unknown_industry_features(self, client):
        r = client.get("/api/v1/settings/industry/bakery")
        assert r.json()["data"]["display_name"] == "General Business"


def test_manual_reminder_needs_rental_id(client):
    r = client.post("/api/v1/rentals/reminders", json={"type": "manual"}, headers=HEADERS)
    assert r.status_code == 422


class TestItr:
    def test_compare(self, client):
        r = client.post("/api/v1/itr/compare", json={"gross_income": 800000, "deductions": {"section_80c": 150000}})
        data = r.json()["data"]
        assert float(data["old_regime"]["taxable_income"]) == 600000.0
        assert float(data["new_regime"]["taxable_income"]) == 750000.0
        assert data["recommendation"] == "new"

    def test_bad_financial_year(self, client):
        r = client.get("/api/v1/itr/2024-2026/summary", headers=HEADERS)
        assert r.status_code == 422
        assert r.json()["errors"][0]["code"] == "invalid_input"
