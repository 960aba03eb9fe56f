"""
Cash register and banking API tests.

Verifies:
- Day snapshots are served as JSON with a derived status
- Validation and business errors map to their codes and HTTP statuses
- Shift close over HTTP: blocked without a bank, 201 once, 409 after
- Range listing reports stale opening balances
"""

from datetime import timedelta

import pytest

from cashbook.time_utils import local_today

from .conftest import DAY, STORE_OFFSET


class TestCashRegisterRoutes:

    def test_get_day(self, client, scenario_a):
        resp = client.get("/api/cash-register/2026-10-19")
        assert resp.status_code == 200
        body = resp.get_json()["cash_register"]
        assert body["date"] == "2026-10-19"
        assert body["total_inflows_cents"] == 120_000
        assert body["closing_balance_cents"] == 105_000
        assert body["status"] == "OPEN"

    def test_get_day_without_refresh_keeps_stored_row(self, client, events):
        events.sale(1_000)
        client.get("/api/cash-register/2026-10-19")
        events.sale(2_000)

        stored = client.get("/api/cash-register/2026-10-19?refresh=0").get_json()
        assert stored["cash_register"]["closing_balance_cents"] == 1_000

        fresh = client.post("/api/cash-register/2026-10-19/recompute").get_json()
        assert fresh["cash_register"]["closing_balance_cents"] == 3_000

    def test_bad_date(self, client, db_session):
        resp = client.get("/api/cash-register/19-10-2026")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "validation_error"

    @pytest.mark.parametrize("value", ["0001-01-01", "9999-12-31"])
    def test_calendar_edge_dates(self, client, db_session, value):
        resp = client.get(f"/api/cash-register/{value}")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "validation_error"

    def test_today(self, client, db_session):
        resp = client.get("/api/cash-register/today")
        assert resp.status_code == 200
        today = local_today(STORE_OFFSET)
        assert resp.get_json()["cash_register"]["date"] == today.isoformat()

    def test_list_requires_range(self, client, db_session):
        resp = client.get("/api/cash-register")
        assert resp.status_code == 400

    def test_list_reports_chain_breaks(self, client, events):
        prev = DAY - timedelta(days=1)
        events.sale(10_000, prev)
        client.post(f"/api/cash-register/{prev.isoformat()}/recompute")
        client.post("/api/cash-register/2026-10-19/recompute")

        # Backdated sale on the prior day, recomputed alone
        events.sale(4_000, prev)
        client.post(f"/api/cash-register/{prev.isoformat()}/recompute")

        body = client.get(f"/api/cash-register?start={prev.isoformat()}&end=2026-10-19").get_json()
        assert [d["date"] for d in body["cash_register"]] == [prev.isoformat(), "2026-10-19"]
        assert body["chain_breaks"] == ["2026-10-19"]

        repaired = client.post(
            "/api/cash-register/recompute-range",
            json={"start": prev.isoformat(), "end": "2026-10-19"},
        )
        assert repaired.status_code == 200
        assert repaired.get_json()["cash_register"][-1]["opening_balance_cents"] == 14_000

    def test_recompute_range_rejects_inverted_range(self, client, db_session):
        resp = client.post(
            "/api/cash-register/recompute-range",
            json={"start": "2026-10-19", "end": "2026-10-01"},
        )
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "validation_error"


class TestCloseShiftRoute:

    def test_blocked_without_bank(self, client, scenario_a):
        resp = client.post("/api/cash-register/2026-10-19/close-shift", json={})
        assert resp.status_code == 409
        assert resp.get_json()["code"] == "bank_not_configured"

    def test_close_then_nothing_left(self, client, scenario_a, cashier):
        resp = client.put("/api/bank-settings", json={"bank_name": "Stanbic", "account_number": "9030"})
        assert resp.status_code == 200

        resp = client.post(
            "/api/cash-register/2026-10-19/close-shift",
            json={"closed_by_user_id": cashier.id, "reference_number": "SLIP-1"},
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["deposit"]["amount_cents"] == 105_000
        assert body["deposit"]["bank_name"] == "Stanbic"
        assert body["cash_register"]["closing_balance_cents"] == 0
        assert body["cash_register"]["status"] == "CLOSED"

        again = client.post("/api/cash-register/2026-10-19/close-shift", json={})
        assert again.status_code == 409
        assert again.get_json()["code"] == "no_balance_to_deposit"

    def test_non_integer_user(self, client, scenario_a, bank):
        resp = client.post(
            "/api/cash-register/2026-10-19/close-shift",
            json={"closed_by_user_id": "abc"},
        )
        assert resp.status_code == 400


class TestBankingRoutes:

    def test_record_and_list_deposits(self, client, scenario_a, bank):
        resp = client.post("/api/bank-deposits", json={
            "deposit_date": "2026-10-19",
            "amount_cents": 30_000,
            "reference_number": "R-9",
        })
        assert resp.status_code == 201
        assert resp.get_json()["cash_register"]["closing_balance_cents"] == 75_000

        listing = client.get("/api/bank-deposits?start=2026-10-19&end=2026-10-19").get_json()
        assert len(listing["deposits"]) == 1
        assert listing["total_deposited_cents"] == 30_000

    def test_missing_fields(self, client, db_session):
        resp = client.post("/api/bank-deposits", json={"amount_cents": 100})
        assert resp.status_code == 400

    def test_bank_settings_roundtrip(self, client, db_session):
        assert client.get("/api/bank-settings").get_json()["bank_settings"] is None

        client.put("/api/bank-settings", json={"bank_name": "Centenary"})
        settings = client.get("/api/bank-settings").get_json()["bank_settings"]
        assert settings["bank_name"] == "Centenary"

    def test_blank_bank_name(self, client, db_session):
        resp = client.put("/api/bank-settings", json={"bank_name": ""})
        assert resp.status_code == 400


def test_health(client, db_session):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "ok"
    assert body["store_utc_offset"] == "+03:00"
    assert body["currency"] == "UGX"
    assert body["checks"]["database"]["status"] == "healthy"
