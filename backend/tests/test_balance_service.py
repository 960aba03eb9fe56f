"""
Daily Balance Calculator tests.

Verifies:
- Each event source is summed with its own filter (method, source, date key)
- Soft-deleted sales/refunds are ignored
- Closing balance arithmetic (no zero floor)
- A failed source read aborts without writing a snapshot
"""

from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from cashbook.errors import AggregationError
from cashbook.models.events import PAYMENT_CARD, PAYMENT_CREDIT, PAYMENT_MOBILE_MONEY, SOURCE_BANK
from cashbook.services import balance_service, ledger_service
from cashbook.services.balance_service import DailyTotals, collect_day_totals, compute_day

from .conftest import DAY


NEXT_DAY = DAY + timedelta(days=1)
PREV_DAY = DAY - timedelta(days=1)


# =============================================================================
# PURE ARITHMETIC
# =============================================================================


class TestDailyTotals:

    def test_inflows_and_outflows(self):
        totals = DailyTotals(
            cash_sales=100,
            credit_collections=20,
            exchange_top_ups=5,
            direct_refunds=7,
            exchange_refunds=3,
            cash_expenses=10,
            cash_supplier_payments=15,
            deposits=40,
        )
        assert totals.inflows == 125
        assert totals.refund_outflows == 10
        assert totals.outflows == 75
        assert totals.closing_balance(50) == 100

    def test_negative_closing_is_not_clamped(self):
        totals = DailyTotals(cash_expenses=30_000)
        assert totals.closing_balance(10_000) == -20_000

    def test_to_dict_includes_derived_figures(self):
        data = DailyTotals(cash_sales=10, deposits=4).to_dict()
        assert data["inflows"] == 10
        assert data["outflows"] == 4


# =============================================================================
# SOURCE AGGREGATION
# =============================================================================


class TestCollectDayTotals:

    def test_scenario_a(self, scenario_a):
        snapshot = compute_day(DAY, 0)
        totals = snapshot.totals
        assert totals.cash_sales == 100_000
        assert totals.credit_collections == 20_000
        assert totals.direct_refunds == 5_000
        assert totals.cash_expenses == 10_000
        assert totals.deposits == 0
        assert snapshot.closing_balance_cents == 105_000

    def test_empty_day(self, db_session):
        assert collect_day_totals(DAY) == DailyTotals()

    def test_only_cash_sales_count(self, events):
        events.sale(1_000)
        events.sale(2_000, method=PAYMENT_CARD)
        events.sale(3_000, method=PAYMENT_MOBILE_MONEY)
        events.sale(4_000, method=PAYMENT_CREDIT)
        assert collect_day_totals(DAY).cash_sales == 1_000

    def test_soft_deleted_sales_and_refunds_ignored(self, events):
        events.sale(1_000)
        events.sale(9_000, deleted=True)
        events.refund(500)
        events.refund(700, deleted=True)
        totals = collect_day_totals(DAY)
        assert totals.cash_sales == 1_000
        assert totals.direct_refunds == 500

    def test_sales_bucketed_by_store_local_day(self, events):
        events.sale(1_000, DAY, hour=0, minute=5)     # just after local midnight
        events.sale(2_000, DAY, hour=23, minute=55)   # just before next midnight
        events.sale(4_000, NEXT_DAY, hour=0, minute=0)
        events.sale(8_000, PREV_DAY, hour=23, minute=59)

        assert collect_day_totals(DAY).cash_sales == 3_000
        assert collect_day_totals(NEXT_DAY).cash_sales == 4_000
        assert collect_day_totals(PREV_DAY).cash_sales == 8_000

    def test_only_cash_credit_collections_count(self, events):
        events.credit_payment(5_000)
        events.credit_payment(6_000, method=PAYMENT_MOBILE_MONEY)
        assert collect_day_totals(DAY).credit_collections == 5_000

    def test_exchanges_match_cash_date(self, events):
        events.exchange(DAY, top_up=3_000)
        events.exchange(DAY, refund_given=1_200)
        events.exchange(NEXT_DAY, top_up=9_999)
        totals = collect_day_totals(DAY)
        assert totals.exchange_top_ups == 3_000
        assert totals.exchange_refunds == 1_200
        assert totals.inflows == 3_000
        assert totals.refund_outflows == 1_200

    def test_bank_sourced_expenses_do_not_touch_drawer(self, events):
        events.expense(2_500)
        events.expense(40_000, source=SOURCE_BANK)
        assert collect_day_totals(DAY).cash_expenses == 2_500

    def test_bank_sourced_supplier_payments_do_not_touch_drawer(self, events):
        events.supplier_payment(7_000)
        events.supplier_payment(90_000, source=SOURCE_BANK)
        assert collect_day_totals(DAY).cash_supplier_payments == 7_000

    def test_deposits_match_deposit_date(self, events):
        events.deposit(10_000, DAY)
        events.deposit(2_000, DAY)
        events.deposit(50_000, NEXT_DAY)
        assert collect_day_totals(DAY).deposits == 12_000

    def test_every_source_in_one_day(self, events):
        events.sale(100_000)
        events.credit_payment(20_000)
        events.exchange(top_up=5_000)
        events.refund(5_000)
        events.exchange(refund_given=2_000)
        events.expense(10_000)
        events.supplier_payment(8_000)
        events.deposit(50_000)

        snapshot = compute_day(DAY, 1_000)
        assert snapshot.totals.inflows == 125_000
        assert snapshot.totals.outflows == 75_000
        assert snapshot.closing_balance_cents == 51_000

    def test_offset_parameter_shifts_boundaries(self, events):
        # 02:00 local (+03:00) is 23:00 UTC the previous day
        events.sale(1_000, DAY, hour=2)
        assert collect_day_totals(DAY).cash_sales == 1_000
        assert collect_day_totals(DAY, timedelta(0)).cash_sales == 0
        assert collect_day_totals(PREV_DAY, timedelta(0)).cash_sales == 1_000


# =============================================================================
# FAILURE SEMANTICS
# =============================================================================


class TestAggregationFailure:

    def _boom(self, *args, **kwargs):
        raise OperationalError("SELECT sum(...)", {}, Exception("connection reset"))

    def test_source_failure_raises_aggregation_error(self, db_session, monkeypatch):
        monkeypatch.setattr(balance_service, "_sum_calendar_sources", self._boom)
        with pytest.raises(AggregationError):
            collect_day_totals(DAY)

    def test_no_partial_snapshot_written(self, events, monkeypatch):
        events.sale(10_000)
        monkeypatch.setattr(balance_service, "_sum_calendar_sources", self._boom)

        with pytest.raises(AggregationError):
            ledger_service.recompute(DAY)

        assert ledger_service.get_day(DAY) is None

    def test_existing_snapshot_left_untouched(self, events, monkeypatch):
        events.sale(10_000)
        before = ledger_service.recompute(DAY).to_dict()

        events.sale(5_000)
        monkeypatch.setattr(balance_service, "_sum_timestamp_sources", self._boom)
        with pytest.raises(AggregationError):
            ledger_service.recompute(DAY)

        assert ledger_service.get_day(DAY).to_dict() == before


def test_entry_timestamps_default_to_utc_naive(events, cashier):
    exchange = events.exchange(top_up=1_000)

    assert exchange.created_at is not None and exchange.created_at.tzinfo is None
    assert cashier.created_at is not None and cashier.created_at.tzinfo is None
