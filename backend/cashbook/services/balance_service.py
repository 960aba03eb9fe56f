# Overview: Daily Balance Calculator; folds every money-movement source into one drawer figure.

"""
Daily Balance Calculator

WHY: Sales, credit collections, refunds, exchanges, expenses, supplier
payments and bank deposits live in separate tables with different date
fields and filter keys. This module is the only place they are combined
into a drawer balance; screens never sum them on their own.

FILTERING:
- Timestamp sources (sales, credit payments, refunds) use the UTC range of
  the store-local day from resolve_day_range, never a string prefix.
- Calendar sources (exchanges.cash_date, expenses.expense_date,
  supplier_payments.payment_date, bank_deposits.deposit_date) match the
  date exactly.
- Only cash-method sales/collections and cash_register-sourced
  expenses/supplier payments touch the drawer.
- Deposits are always re-summed from bank_deposits (no cached counter).

All reads happen before anything is written. If one fails, the whole
computation fails with AggregationError.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import date, timedelta

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..errors import AggregationError
from ..models import Sale, CreditPayment, Refund, Exchange, Expense, SupplierPayment, BankDeposit
from ..models.events import PAYMENT_CASH, SOURCE_CASH_REGISTER
from ..time_utils import DayRange, parse_utc_offset, resolve_day_range, to_iso_date


@dataclass(frozen=True)
class DailyTotals:
    """Per-source sums for one business day (minor units)."""
    cash_sales: int = 0
    credit_collections: int = 0
    exchange_top_ups: int = 0
    direct_refunds: int = 0
    exchange_refunds: int = 0
    cash_expenses: int = 0
    cash_supplier_payments: int = 0
    deposits: int = 0

    @property
    def inflows(self) -> int:
        return self.cash_sales + self.credit_collections + self.exchange_top_ups

    @property
    def refund_outflows(self) -> int:
        return self.direct_refunds + self.exchange_refunds

    @property
    def outflows(self) -> int:
        return (
            self.refund_outflows
            + self.cash_expenses
            + self.cash_supplier_payments
            + self.deposits
        )

    def closing_balance(self, opening_balance: int) -> int:
        # No floor: a negative drawer is reported as-is.
        return opening_balance + self.inflows - self.outflows

    def to_dict(self) -> dict:
        data = asdict(self)
        data.update(inflows=self.inflows, refund_outflows=self.refund_outflows, outflows=self.outflows)
        return data


@dataclass(frozen=True)
class DaySnapshot:
    business_date: date
    opening_balance_cents: int
    totals: DailyTotals

    @property
    def closing_balance_cents(self) -> int:
        return self.totals.closing_balance(self.opening_balance_cents)

    def to_dict(self) -> dict:
        return {
            "date": to_iso_date(self.business_date),
            "opening_balance_cents": self.opening_balance_cents,
            "closing_balance_cents": self.closing_balance_cents,
            "totals": self.totals.to_dict(),
        }


def get_store_utc_offset() -> timedelta:
    """Offset parsed at app creation (falls back to parsing the raw config)."""
    offset = current_app.config.get("STORE_UTC_OFFSET_DELTA")
    if offset is None:
        offset = parse_utc_offset(current_app.config.get("STORE_UTC_OFFSET", "+03:00"))
    return offset


def _scalar_sum(column, *criteria) -> int:
    value = db.session.query(func.coalesce(func.sum(column), 0)).filter(*criteria).scalar()
    return int(value or 0)


def _sum_timestamp_sources(day: DayRange) -> dict:
    return {
        "cash_sales": _scalar_sum(
            Sale.total_cents,
            Sale.payment_method == PAYMENT_CASH,
            Sale.deleted_at.is_(None),
            Sale.created_at >= day.start,
            Sale.created_at <= day.end,
        ),
        "credit_collections": _scalar_sum(
            CreditPayment.amount_cents,
            CreditPayment.payment_method == PAYMENT_CASH,
            CreditPayment.payment_date >= day.start,
            CreditPayment.payment_date <= day.end,
        ),
        "direct_refunds": _scalar_sum(
            Refund.amount_cents,
            Refund.deleted_at.is_(None),
            Refund.created_at >= day.start,
            Refund.created_at <= day.end,
        ),
    }


def _sum_calendar_sources(business_date: date) -> dict:
    return {
        "exchange_top_ups": _scalar_sum(Exchange.amount_paid_cents, Exchange.cash_date == business_date),
        "exchange_refunds": _scalar_sum(Exchange.refund_given_cents, Exchange.cash_date == business_date),
        "cash_expenses": _scalar_sum(
            Expense.amount_cents,
            Expense.expense_date == business_date,
            Expense.payment_source == SOURCE_CASH_REGISTER,
        ),
        "cash_supplier_payments": _scalar_sum(
            SupplierPayment.amount_cents,
            SupplierPayment.payment_date == business_date,
            SupplierPayment.payment_source == SOURCE_CASH_REGISTER,
        ),
        "deposits": _scalar_sum(BankDeposit.amount_cents, BankDeposit.deposit_date == business_date),
    }


def collect_day_totals(business_date: date, utc_offset: timedelta | None = None) -> DailyTotals:
    """
    Read every event source for one store-local day.

    Raises:
        AggregationError: if any source query fails (nothing is returned
        partially summed).
    """
    if utc_offset is None:
        utc_offset = get_store_utc_offset()
    day = resolve_day_range(business_date, utc_offset)

    try:
        sums = _sum_timestamp_sources(day)
        sums.update(_sum_calendar_sources(business_date))
    except SQLAlchemyError as exc:
        raise AggregationError(
            f"Could not read cash movements for {business_date.isoformat()}; balance not updated"
        ) from exc

    return DailyTotals(**sums)


def compute_day(
    business_date: date,
    prior_closing_cents: int,
    utc_offset: timedelta | None = None,
) -> DaySnapshot:
    """Aggregate one day on top of the previous closing balance. Read-only."""
    totals = collect_day_totals(business_date, utc_offset)
    return DaySnapshot(
        business_date=business_date,
        opening_balance_cents=int(prior_closing_cents or 0),
        totals=totals,
    )
