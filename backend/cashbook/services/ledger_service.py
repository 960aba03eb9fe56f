# Overview: Cash Register Ledger; idempotent per-date upsert of the drawer snapshot.

"""
Cash Register Ledger Service

WHY: One persisted row per store-local date that Banking, Point-of-Sale and
reporting read concurrently. Rows are created lazily and are never deleted.

DESIGN PRINCIPLES:
- Every write is an upsert keyed by date (unique constraint + retry)
- Totals are re-derived from the event tables on every recompute
- opening_balance(D) = closing_balance(D-1) when D-1 has a row, else 0
  (no backward walk across gaps)
- recompute(D) never touches D+1..; recompute_range is the explicit
  forward cascade after a backdated entry
"""

from __future__ import annotations

from datetime import date, timedelta

from ..extensions import db
from ..errors import ValidationError
from ..models import CashRegisterDay
from ..time_utils import iter_dates, parse_business_date, utcnow
from .balance_service import DaySnapshot, compute_day, get_store_utc_offset
from .concurrency import lock_for_update, run_with_retry


# Upper bound for one cascade / listing request
MAX_RANGE_DAYS = 366

ONE_DAY = timedelta(days=1)


def resolve_date_range(start_date, end_date) -> tuple[date, date]:
    start = parse_business_date(start_date)
    end = parse_business_date(end_date)
    if end < start:
        raise ValidationError("end date must not be before start date")
    if (end - start).days + 1 > MAX_RANGE_DAYS:
        raise ValidationError(f"Date range too large (max {MAX_RANGE_DAYS} days)")
    return start, end


# =============================================================================
# READS
# =============================================================================

def get_day(business_date) -> CashRegisterDay | None:
    """Stored snapshot for a date, without recomputing."""
    d = parse_business_date(business_date)
    return db.session.query(CashRegisterDay).filter_by(date=d).first()


def list_days(start_date, end_date) -> list[CashRegisterDay]:
    start, end = resolve_date_range(start_date, end_date)
    return db.session.query(CashRegisterDay).filter(
        CashRegisterDay.date >= start,
        CashRegisterDay.date <= end,
    ).order_by(CashRegisterDay.date).all()


def find_chain_breaks(start_date, end_date) -> list[date]:
    """
    Dates in range whose stored opening balance no longer matches the
    previous day's closing balance.

    WHY: A backdated entry only updates the day it is recomputed for; later
    days keep a stale opening until they are recomputed too.
    """
    start, end = resolve_date_range(start_date, end_date)
    rows = db.session.query(CashRegisterDay).filter(
        CashRegisterDay.date >= start - ONE_DAY,
        CashRegisterDay.date <= end,
    ).all()
    by_date = {row.date: row for row in rows}

    breaks = []
    for d in iter_dates(start, end):
        row = by_date.get(d)
        prior = by_date.get(d - ONE_DAY)
        if row is None or prior is None:
            continue
        if row.opening_balance_cents != prior.closing_balance_cents:
            breaks.append(d)
    return breaks


def _prior_closing_cents(business_date: date) -> int:
    prior = db.session.query(CashRegisterDay).filter_by(date=business_date - ONE_DAY).first()
    return prior.closing_balance_cents if prior else 0


# =============================================================================
# WRITES
# =============================================================================

def _apply_snapshot(day: CashRegisterDay, snapshot: DaySnapshot) -> bool:
    totals = snapshot.totals
    values = {
        "opening_balance_cents": snapshot.opening_balance_cents,
        "total_inflows_cents": totals.inflows,
        "total_outflows_refunds_cents": totals.refund_outflows,
        "total_expenses_cents": totals.cash_expenses,
        "total_supplier_payments_cents": totals.cash_supplier_payments,
        "total_deposits_cents": totals.deposits,
        "closing_balance_cents": snapshot.closing_balance_cents,
    }
    changed = False
    for field, value in values.items():
        if getattr(day, field) != value:
            setattr(day, field, value)
            changed = True
    return changed


def recompute_in_session(business_date: date) -> CashRegisterDay:
    """
    Recompute and upsert one date inside the caller's transaction.

    The row is locked first; all source reads complete before any field is
    touched. Flushes but does not commit. Callers wrap this in
    run_with_retry.
    """
    day = lock_for_update(
        db.session.query(CashRegisterDay).filter_by(date=business_date)
    ).first()

    snapshot = compute_day(business_date, _prior_closing_cents(business_date), get_store_utc_offset())

    now = utcnow()
    if day is None:
        day = CashRegisterDay(date=business_date, created_at=now, updated_at=now)
        db.session.add(day)
        _apply_snapshot(day, snapshot)
    elif _apply_snapshot(day, snapshot):
        day.updated_at = now

    db.session.flush()
    return day


def recompute(business_date) -> CashRegisterDay:
    """
    Re-derive a day's snapshot from the event tables and upsert it.

    Idempotent: with no new events two calls leave the row identical
    (no version bump, no double-counted deposits).

    Raises:
        ValidationError: bad date
        AggregationError: a source read failed; nothing written
        ConcurrentModificationError: retries exhausted on a row conflict
    """
    d = parse_business_date(business_date)

    def _op():
        day = recompute_in_session(d)
        db.session.commit()
        return day

    return run_with_retry(_op)


def get_or_create(business_date) -> CashRegisterDay:
    """Existing row as stored, or a freshly computed one if the date has none."""
    day = get_day(business_date)
    if day is not None:
        return day
    return recompute(business_date)


def recompute_range(start_date, end_date) -> list[CashRegisterDay]:
    """
    Recompute every date from start to end, oldest first.

    Each day chains off the row just recomputed before it, which repairs
    opening balances after a backdated entry. Each date commits on its own;
    a failure part-way leaves earlier dates consistent and is safe to rerun.
    """
    start, end = resolve_date_range(start_date, end_date)
    return [recompute(d) for d in iter_dates(start, end)]
