# Overview: Shift-Close / Deposit Locker; moves drawer cash into the bank.

"""
Shift-Close and Bank Deposit Service

WHY: Once cash is deposited it leaves the drawer for good. The deposit row
is the lock: recompute always re-sums deposits for the date, so the drawer
can never get that cash back by recalculation.

DESIGN PRINCIPLES:
- Shift close is the only writer that takes a day to zero outside normal
  aggregation
- Deposit insert + ledger update happen in one transaction
- The day row is locked before reading the balance, so a second
  concurrent close sees the first deposit and finds nothing left
- A closed day re-opens if new same-day inflows arrive later
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app

from ..extensions import db
from ..errors import ConfigurationError, InsufficientBalanceError, ValidationError
from ..models import BankDeposit, BankSettings, CashRegisterDay, User
from ..time_utils import parse_business_date, utcnow
from .concurrency import WriteConflict, run_with_retry
from .ledger_service import resolve_date_range, recompute_in_session


SHIFT_CLOSE_NOTE = "End of day shift close"


@dataclass
class DepositReceipt:
    deposit: BankDeposit
    day: CashRegisterDay

    def to_dict(self) -> dict:
        return {
            "deposit": self.deposit.to_dict(),
            "cash_register": self.day.to_dict(),
        }


# =============================================================================
# BANK SETTINGS
# =============================================================================

def get_bank_settings() -> BankSettings | None:
    """Most recently updated active bank account, if any."""
    return db.session.query(BankSettings).filter_by(is_active=True).order_by(
        BankSettings.updated_at.desc(),
        BankSettings.id.desc(),
    ).first()


def configure_bank(bank_name: str, account_number: str | None = None) -> BankSettings:
    """Create or update the bank account used for shift-close deposits."""
    bank_name = (bank_name or "").strip()
    if not bank_name:
        raise ValidationError("bank_name is required")
    account_number = (account_number or "").strip() or None

    now = utcnow()
    settings = get_bank_settings()
    if settings is None:
        settings = BankSettings(created_at=now, is_active=True)
        db.session.add(settings)

    settings.bank_name = bank_name
    settings.account_number = account_number
    settings.updated_at = now
    db.session.commit()

    return settings


def _require_bank() -> BankSettings:
    settings = get_bank_settings()
    if settings is None or not settings.is_configured:
        raise ConfigurationError(
            "No bank account configured. Set up bank details in Settings before closing the shift."
        )
    return settings


def _require_user(user_id: int | None) -> None:
    if user_id is None:
        return
    if db.session.get(User, user_id) is None:
        raise ValidationError(f"Unknown staff member: {user_id}")


def _require_positive_amount(amount_cents) -> int:
    if isinstance(amount_cents, bool) or not isinstance(amount_cents, int):
        raise ValidationError("amount_cents must be an integer")
    if amount_cents <= 0:
        raise ValidationError("amount_cents must be positive")
    return amount_cents


# =============================================================================
# SHIFT CLOSE
# =============================================================================

def close_shift(
    business_date,
    *,
    closed_by_user_id: int | None = None,
    reference_number: str | None = None,
    notes: str | None = None,
) -> DepositReceipt:
    """
    Deposit the day's full closing balance to the configured bank.

    Args:
        business_date: Store-local date being closed (explicit, never "now")
        closed_by_user_id: Staff member performing the close
        reference_number: Bank slip reference, if known
        notes: Free-text note stored on the deposit and on the day

    Returns:
        DepositReceipt with the new deposit and the day (closing balance 0)

    Raises:
        ConfigurationError: no bank configured (action blocked)
        InsufficientBalanceError: closing balance is not > 0 (no-op)
        ConcurrentModificationError: row conflict persisted through retries
    """
    d = parse_business_date(business_date)
    bank = _require_bank()
    _require_user(closed_by_user_id)

    def _op():
        # Fresh figure from source events, with the row locked
        day = recompute_in_session(d)
        balance = day.closing_balance_cents

        if balance <= 0:
            # Keep the refreshed snapshot; there is simply nothing to deposit
            db.session.commit()
            raise InsufficientBalanceError(
                f"No cash to deposit for {d.isoformat()} (closing balance {balance})"
            )

        now = utcnow()
        deposit = BankDeposit(
            amount_cents=balance,
            bank_name=bank.bank_name,
            account_number=bank.account_number,
            deposit_date=d,
            reference_number=reference_number,
            notes=notes or SHIFT_CLOSE_NOTE,
            deposited_by_user_id=closed_by_user_id,
            created_at=now,
        )
        db.session.add(deposit)
        db.session.flush()

        # Fold the deposit back in from source; closing drops to zero
        day = recompute_in_session(d)
        if day.closing_balance_cents != 0:
            # Another close or a new event landed after the first read
            raise WriteConflict(
                f"Drawer for {d.isoformat()} changed during shift close"
            )
        day.closed_by_user_id = closed_by_user_id
        day.closed_at = now
        if notes:
            day.notes = notes
        day.updated_at = now

        db.session.commit()
        return DepositReceipt(deposit=deposit, day=day)

    receipt = run_with_retry(_op)

    current_app.logger.info(
        "Shift closed for %s: deposited %d to %s",
        d.isoformat(),
        receipt.deposit.amount_cents,
        receipt.deposit.bank_name,
    )
    return receipt


# =============================================================================
# MANUAL DEPOSITS
# =============================================================================

def record_deposit(
    business_date,
    amount_cents: int,
    *,
    bank_name: str | None = None,
    account_number: str | None = None,
    reference_number: str | None = None,
    notes: str | None = None,
    deposited_by_user_id: int | None = None,
) -> DepositReceipt:
    """
    Record an arbitrary bank deposit against a date and refresh that day.

    Bank details default to the configured account. The amount is not capped
    by the drawer balance.
    """
    d = parse_business_date(business_date)
    amount_cents = _require_positive_amount(amount_cents)
    _require_user(deposited_by_user_id)

    bank_name = (bank_name or "").strip()
    if not bank_name:
        settings = get_bank_settings()
        if settings is None or not settings.is_configured:
            raise ValidationError("bank_name is required when no bank account is configured")
        bank_name = settings.bank_name
        account_number = account_number or settings.account_number

    def _op():
        deposit = BankDeposit(
            amount_cents=amount_cents,
            bank_name=bank_name,
            account_number=account_number or None,
            deposit_date=d,
            reference_number=reference_number or None,
            notes=notes or None,
            deposited_by_user_id=deposited_by_user_id,
            created_at=utcnow(),
        )
        db.session.add(deposit)
        db.session.flush()

        day = recompute_in_session(d)
        db.session.commit()
        return DepositReceipt(deposit=deposit, day=day)

    receipt = run_with_retry(_op)

    current_app.logger.info(
        "Bank deposit recorded for %s: %d to %s", d.isoformat(), amount_cents, bank_name
    )
    return receipt


def list_deposits(start_date=None, end_date=None) -> list[BankDeposit]:
    query = db.session.query(BankDeposit)
    if start_date is not None or end_date is not None:
        if start_date is None or end_date is None:
            raise ValidationError("start and end must be given together")
        start, end = resolve_date_range(start_date, end_date)
        query = query.filter(BankDeposit.deposit_date >= start, BankDeposit.deposit_date <= end)
    return query.order_by(BankDeposit.deposit_date.desc(), BankDeposit.id.desc()).all()
