from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


class BankSettings(db.Model):
    """
    Bank account the drawer is deposited into.

    The most recently updated active row is the configured account.
    Shift close is blocked until one exists with a non-blank bank_name.
    """
    __tablename__ = "bank_settings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    bank_name = db.Column(db.String(128), nullable=False)
    account_number = db.Column(db.String(64), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    @property
    def is_configured(self) -> bool:
        return bool(self.is_active and (self.bank_name or "").strip())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "is_active": self.is_active,
            "is_configured": self.is_configured,
            "updated_at": to_utc_z(self.updated_at),
        }


class BankDeposit(db.Model):
    """
    Cash moved from the drawer into the bank.

    IMMUTABLE: deposits are never updated or deleted by the core. Every
    recompute of deposit_date re-sums them, so a deposit can never be
    "undeposited" by recalculation.
    """
    __tablename__ = "bank_deposits"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    amount_cents = db.Column(db.Integer, nullable=False)
    bank_name = db.Column(db.String(128), nullable=False)
    account_number = db.Column(db.String(64), nullable=True)
    deposit_date = db.Column(db.Date, nullable=False, index=True)
    reference_number = db.Column(db.String(64), nullable=True)
    notes = db.Column(db.Text, nullable=True)
    deposited_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False)

    deposited_by = db.relationship("User", foreign_keys=[deposited_by_user_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount_cents": self.amount_cents,
            "bank_name": self.bank_name,
            "account_number": self.account_number,
            "deposit_date": to_iso_date(self.deposit_date),
            "reference_number": self.reference_number,
            "notes": self.notes,
            "deposited_by_user_id": self.deposited_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
