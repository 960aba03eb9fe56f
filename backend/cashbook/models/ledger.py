from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date


DAY_STATUS_OPEN = "OPEN"
DAY_STATUS_CLOSED = "CLOSED"


class CashRegisterDay(db.Model):
    """
    Daily drawer snapshot, one row per store-local calendar date.

    WHY: Banking, Point-of-Sale and reporting all read the same drawer
    figure; they must never recompute it ad hoc.

    INVARIANT:
        closing = opening + inflows - refunds - expenses
                  - supplier payments - deposits

    All totals are re-derived from the event tables on every recompute;
    nothing here is incremented in place. version_id guards against two
    writers interleaving partial sums on the same date.
    """
    __tablename__ = "cash_register_days"
    __table_args__ = (
        db.UniqueConstraint("date", name="uq_cash_register_days_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, nullable=False, index=True)

    # All amounts in minor units
    opening_balance_cents = db.Column(db.Integer, nullable=False, default=0)
    total_inflows_cents = db.Column(db.Integer, nullable=False, default=0)
    total_outflows_refunds_cents = db.Column(db.Integer, nullable=False, default=0)
    total_expenses_cents = db.Column(db.Integer, nullable=False, default=0)
    total_supplier_payments_cents = db.Column(db.Integer, nullable=False, default=0)
    total_deposits_cents = db.Column(db.Integer, nullable=False, default=0)
    closing_balance_cents = db.Column(db.Integer, nullable=False, default=0)

    closed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    closed_at = db.Column(db.DateTime, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, nullable=False)
    updated_at = db.Column(db.DateTime, nullable=False)

    closed_by = db.relationship("User", foreign_keys=[closed_by_user_id])
    __mapper_args__ = {"version_id_col": version_id}

    @property
    def status(self) -> str:
        """
        CLOSED once a shift close has happened and nothing came in since.

        A later same-day inflow re-opens the day for another deposit cycle;
        there is no terminal locked state for the row itself.
        """
        if self.closed_by_user_id is not None or self.closed_at is not None:
            if self.closing_balance_cents == 0:
                return DAY_STATUS_CLOSED
        return DAY_STATUS_OPEN

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": to_iso_date(self.date),
            "status": self.status,
            "opening_balance_cents": self.opening_balance_cents,
            "total_inflows_cents": self.total_inflows_cents,
            "total_outflows_refunds_cents": self.total_outflows_refunds_cents,
            "total_expenses_cents": self.total_expenses_cents,
            "total_supplier_payments_cents": self.total_supplier_payments_cents,
            "total_deposits_cents": self.total_deposits_cents,
            "closing_balance_cents": self.closing_balance_cents,
            "closed_by_user_id": self.closed_by_user_id,
            "closed_at": to_utc_z(self.closed_at),
            "notes": self.notes,
            "version_id": self.version_id,
            "updated_at": to_utc_z(self.updated_at),
        }
