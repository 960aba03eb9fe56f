from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, to_iso_date, utcnow


# =============================================================================
# TAGS (CONSTANTS)
# =============================================================================

PAYMENT_CASH = "cash"
PAYMENT_CARD = "card"
PAYMENT_MOBILE_MONEY = "mobile_money"
PAYMENT_CREDIT = "credit"

SOURCE_CASH_REGISTER = "cash_register"
SOURCE_BANK = "bank"


class Sale(db.Model):
    """
    Point-of-sale receipt (owned by the POS screens).

    Only the fields the drawer calculation reads are modelled here.
    Timestamp-filtered: counted on the local day containing created_at.
    """
    __tablename__ = "sales"
    __table_args__ = (
        db.Index("ix_sales_method_created", "payment_method", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    receipt_number = db.Column(db.String(32), nullable=False, unique=True)
    total_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    sold_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, index=True)
    deleted_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "receipt_number": self.receipt_number,
            "total_cents": self.total_cents,
            "payment_method": self.payment_method,
            "sold_by_user_id": self.sold_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }


class CreditPayment(db.Model):
    """Collection against a customer's credit sale. Timestamp-filtered on payment_date."""
    __tablename__ = "credit_payments"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    credit_sale_ref = db.Column(db.String(64), nullable=True)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    payment_date = db.Column(db.DateTime, nullable=False, index=True)
    received_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "credit_sale_ref": self.credit_sale_ref,
            "amount_cents": self.amount_cents,
            "payment_method": self.payment_method,
            "payment_date": to_utc_z(self.payment_date),
            "received_by_user_id": self.received_by_user_id,
            "notes": self.notes,
        }


class Refund(db.Model):
    """Direct refund against a receipt. Always paid out of the drawer."""
    __tablename__ = "refunds"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    receipt_number = db.Column(db.String(32), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(255), nullable=True)
    refunded_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, index=True)
    deleted_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "receipt_number": self.receipt_number,
            "amount_cents": self.amount_cents,
            "reason": self.reason,
            "refunded_by_user_id": self.refunded_by_user_id,
            "created_at": to_utc_z(self.created_at),
            "deleted_at": to_utc_z(self.deleted_at),
        }


class Exchange(db.Model):
    """
    Item exchange or exchange-refund.

    Date-filtered: cash_date is the store-local day the cashier picked for the
    top-up / refund, which may differ from the day the record was entered.
    """
    __tablename__ = "exchanges"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    original_receipt_number = db.Column(db.String(32), nullable=True)
    exchange_type = db.Column(db.String(16), nullable=False, default="exchange")  # exchange, refund
    amount_paid_cents = db.Column(db.Integer, nullable=False, default=0)  # top-up collected
    refund_given_cents = db.Column(db.Integer, nullable=False, default=0)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    processed_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    cash_date = db.Column(db.Date, nullable=False, index=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_receipt_number": self.original_receipt_number,
            "exchange_type": self.exchange_type,
            "amount_paid_cents": self.amount_paid_cents,
            "refund_given_cents": self.refund_given_cents,
            "payment_method": self.payment_method,
            "processed_by_user_id": self.processed_by_user_id,
            "cash_date": to_iso_date(self.cash_date),
        }


class Expense(db.Model):
    """Operating expense. Only payment_source=cash_register leaves the drawer."""
    __tablename__ = "expenses"
    __table_args__ = (
        db.Index("ix_expenses_source_date", "payment_source", "expense_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(32), nullable=False, default="other")
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    payment_source = db.Column(db.String(32), nullable=False, default=SOURCE_CASH_REGISTER)
    expense_date = db.Column(db.Date, nullable=False)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "description": self.description,
            "category": self.category,
            "amount_cents": self.amount_cents,
            "payment_method": self.payment_method,
            "payment_source": self.payment_source,
            "expense_date": to_iso_date(self.expense_date),
            "created_by_user_id": self.created_by_user_id,
        }


class SupplierPayment(db.Model):
    """Payment to a supplier. Only payment_source=cash_register leaves the drawer."""
    __tablename__ = "supplier_payments"
    __table_args__ = (
        db.Index("ix_supplier_payments_source_date", "payment_source", "payment_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_name = db.Column(db.String(128), nullable=False)
    amount_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(32), nullable=False, default=PAYMENT_CASH)
    payment_source = db.Column(db.String(32), nullable=False, default=SOURCE_CASH_REGISTER)
    payment_date = db.Column(db.Date, nullable=False)
    reference_number = db.Column(db.String(64), nullable=True)
    paid_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier_name": self.supplier_name,
            "amount_cents": self.amount_cents,
            "payment_method": self.payment_method,
            "payment_source": self.payment_source,
            "payment_date": to_iso_date(self.payment_date),
            "reference_number": self.reference_number,
            "paid_by_user_id": self.paid_by_user_id,
        }
