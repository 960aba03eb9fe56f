from .staff import User
from .events import Sale, CreditPayment, Refund, Exchange, Expense, SupplierPayment
from .banking import BankSettings, BankDeposit
from .ledger import CashRegisterDay

__all__ = [
    'User',
    'Sale', 'CreditPayment', 'Refund', 'Exchange', 'Expense', 'SupplierPayment',
    'BankSettings', 'BankDeposit',
    'CashRegisterDay',
]
