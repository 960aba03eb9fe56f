# Overview: Error taxonomy for the cash reconciliation core.

"""
Cashbook errors.

Services raise these; the blueprints translate them into JSON responses
with the status code carried by the class. Nothing in the core swallows
them: a silently dropped aggregation failure would display a wrong drawer
balance.
"""


class CashbookError(Exception):
    """Base class for all reconciliation errors."""
    code = "cashbook_error"
    status_code = 400

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class ValidationError(CashbookError, ValueError):
    """400-level input problem (bad date, non-positive amount, missing field)."""
    code = "validation_error"
    status_code = 400


class ConfigurationError(CashbookError):
    """Bank account not set up. User must fix it in settings; action is blocked."""
    code = "bank_not_configured"
    status_code = 409


class InsufficientBalanceError(CashbookError):
    """Nothing in the drawer to deposit. Informational, not fatal."""
    code = "no_balance_to_deposit"
    status_code = 409


class AggregationError(CashbookError):
    """One or more event-source reads failed. No snapshot was written."""
    code = "aggregation_failed"
    status_code = 503


class ConcurrentModificationError(CashbookError):
    """Writers raced on the same ledger row and retries were exhausted."""
    code = "concurrent_modification"
    status_code = 409
