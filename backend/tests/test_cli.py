"""
Ledger CLI tests.

Verifies:
- close-shift deposits the drawer and reports the zeroed day
- close-shift surfaces business errors as a failed command
- check-chain lists stale days and passes once they are repaired
"""

from datetime import timedelta

from cashbook.models import BankDeposit
from cashbook.services import ledger_service

from .conftest import DAY


PREV = DAY - timedelta(days=1)


class TestCloseShiftCommand:

    def test_close_shift(self, app, scenario_a, bank, cashier, db_session):
        runner = app.test_cli_runner()
        result = runner.invoke(args=[
            "ledger", "close-shift", "2026-10-19",
            "--closed-by", str(cashier.id),
            "--reference", "SLIP-3",
        ])

        assert result.exit_code == 0, result.output
        assert "PASS Deposited 105000 to Test Bank for 2026-10-19" in result.output
        assert "[CLOSED]" in result.output

        deposit = db_session.query(BankDeposit).one()
        assert deposit.reference_number == "SLIP-3"
        assert deposit.deposited_by_user_id == cashier.id

    def test_close_shift_without_bank(self, app, scenario_a):
        result = app.test_cli_runner().invoke(args=["ledger", "close-shift", "2026-10-19"])

        assert result.exit_code != 0
        assert "bank_not_configured" in result.output

    def test_close_shift_bad_date(self, app, db_session):
        result = app.test_cli_runner().invoke(args=["ledger", "close-shift", "19-10-2026"])

        assert result.exit_code != 0
        assert "validation_error" in result.output


class TestCheckChainCommand:

    def test_reports_and_clears_stale_days(self, app, events):
        events.sale(10_000, PREV)
        ledger_service.recompute_range(PREV, DAY)
        events.sale(2_500, PREV)
        ledger_service.recompute(PREV)

        runner = app.test_cli_runner()
        result = runner.invoke(args=["ledger", "check-chain", PREV.isoformat(), "2026-10-19"])
        assert result.exit_code == 0, result.output
        assert "STALE 2026-10-19" in result.output
        assert "WARN 1 stale day(s)" in result.output

        repair = runner.invoke(args=["ledger", "recompute-range", PREV.isoformat(), "2026-10-19"])
        assert repair.exit_code == 0, repair.output
        assert "PASS Recomputed 2 day(s)." in repair.output

        result = runner.invoke(args=["ledger", "check-chain", PREV.isoformat(), "2026-10-19"])
        assert "PASS Opening balances chain correctly." in result.output
