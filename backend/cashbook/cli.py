# Overview: Flask CLI command groups for bootstrap and daily ledger maintenance.

# backend/cashbook/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to cashbook (PowerShell: $env:FLASK_APP="cashbook").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (dev/test; production uses `flask db upgrade`).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Staff directory:
# - python -m flask staff create --username jane --name "Jane N."
# - python -m flask staff list
#
# Cash register ledger:
# - python -m flask ledger show 2026-10-19
# - python -m flask ledger recompute 2026-10-19
# - python -m flask ledger recompute-range 2026-10-01 2026-10-19
#   Repair opening balances after a backdated sale/expense/exchange.
# - python -m flask ledger check-chain 2026-10-01 2026-10-19
#   List days whose opening balance no longer matches the prior close.
# - python -m flask ledger close-shift 2026-10-19 --closed-by 1
# - python -m flask ledger set-bank "Stanbic Bank" --account 9030001234

import click
from flask.cli import with_appcontext

from .errors import CashbookError
from .extensions import db
from .models import User
from .services import ledger_service, deposit_service


def _fail(e: CashbookError):
    raise click.ClickException(f"{e.code}: {e}")


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    click.echo("BUILD  Creating tables...")
    db.create_all()
    click.echo("PASS Database ready.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA, including bank deposits!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('staff')
def staff_group():
    """Staff directory referenced by shift closes and deposits."""


@staff_group.command('create')
@click.option('--username', prompt=True)
@click.option('--name', 'display_name', default=None)
@with_appcontext
def create_staff(username, display_name):
    if db.session.query(User).filter_by(username=username).first():
        raise click.ClickException(f"User '{username}' already exists")
    user = User(username=username, display_name=display_name, is_active=True)
    db.session.add(user)
    db.session.commit()
    click.echo(f"PASS Created staff member {user.username} (ID: {user.id})")


@staff_group.command('list')
@with_appcontext
def list_staff():
    users = db.session.query(User).order_by(User.id).all()
    if not users:
        click.echo("No staff found.")
        return
    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.username:<20} {user.display_name or '':<30} {active_str}")


@click.group('ledger')
def ledger_group():
    """Daily cash register ledger."""


def _echo_day(day):
    click.echo(
        f"{day.date.isoformat()}  open={day.opening_balance_cents:>12}  "
        f"in={day.total_inflows_cents:>12}  refunds={day.total_outflows_refunds_cents:>10}  "
        f"exp={day.total_expenses_cents:>10}  supp={day.total_supplier_payments_cents:>10}  "
        f"dep={day.total_deposits_cents:>12}  close={day.closing_balance_cents:>12}  [{day.status}]"
    )


@ledger_group.command('show')
@click.argument('business_date')
@with_appcontext
def show_day(business_date):
    """Show the stored row (created if missing)."""
    try:
        _echo_day(ledger_service.get_or_create(business_date))
    except CashbookError as e:
        _fail(e)


@ledger_group.command('recompute')
@click.argument('business_date')
@with_appcontext
def recompute_day(business_date):
    try:
        _echo_day(ledger_service.recompute(business_date))
    except CashbookError as e:
        _fail(e)


@ledger_group.command('recompute-range')
@click.argument('start')
@click.argument('end')
@with_appcontext
def recompute_range(start, end):
    """Recompute START..END oldest-first so opening balances chain again."""
    try:
        days = ledger_service.recompute_range(start, end)
    except CashbookError as e:
        _fail(e)
    for day in days:
        _echo_day(day)
    click.echo(f"PASS Recomputed {len(days)} day(s).")


@ledger_group.command('check-chain')
@click.argument('start')
@click.argument('end')
@with_appcontext
def check_chain(start, end):
    try:
        breaks = ledger_service.find_chain_breaks(start, end)
    except CashbookError as e:
        _fail(e)
    if not breaks:
        click.echo("PASS Opening balances chain correctly.")
        return
    for d in breaks:
        click.echo(f"STALE {d.isoformat()}")
    click.echo(f"WARN {len(breaks)} stale day(s). Run 'ledger recompute-range {start} {end}'.")


@ledger_group.command('close-shift')
@click.argument('business_date')
@click.option('--closed-by', type=int, default=None, help='Staff user ID performing the close')
@click.option('--reference', default=None, help='Bank slip reference number')
@with_appcontext
def close_shift(business_date, closed_by, reference):
    try:
        receipt = deposit_service.close_shift(
            business_date,
            closed_by_user_id=closed_by,
            reference_number=reference,
        )
    except CashbookError as e:
        _fail(e)
    click.echo(
        f"PASS Deposited {receipt.deposit.amount_cents} to {receipt.deposit.bank_name} "
        f"for {receipt.deposit.deposit_date.isoformat()}"
    )
    _echo_day(receipt.day)


@ledger_group.command('set-bank')
@click.argument('bank_name')
@click.option('--account', 'account_number', default=None)
@with_appcontext
def set_bank(bank_name, account_number):
    try:
        settings = deposit_service.configure_bank(bank_name, account_number)
    except CashbookError as e:
        _fail(e)
    click.echo(f"PASS Bank set to {settings.bank_name} ({settings.account_number or 'no account number'})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(staff_group)
    app.cli.add_command(ledger_group)
