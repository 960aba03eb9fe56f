# Overview: Flask API routes for the daily cash register; parses input and returns JSON responses.

# backend/cashbook/routes/cash_register.py
"""
Cash Register API Routes

WHY: Point-of-Sale and Banking screens both show the drawer balance.
They call these endpoints instead of summing event tables themselves.

DESIGN:
- Opening a screen recomputes the day (idempotent upsert)
- "today" is resolved here, in the store's offset, and nowhere in the core
- Shift close deposits the full closing balance and locks it out
- Range recompute is the explicit repair after backdated entries
"""

from flask import Blueprint, request, jsonify, current_app

from ..errors import CashbookError, ValidationError
from ..services import ledger_service, deposit_service
from ..services.balance_service import get_store_utc_offset
from ..time_utils import local_today, to_iso_date


cash_register_bp = Blueprint("cash_register", __name__, url_prefix="/api/cash-register")


def _error(e: CashbookError):
    return jsonify(e.to_dict()), e.status_code


def _optional_int(data: dict, key: str) -> int | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{key} must be an integer")
    return value


@cash_register_bp.get("/today")
def get_today_route():
    """Recompute and return today's drawer (store-local today)."""
    try:
        today = local_today(get_store_utc_offset())
        day = ledger_service.recompute(today)
        return jsonify({"cash_register": day.to_dict()}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to load today's cash register")
        return jsonify({"error": "Internal server error"}), 500


@cash_register_bp.get("/<string:business_date>")
def get_day_route(business_date: str):
    """
    Return the drawer snapshot for a date.

    Query params:
        refresh: "0" to return the stored row without recomputing
                 (created on first request either way)
    """
    try:
        if request.args.get("refresh", "1") == "0":
            day = ledger_service.get_or_create(business_date)
        else:
            day = ledger_service.recompute(business_date)
        return jsonify({"cash_register": day.to_dict()}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to load cash register")
        return jsonify({"error": "Internal server error"}), 500


@cash_register_bp.post("/<string:business_date>/recompute")
def recompute_day_route(business_date: str):
    try:
        day = ledger_service.recompute(business_date)
        return jsonify({"cash_register": day.to_dict()}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to recompute cash register")
        return jsonify({"error": "Internal server error"}), 500


@cash_register_bp.post("/recompute-range")
def recompute_range_route():
    """
    Recompute a span of days oldest-first (after a backdated entry).

    Request body:
    {
        "start": "2026-10-01",
        "end": "2026-10-19"
    }
    """
    try:
        data = request.get_json(silent=True) or {}
        start = data.get("start")
        end = data.get("end")

        if not start or not end:
            return jsonify({"error": "start and end required", "code": ValidationError.code}), 400

        days = ledger_service.recompute_range(start, end)
        return jsonify({"cash_register": [d.to_dict() for d in days]}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to recompute cash register range")
        return jsonify({"error": "Internal server error"}), 500


@cash_register_bp.get("/")
@cash_register_bp.get("")
def list_days_route():
    """List stored rows for a range plus any dates whose opening went stale."""
    try:
        start = request.args.get("start")
        end = request.args.get("end")

        if not start or not end:
            return jsonify({"error": "start and end required", "code": ValidationError.code}), 400

        days = ledger_service.list_days(start, end)
        breaks = ledger_service.find_chain_breaks(start, end)
        return jsonify({
            "cash_register": [d.to_dict() for d in days],
            "chain_breaks": [to_iso_date(d) for d in breaks],
        }), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to list cash register days")
        return jsonify({"error": "Internal server error"}), 500


@cash_register_bp.post("/<string:business_date>/close-shift")
def close_shift_route(business_date: str):
    """
    Deposit the day's closing balance to the configured bank.

    Request body (all optional):
    {
        "closed_by_user_id": 3,
        "reference_number": "SLIP-0042",
        "notes": "Evening drop"
    }

    409 bank_not_configured: set bank details first
    409 no_balance_to_deposit: drawer is already empty
    """
    try:
        data = request.get_json(silent=True) or {}

        receipt = deposit_service.close_shift(
            business_date,
            closed_by_user_id=_optional_int(data, "closed_by_user_id"),
            reference_number=data.get("reference_number"),
            notes=data.get("notes"),
        )
        return jsonify(receipt.to_dict()), 201
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to close shift")
        return jsonify({"error": "Internal server error"}), 500
