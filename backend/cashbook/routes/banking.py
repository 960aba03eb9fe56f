# Overview: Flask API routes for bank deposits and bank settings.

from flask import Blueprint, request, jsonify, current_app

from ..errors import CashbookError, ValidationError
from ..services import deposit_service


banking_bp = Blueprint("banking", __name__, url_prefix="/api")


def _error(e: CashbookError):
    return jsonify(e.to_dict()), e.status_code


@banking_bp.get("/bank-deposits")
def list_deposits_route():
    try:
        deposits = deposit_service.list_deposits(
            request.args.get("start"),
            request.args.get("end"),
        )
        return jsonify({
            "deposits": [d.to_dict() for d in deposits],
            "total_deposited_cents": sum(d.amount_cents for d in deposits),
        }), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to list bank deposits")
        return jsonify({"error": "Internal server error"}), 500


@banking_bp.post("/bank-deposits")
def record_deposit_route():
    """
    Record a manual bank deposit (Banking screen).

    Request body:
    {
        "deposit_date": "2026-10-19",
        "amount_cents": 250000,
        "bank_name": "Stanbic",          (optional if a bank is configured)
        "account_number": "9030...",     (optional)
        "reference_number": "SLIP-1",    (optional)
        "notes": "...",                  (optional)
        "deposited_by_user_id": 2        (optional)
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        deposit_date = data.get("deposit_date")
        if not deposit_date or "amount_cents" not in data:
            return jsonify({"error": "deposit_date and amount_cents required", "code": ValidationError.code}), 400

        deposited_by = data.get("deposited_by_user_id")
        if deposited_by is not None and (isinstance(deposited_by, bool) or not isinstance(deposited_by, int)):
            raise ValidationError("deposited_by_user_id must be an integer")

        receipt = deposit_service.record_deposit(
            deposit_date,
            data.get("amount_cents"),
            bank_name=data.get("bank_name"),
            account_number=data.get("account_number"),
            reference_number=data.get("reference_number"),
            notes=data.get("notes"),
            deposited_by_user_id=deposited_by,
        )
        return jsonify(receipt.to_dict()), 201
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to record bank deposit")
        return jsonify({"error": "Internal server error"}), 500


@banking_bp.get("/bank-settings")
def get_bank_settings_route():
    try:
        settings = deposit_service.get_bank_settings()
        return jsonify({"bank_settings": settings.to_dict() if settings else None}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to load bank settings")
        return jsonify({"error": "Internal server error"}), 500


@banking_bp.put("/bank-settings")
def update_bank_settings_route():
    try:
        data = request.get_json(silent=True) or {}
        settings = deposit_service.configure_bank(
            data.get("bank_name"),
            data.get("account_number"),
        )
        return jsonify({"bank_settings": settings.to_dict()}), 200
    except CashbookError as e:
        return _error(e)
    except Exception:
        current_app.logger.exception("Failed to update bank settings")
        return jsonify({"error": "Internal server error"}), 500
