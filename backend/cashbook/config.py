# backend/cashbook/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/cashbook.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location (hosted Postgres in production)
        "sqlite:///cashbook.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # The store runs on a fixed offset (East Africa Time, no DST).
    # Every business day boundary is resolved against this value.
    STORE_UTC_OFFSET = os.environ.get("STORE_UTC_OFFSET", "+03:00")
    STORE_CURRENCY = os.environ.get("STORE_CURRENCY", "UGX")

    # Row-conflict handling for recompute / shift close
    LEDGER_RETRY_ATTEMPTS = int(os.environ.get("LEDGER_RETRY_ATTEMPTS", "3"))
    LEDGER_RETRY_BACKOFF = float(os.environ.get("LEDGER_RETRY_BACKOFF", "0.1"))
