# Overview: Row locking and conflict retry for ledger writes.

from __future__ import annotations

import time

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..extensions import db
from ..errors import ConcurrentModificationError


class WriteConflict(Exception):
    """Source rows changed between a read and the write that depended on it."""


RETRYABLE_ERRORS = (OperationalError, StaleDataError, IntegrityError, WriteConflict)


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    On SQLite the version_id column on the ledger row catches the race instead.
    """
    return query.with_for_update()


def run_with_retry(func, *, attempts: int | None = None, backoff_base: float | None = None):
    """
    Execute a DB operation with retry on concurrency-related failures.

    Retries on OperationalError (deadlocks, locks), StaleDataError
    (optimistic locking conflicts), IntegrityError (two writers inserting
    the same date row) and WriteConflict (a re-read disagreed with the
    first). Safe only for operations that re-derive their result from
    source rows, which every ledger write does.

    Any other exception rolls the session back and propagates unchanged.
    """
    if attempts is None:
        attempts = current_app.config.get("LEDGER_RETRY_ATTEMPTS", 3)
    if backoff_base is None:
        backoff_base = current_app.config.get("LEDGER_RETRY_BACKOFF", 0.1)
    attempts = max(1, attempts)

    for attempt in range(attempts):
        try:
            return func()
        except RETRYABLE_ERRORS as exc:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise ConcurrentModificationError(
                    "Cash register row was modified concurrently; please retry"
                ) from exc
            current_app.logger.warning(
                "Ledger write conflict (attempt %d/%d): %s", attempt + 1, attempts, exc.__class__.__name__
            )
            time.sleep(backoff_base * (2 ** attempt))
        except Exception:
            db.session.rollback()
            raise
