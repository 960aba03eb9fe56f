from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from .errors import ValidationError


_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# One day of headroom each side so D-1, D+1 and the offset-shifted UTC bounds
# stay representable.
MIN_BUSINESS_DATE = date.min + timedelta(days=1)
MAX_BUSINESS_DATE = date.max - timedelta(days=1)


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc).replace(microsecond=0)
    return dt_utc.isoformat().replace("+00:00", "Z")


def to_iso_date(d: Optional[date]) -> Optional[str]:
    return d.isoformat() if d is not None else None


# =============================================================================
# BUSINESS DAY BOUNDARIES
# =============================================================================

@dataclass(frozen=True)
class DayRange:
    """Inclusive UTC-naive bounds of one store-local calendar day."""
    business_date: date
    start: datetime
    end: datetime

    def contains(self, ts: datetime) -> bool:
        return self.start <= ts <= self.end


def parse_utc_offset(value: str | timedelta) -> timedelta:
    """
    Parse a fixed offset such as "+03:00", "+0300" or "-05:30".

    Offsets are bounded to +/-14h like real zones.
    """
    if isinstance(value, timedelta):
        offset = value
    else:
        match = _OFFSET_RE.match((value or "").strip())
        if not match:
            raise ValueError(f"Invalid UTC offset: {value!r}")
        sign, hours, minutes = match.groups()
        if int(minutes) >= 60:
            raise ValueError(f"Invalid UTC offset: {value!r}")
        offset = timedelta(hours=int(hours), minutes=int(minutes))
        if sign == "-":
            offset = -offset

    if abs(offset) > timedelta(hours=14):
        raise ValueError(f"UTC offset out of range: {value!r}")
    return offset


def parse_business_date(value) -> date:
    """
    Accept a date or a strict "YYYY-MM-DD" string.

    Datetimes are rejected: a timestamp carries its own zone and must go
    through resolve_day_range instead of being truncated.
    """
    if isinstance(value, datetime):
        raise ValidationError("Expected a calendar date, got a timestamp")
    if isinstance(value, date):
        parsed = value
    else:
        if not isinstance(value, str) or not _DATE_RE.match(value.strip()):
            raise ValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)")
        try:
            parsed = date.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(f"Invalid date: {value!r}")

    if not MIN_BUSINESS_DATE <= parsed <= MAX_BUSINESS_DATE:
        raise ValidationError(f"Date out of range: {parsed.isoformat()}")
    return parsed


def resolve_day_range(business_date: date, utc_offset: timedelta) -> DayRange:
    """
    Convert a store-local calendar day into absolute UTC bounds.

    start = local midnight, end = the instant before the next local midnight,
    both shifted by the fixed offset. The server's own zone never enters.
    """
    local_start = datetime.combine(business_date, time.min)
    start = local_start - utc_offset
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return DayRange(business_date=business_date, start=start, end=end)


def local_today(utc_offset: timedelta, now: Optional[datetime] = None) -> date:
    """Store-local calendar date for a UTC-naive instant (default: now)."""
    instant = now if now is not None else utcnow()
    return (instant + utc_offset).date()


def iter_dates(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
