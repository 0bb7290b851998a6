from __future__ import annotations

import re
from datetime import date, datetime, timezone

# RFC3339 section 5.6 date-time; the T separator may also be "t" or a space.
_RFC3339 = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2})[Tt ]"
    r"(?P<time>\d{2}:\d{2}:\d{2})"
    r"(?:\.(?P<fraction>\d+))?"
    r"(?P<offset>[Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp into a UTC-aware datetime.

    Only the RFC3339 ``date-time`` form is accepted: other ISO 8601 spellings
    (week dates, basic format, missing offset) raise ``ValueError``.
    Fractional seconds are kept to microsecond precision.
    """
    text = (value or "").strip()
    if not text:
        raise ValueError("timestamp is required")
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError("not an RFC3339 timestamp")
    fraction = (match["fraction"] or "").ljust(6, "0")[:6]
    offset = match["offset"]
    if offset in {"Z", "z"}:
        offset = "+00:00"
    parsed = datetime.fromisoformat(f"{match['date']}T{match['time']}.{fraction}{offset}")
    return parsed.astimezone(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    """Render a UTC instant as RFC3339 with a numeric ``+00:00`` offset."""
    return dt.astimezone(timezone.utc).isoformat()


def utc_date(dt: datetime) -> date:
    return dt.astimezone(timezone.utc).date()


__all__ = ["format_rfc3339", "parse_rfc3339", "utc_date", "utc_now"]
