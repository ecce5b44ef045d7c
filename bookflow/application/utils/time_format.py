from __future__ import annotations

import re
from datetime import date, datetime, time

_TIME_24H = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")
_TIME_12H = re.compile(r"^(\d{1,2})(?::(\d{2}))?\s*([ap])\.?m\.?$", re.IGNORECASE)


def normalize_time(value: str) -> str | None:
    """Normalize '14:00', '14:00:00', '2:00 PM' or '2pm' to 'HH:MM'. Returns None if unparseable."""
    text = (value or "").strip()
    match = _TIME_24H.match(text)
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
    else:
        match = _TIME_12H.match(text)
        if not match:
            return None
        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        if hour < 1 or hour > 12:
            return None
        if match.group(3).lower() == "p" and hour != 12:
            hour += 12
        elif match.group(3).lower() == "a" and hour == 12:
            hour = 0

    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def parse_iso_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def combine(day: date, hhmm: str) -> datetime:
    hour, minute = (int(p) for p in hhmm.split(":"))
    return datetime.combine(day, time(hour, minute))
