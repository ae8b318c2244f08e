"""Normalization of client-supplied reminder times to canonical HH:MM:SS."""

import logging
import re
from datetime import UTC, datetime, time

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "%H:%M:%S"

# Anchor date for bare times of day
REFERENCE_DATE = "1970-01-01"

_EMPTY_MARKERS = {"", "null", "undefined", "none"}
_FULL_TIME = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")
_SHORT_TIME = re.compile(r"^(\d{1,2}):(\d{1,2})$")
_TWELVE_HOUR_FORMATS = ("%I:%M %p", "%I:%M:%S %p", "%I:%M%p", "%I %p", "%I%p")


def _in_range(hours: int, minutes: int, seconds: int = 0) -> bool:
    return 0 <= hours <= 23 and 0 <= minutes <= 59 and 0 <= seconds <= 59


def _time_of_day_utc(moment: datetime) -> str:
    """Time of day of ``moment`` in UTC; naive values are taken as UTC already."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime(CANONICAL_FORMAT)


def normalize_time(value: object) -> str | None:
    """Convert a reminder time to zero-padded 24-hour ``HH:MM:SS``.

    Accepted inputs, tried in order:
    - ``H:MM:SS`` / ``HH:MM:SS`` (hour padded to two digits)
    - ``H:MM`` / ``HH:MM`` / ``H:M`` (padded, seconds set to 00)
    - full timestamps such as ``2024-03-01T14:30:00Z`` (time of day in UTC)
    - ISO times with fractions or offsets, and 12-hour clock times like ``9:05 PM``

    Never raises. Anything unusable (including out-of-range components) is
    logged and returned as None, which callers treat as "no time set".
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _time_of_day_utc(value)
    if isinstance(value, time):
        return value.strftime(CANONICAL_FORMAT)

    clean = str(value).strip()
    if clean.lower() in _EMPTY_MARKERS:
        return None

    match = _FULL_TIME.match(clean)
    if match:
        hours, minutes, seconds = (int(part) for part in match.groups())
        if _in_range(hours, minutes, seconds):
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        logger.warning(f"Reminder time out of range, dropping it: {clean!r}")
        return None

    match = _SHORT_TIME.match(clean)
    if match:
        hours, minutes = (int(part) for part in match.groups())
        if _in_range(hours, minutes):
            return f"{hours:02d}:{minutes:02d}:00"
        logger.warning(f"Reminder time out of range, dropping it: {clean!r}")
        return None

    if "T" in clean or "-" in clean:
        try:
            return _time_of_day_utc(datetime.fromisoformat(clean))
        except ValueError:
            logger.debug(f"Not a timestamp: {clean!r}")

    try:
        return _time_of_day_utc(datetime.fromisoformat(f"{REFERENCE_DATE}T{clean}"))
    except ValueError:
        pass

    for fmt in _TWELVE_HOUR_FORMATS:
        try:
            return datetime.strptime(clean.upper(), fmt).strftime(CANONICAL_FORMAT)
        except ValueError:
            continue

    logger.warning(f"Cannot parse reminder time, dropping it: {clean!r}")
    return None
