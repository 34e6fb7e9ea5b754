"""
Best-effort timestamp normalization.

Every log format writes time differently. ``parse_timestamp`` turns any of
them into an ISO-8601 UTC string and falls back to the current instant when
the input cannot be understood, so callers never see an error.
"""

import re
from datetime import datetime, timedelta, timezone
from typing import Optional

from logscope.models.log_entry import LogFormat


# Month abbreviations parsed by hand so results don't depend on the C locale
MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "oct": 10, "nov": 11, "dec": 12,
}

# 10/Oct/2023:13:55:36 +0000
CLF_PATTERN = re.compile(
    r"^(\d{1,2})/([A-Za-z]{3})/(\d{4}):(\d{2}):(\d{2}):(\d{2})(?:\s+([+-])(\d{2}):?(\d{2}))?$"
)

# Oct 10 13:55:36
SYSLOG_PATTERN = re.compile(
    r"^([A-Za-z]{3})\s+(\d{1,2})\s+(\d{1,2}):(\d{2}):(\d{2})$"
)

# 10/10/2023 1:55:36 PM
WINDOWS_PATTERN = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2}):(\d{2})\s*([AaPp][Mm])$"
)


def utc_now() -> str:
    """Current instant as an ISO-8601 UTC string."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(raw: Optional[str], fmt: LogFormat = LogFormat.GENERIC) -> str:
    """
    Convert a raw timestamp into an ISO-8601 UTC string.

    Args:
        raw: Timestamp text as it appears in the log line
        fmt: Format hint selecting the textual convention to expect

    Returns:
        ISO-8601 string; the current instant if ``raw`` cannot be parsed
    """
    if not isinstance(raw, str):
        return utc_now()

    text = raw.strip()
    try:
        if fmt in (LogFormat.APACHE, LogFormat.NGINX):
            parsed = _parse_clf(text)
        elif fmt == LogFormat.LINUX:
            parsed = _parse_syslog(text)
        elif fmt == LogFormat.WINDOWS:
            parsed = _parse_windows(text) or _parse_iso(text)
        else:
            parsed = _parse_iso(text)
    except (ValueError, OverflowError):
        parsed = None

    if parsed is None:
        return utc_now()

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc).isoformat()
    except (ValueError, OverflowError):
        return utc_now()


def _parse_clf(text: str) -> Optional[datetime]:
    """Common log format: DD/Mon/YYYY:HH:MM:SS [+zzzz]"""
    match = CLF_PATTERN.match(text)
    if not match:
        return None

    day, month_name, year, hour, minute, second, sign, off_h, off_m = match.groups()
    month = MONTHS.get(month_name.lower())
    if month is None:
        return None

    tz = timezone.utc
    if sign:
        offset = timedelta(hours=int(off_h), minutes=int(off_m))
        tz = timezone(-offset if sign == "-" else offset)

    return datetime(
        int(year), month, int(day), int(hour), int(minute), int(second), tzinfo=tz
    )


def _parse_syslog(text: str) -> Optional[datetime]:
    """Syslog: Mon DD HH:MM:SS, no year - assume the current one."""
    match = SYSLOG_PATTERN.match(text)
    if not match:
        return None

    month_name, day, hour, minute, second = match.groups()
    month = MONTHS.get(month_name.lower())
    if month is None:
        return None

    year = datetime.now(timezone.utc).year
    return datetime(year, month, int(day), int(hour), int(minute), int(second))


def _parse_windows(text: str) -> Optional[datetime]:
    """Windows event export: MM/DD/YYYY hh:mm:ss AM|PM"""
    match = WINDOWS_PATTERN.match(text)
    if not match:
        return None

    month, day, year, hour, minute, second, meridiem = match.groups()
    hour_12 = int(hour)
    if not 1 <= hour_12 <= 12:
        return None

    hour_24 = hour_12 % 12
    if meridiem.upper() == "PM":
        hour_24 += 12

    return datetime(int(year), int(month), int(day), hour_24, int(minute), int(second))


def _parse_iso(text: str) -> Optional[datetime]:
    """ISO-8601 with either 'T' or space separator and optional Z suffix."""
    if not text:
        return None
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
