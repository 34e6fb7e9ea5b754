"""
Parser for ZScaler web proxy logs (comma-separated export).
"""

from typing import List, Optional

from logscope.models.log_entry import LogFormat, ParsedLogEntry
from logscope.parsers.timestamps import parse_timestamp


# timestamp, source_ip, destination_ip, action, url, category, user, reason, ...
MIN_FIELDS = 8
PROXY_ACTIONS = {"ALLOW", "BLOCK", "DENY"}


def _split(line: str) -> List[str]:
    return [part.strip() for part in line.split(",")]


def matches_zscaler(line: str) -> bool:
    """Enough CSV fields, a proxy verdict in field 4 and a URL in field 5."""
    parts = _split(line)
    return (
        len(parts) >= MIN_FIELDS
        and parts[3] in PROXY_ACTIONS
        and parts[4].startswith("http")
    )


def parse_zscaler_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """Parse one ZScaler proxy log line."""
    parts = _split(line)
    if len(parts) < MIN_FIELDS:
        return None

    timestamp, source_ip, destination_ip, action, url, category, user, reason = parts[:MIN_FIELDS]
    action = action or "unknown"
    url = url or "unknown"
    category = category or "unknown"

    return ParsedLogEntry(
        timestamp=parse_timestamp(timestamp, LogFormat.ZSCALER),
        ip_address=source_ip or "unknown",
        event_description=f"{action} access to {url} (Category: {category})",
        raw_log_line=line,
        log_type=LogFormat.ZSCALER,
        line_number=line_number,
        destination_ip=destination_ip or None,
        user=user or None,
        url=url,
        category=category,
        action=action,
        reason=reason or None,
    )
