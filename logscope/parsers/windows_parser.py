"""
Parser for Windows Event Log text exports.
"""

import re
from typing import Optional

from logscope.models.log_entry import LogFormat, ParsedLogEntry
from logscope.parsers.timestamps import parse_timestamp


EVENT_ID_PATTERN = re.compile(r"Event ID:\s*(\d+)")
SOURCE_PATTERN = re.compile(r"Source:\s*(\S+)")
TIME_PATTERN = re.compile(r"(\d{1,2}/\d{1,2}/\d{4}\s+\d{1,2}:\d{2}:\d{2}\s+[AP]M)")


def matches_windows(line: str) -> bool:
    return "Event ID" in line or "Source:" in line


def parse_windows_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """
    Parse one Windows event line.

    Example: 10/10/2023 1:55:36 PM Source: Security Event ID: 4625 An account failed to log on.
    Windows exports carry no client address, so the IP is always 'localhost'.
    """
    if not matches_windows(line):
        return None

    event_id_match = EVENT_ID_PATTERN.search(line)
    source_match = SOURCE_PATTERN.search(line)
    time_match = TIME_PATTERN.search(line)

    event_id = event_id_match.group(1) if event_id_match else None
    source = source_match.group(1) if source_match else None

    return ParsedLogEntry(
        timestamp=parse_timestamp(time_match.group(1) if time_match else None, LogFormat.WINDOWS),
        ip_address="localhost",
        event_description=f"Windows Event: {source or ''} - Event ID: {event_id or ''}",
        raw_log_line=line,
        log_type=LogFormat.WINDOWS,
        line_number=line_number,
        event_id=event_id,
        source=source,
    )
