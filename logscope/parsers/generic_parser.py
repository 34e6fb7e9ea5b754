"""
Fallback parser for unstructured logs.
"""

import re
from typing import Optional

from logscope.models.log_entry import LogFormat, ParsedLogEntry
from logscope.parsers.timestamps import parse_timestamp


IPV4_PATTERN = re.compile(r"\b(?:\d{1,3}\.){3}\d{1,3}\b")
ISO_TIMESTAMP_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}[\sT]\d{2}:\d{2}:\d{2}")

MAX_DESCRIPTION_LENGTH = 100


def parse_generic_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """Best effort: pick out the first IPv4 address and ISO-like timestamp."""
    ip_match = IPV4_PATTERN.search(line)
    timestamp_match = ISO_TIMESTAMP_PATTERN.search(line)

    description = line
    if len(line) > MAX_DESCRIPTION_LENGTH:
        description = line[:MAX_DESCRIPTION_LENGTH] + "..."

    return ParsedLogEntry(
        timestamp=parse_timestamp(
            timestamp_match.group(0) if timestamp_match else None,
            LogFormat.GENERIC,
        ),
        ip_address=ip_match.group(0) if ip_match else "unknown",
        event_description=description,
        raw_log_line=line,
        log_type=LogFormat.GENERIC,
        line_number=line_number,
    )
