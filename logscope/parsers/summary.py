"""
Summary statistics over parsed log entries.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import List, Optional

from logscope.models.log_entry import LogSummary, ParsedLogEntry, TimeRange


EVENT_KEY_LENGTH = 50


def generate_summary(entries: List[ParsedLogEntry]) -> LogSummary:
    """
    Aggregate counts over a list of entries. Pure; entries are not modified.

    Args:
        entries: Parsed entries, in any order

    Returns:
        LogSummary with counts by format, status code, IP and event
    """
    if not entries:
        return LogSummary()

    timestamps = []
    for entry in entries:
        instant = _as_instant(entry.timestamp)
        if instant is not None:
            timestamps.append((instant, entry.timestamp))
    timestamps.sort()

    time_range = TimeRange()
    if timestamps:
        time_range = TimeRange(start=timestamps[0][1], end=timestamps[-1][1])

    log_types = Counter(e.log_type.value for e in entries)
    status_codes = Counter(e.status_code for e in entries if e.status_code is not None)
    top_ips = Counter(
        e.ip_address for e in entries
        if e.ip_address and e.ip_address != "unknown"
    )
    top_events = Counter(e.event_description[:EVENT_KEY_LENGTH] for e in entries)

    return LogSummary(
        total_entries=len(entries),
        unique_ips=len({e.ip_address for e in entries}),
        time_range=time_range,
        log_types=dict(log_types.most_common()),
        status_codes=dict(status_codes.most_common()),
        top_ips=dict(top_ips.most_common()),
        top_events=dict(top_events.most_common()),
    )


def _as_instant(timestamp: str) -> Optional[datetime]:
    try:
        instant = datetime.fromisoformat(timestamp)
    except (TypeError, ValueError):
        return None
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant
