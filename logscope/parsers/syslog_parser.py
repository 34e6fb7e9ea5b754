"""
Parser for Linux syslog format (messages, auth.log, secure).
"""

import re
from typing import Optional, Tuple

from logscope.models.log_entry import LogFormat, ParsedLogEntry
from logscope.parsers.timestamps import parse_timestamp


# Detection: "Jan 15 03:22:15" prefix
SYSLOG_DETECT = re.compile(r"^[A-Z][a-z]{2}\s+\d+\s+\d+:\d+:\d+")

# Jan 15 03:22:15 server sshd[12345]: Failed password for admin from 192.168.1.100 port 54321 ssh2
SYSLOG_PATTERN = re.compile(
    r"^([A-Z][a-z]{2}\s+\d+\s+\d+:\d+:\d+)\s+"   # timestamp
    r"(\S+)\s+"                                  # hostname
    r"([^:]+):\s*"                               # service[pid]
    r"(.*)"                                      # message
)

# Authentication events worth lifting into user/action
AUTH_PATTERNS = [
    ("login_failed", re.compile(r"Failed password for (?:invalid user )?(\S+) from")),
    ("login_success", re.compile(r"Accepted \S+ for (\S+) from")),
    ("invalid_user", re.compile(r"Invalid user (\S+) from")),
    ("sudo_failure", re.compile(r"authentication failure.*user=(\S+)")),
]


def matches_linux(line: str) -> bool:
    return bool(SYSLOG_DETECT.match(line))


def parse_linux_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """Parse one syslog line. The hostname stands in for the IP address."""
    match = SYSLOG_PATTERN.match(line)
    if not match:
        return None

    timestamp_str, hostname, service, message = match.groups()
    service = service.strip()
    action, user = _auth_event(message)

    return ParsedLogEntry(
        timestamp=parse_timestamp(timestamp_str, LogFormat.LINUX),
        ip_address=hostname,
        event_description=f"Linux: {service} - {message}",
        raw_log_line=line,
        log_type=LogFormat.LINUX,
        line_number=line_number,
        hostname=hostname,
        service=service,
        message=message,
        action=action,
        user=user,
    )


def _auth_event(message: str) -> Tuple[Optional[str], Optional[str]]:
    """Return (action, user) for recognised authentication messages."""
    for action, pattern in AUTH_PATTERNS:
        match = pattern.search(message)
        if match:
            return action, match.group(1)
    return None, None
