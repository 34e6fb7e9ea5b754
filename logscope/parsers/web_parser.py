"""
Parsers for Apache and Nginx access logs.
"""

import re
from typing import Optional, Tuple

from logscope.models.log_entry import LogFormat, ParsedLogEntry
from logscope.parsers.timestamps import parse_timestamp


# Detection: IPv4 prefix followed by a bracketed timestamp
APACHE_DETECT = re.compile(r"^\d+\.\d+\.\d+\.\d+.*\[.*\]")

# Detection: IPv4 prefix followed by an HTTP protocol version
NGINX_DETECT = re.compile(r"^\d+\.\d+\.\d+\.\d+.*HTTP/\d+\.\d+")

# Common log format:
# 127.0.0.1 - - [10/Oct/2023:13:55:36 +0000] "GET /admin HTTP/1.1" 403 2326
ACCESS_PATTERN = re.compile(
    r'^(\S+) \S+ \S+ '                    # IP, ident, remote user
    r'\[([^\]]+)\] '                      # [timestamp]
    r'"([^"]*)" '                         # "METHOD PATH PROTOCOL"
    r'(\d+) '                             # status code
    r'(\d+|-)'                            # bytes sent
)

# Combined log format adds referer and user agent
COMBINED_SUFFIX = re.compile(r'\s+"([^"]*)"\s+"([^"]*)"')


def matches_apache(line: str) -> bool:
    return bool(APACHE_DETECT.match(line))


def matches_nginx(line: str) -> bool:
    return bool(NGINX_DETECT.match(line))


def parse_apache_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """Parse one Apache access log line."""
    match = ACCESS_PATTERN.match(line)
    if not match:
        return None

    ip, timestamp_str, request, status, size = match.groups()
    method, path, protocol = _split_request(request)
    referer, user_agent = _combined_suffix(line, match.end())

    return ParsedLogEntry(
        timestamp=parse_timestamp(timestamp_str, LogFormat.APACHE),
        ip_address=ip,
        event_description=f"Apache: {method} {path} - Status: {status}",
        raw_log_line=line,
        log_type=LogFormat.APACHE,
        line_number=line_number,
        method=method,
        path=path,
        protocol=protocol,
        status_code=int(status),
        response_size=_parse_size(size),
        referer=referer,
        user_agent=user_agent,
    )


def parse_nginx_line(line: str, line_number: int) -> Optional[ParsedLogEntry]:
    """
    Parse one Nginx access log line.

    Format: $remote_addr - $remote_user [$time_local] "$request" $status $body_bytes_sent "$http_referer" "$http_user_agent"
    The referer / user agent pair is optional.
    """
    match = ACCESS_PATTERN.match(line)
    if not match:
        return None

    ip, timestamp_str, request, status, size = match.groups()
    method, path, protocol = _split_request(request)
    referer, user_agent = _combined_suffix(line, match.end())

    return ParsedLogEntry(
        timestamp=parse_timestamp(timestamp_str, LogFormat.NGINX),
        ip_address=ip,
        event_description=f"Nginx: {method} {path} - Status: {status}",
        raw_log_line=line,
        log_type=LogFormat.NGINX,
        line_number=line_number,
        method=method,
        path=path,
        protocol=protocol,
        status_code=int(status),
        response_size=_parse_size(size),
        referer=referer,
        user_agent=user_agent,
    )


def _split_request(request: str) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Split '"GET /path HTTP/1.1"' into its three parts, padding with None."""
    parts = request.split(" ", 2)
    parts += [None] * (3 - len(parts))
    method, path, protocol = parts
    return method or None, path, protocol


def _combined_suffix(line: str, pos: int) -> Tuple[Optional[str], Optional[str]]:
    """Referer and user agent of a combined-format line, or (None, None)."""
    combined = COMBINED_SUFFIX.match(line, pos)
    if not combined:
        return None, None
    return combined.groups()


def _parse_size(size: str) -> Optional[int]:
    return None if size == "-" else int(size)
