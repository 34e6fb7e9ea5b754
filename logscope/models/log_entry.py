"""
Normalized log entry model.
All format parsers output to this common schema.
"""

from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class LogFormat(str, Enum):
    """Supported log formats."""
    ZSCALER = "zscaler"
    APACHE = "apache"
    NGINX = "nginx"
    WINDOWS = "windows"
    LINUX = "linux"
    GENERIC = "generic"


class ParsedLogEntry(BaseModel):
    """
    Normalized log entry - common schema for all log formats.

    The shared fields are always populated. Format-specific attributes
    are only set by the parser for the format they belong to.
    """

    timestamp: str = Field(
        description="ISO-8601 instant (UTC); falls back to parse time when unparseable"
    )
    ip_address: str = Field(
        default="unknown",
        description="Source IP address, hostname, or 'unknown'"
    )
    event_description: str = Field(
        description="Short human-readable synopsis of the event"
    )
    raw_log_line: str = Field(
        description="Original log line, verbatim"
    )
    log_type: LogFormat = Field(
        default=LogFormat.GENERIC,
        description="Format the line was parsed as"
    )
    line_number: Optional[int] = Field(
        default=None,
        description="1-based line number in the source file"
    )

    # zscaler
    destination_ip: Optional[str] = None
    user: Optional[str] = None
    url: Optional[str] = None
    category: Optional[str] = None
    action: Optional[str] = None
    reason: Optional[str] = None

    # apache / nginx
    method: Optional[str] = None
    path: Optional[str] = None
    protocol: Optional[str] = None
    status_code: Optional[int] = None
    response_size: Optional[int] = None
    referer: Optional[str] = None
    user_agent: Optional[str] = None

    # windows
    event_id: Optional[str] = None
    source: Optional[str] = None

    # linux
    hostname: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "timestamp": "2023-10-10T13:55:36+00:00",
                "ip_address": "127.0.0.1",
                "event_description": "Apache: GET /admin - Status: 403",
                "raw_log_line": '127.0.0.1 - - [10/Oct/2023:13:55:36 +0000] "GET /admin HTTP/1.1" 403 2326',
                "log_type": "apache",
                "line_number": 1,
                "method": "GET",
                "path": "/admin",
                "protocol": "HTTP/1.1",
                "status_code": 403,
                "response_size": 2326,
            }
        }
    )


class TimeRange(BaseModel):
    """First and last timestamp seen in a set of entries."""

    start: Optional[str] = None
    end: Optional[str] = None


class LogSummary(BaseModel):
    """Aggregate statistics over parsed entries."""

    total_entries: int = 0
    unique_ips: int = 0
    time_range: TimeRange = Field(default_factory=TimeRange)
    log_types: Dict[str, int] = Field(default_factory=dict)
    status_codes: Dict[int, int] = Field(default_factory=dict)
    top_ips: Dict[str, int] = Field(default_factory=dict)
    top_events: Dict[str, int] = Field(default_factory=dict)


class ParseResult(BaseModel):
    """Outcome of parsing one log file."""

    format: LogFormat = Field(
        description="Format detected for the whole file"
    )
    total_lines: int = Field(
        description="Number of non-blank lines in the file"
    )
    parsed_entries: List[ParsedLogEntry] = Field(
        default_factory=list,
        description="Entries for every line that matched the detected format"
    )
    summary: LogSummary = Field(
        default_factory=LogSummary,
        description="Aggregate statistics over the parsed entries"
    )
    filename: Optional[str] = Field(
        default=None,
        description="Original filename, informational only"
    )
