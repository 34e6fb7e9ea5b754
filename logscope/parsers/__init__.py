"""
Log parsers for different log formats.
"""

from logscope.parsers.base import LogFileParser, LogParseError, UnsupportedLogFormatError
from logscope.parsers.summary import generate_summary
from logscope.parsers.timestamps import parse_timestamp

__all__ = [
    "LogFileParser",
    "LogParseError",
    "UnsupportedLogFormatError",
    "generate_summary",
    "parse_timestamp",
]
