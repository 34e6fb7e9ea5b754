"""
Log file parser - format detection and per-line dispatch.
"""

import logging
import re
from typing import List, Optional, Sequence, Union

from logscope.models.log_entry import LogFormat, ParsedLogEntry, ParseResult, LogSummary
from logscope.parsers.generic_parser import parse_generic_line
from logscope.parsers.summary import generate_summary
from logscope.parsers.syslog_parser import matches_linux, parse_linux_line
from logscope.parsers.web_parser import (
    matches_apache,
    matches_nginx,
    parse_apache_line,
    parse_nginx_line,
)
from logscope.parsers.windows_parser import matches_windows, parse_windows_line
from logscope.parsers.zscaler_parser import matches_zscaler, parse_zscaler_line


logger = logging.getLogger(__name__)

DETECTION_SAMPLE_SIZE = 5

# Only LF and CRLF end a line; form feeds and other separators stay in the line
LINE_BREAK = re.compile(r"\r?\n")

# Checked in order; the first format any sample line matches wins
DETECTION_RULES = [
    (LogFormat.ZSCALER, matches_zscaler),
    (LogFormat.APACHE, matches_apache),
    (LogFormat.NGINX, matches_nginx),
    (LogFormat.WINDOWS, matches_windows),
    (LogFormat.LINUX, matches_linux),
]


class LogParseError(ValueError):
    """Raised when a whole log file cannot be parsed."""
    pass


class UnsupportedLogFormatError(LogParseError):
    """Raised when asked to parse with a format that has no line parser."""
    pass


class LogFileParser:
    """
    Turns raw log file content into normalized entries.

    The format is detected once per file from a small sample of lines;
    every line is then parsed with that format's line parser. Lines that
    don't fit the format are skipped, and a failing line never stops the
    rest of the file from being parsed.
    """

    def detect_format(self, lines: Sequence[str]) -> LogFormat:
        """
        Detect the log format from the first non-blank lines.

        Args:
            lines: Lines of the file, in order

        Returns:
            Detected LogFormat (GENERIC when nothing matches)
        """
        sample = [line for line in lines if line.strip()][:DETECTION_SAMPLE_SIZE]
        if not sample:
            return LogFormat.GENERIC

        for log_format, matches in DETECTION_RULES:
            if any(matches(line) for line in sample):
                return log_format

        return LogFormat.GENERIC

    def parse_line(self, line: str, line_number: int, log_format: LogFormat) -> Optional[ParsedLogEntry]:
        """
        Parse a single line with the given format's parser.

        Returns:
            ParsedLogEntry, or None if the line doesn't fit the format

        Raises:
            UnsupportedLogFormatError: If the format has no parser
        """
        match log_format:
            case LogFormat.ZSCALER:
                return parse_zscaler_line(line, line_number)
            case LogFormat.APACHE:
                return parse_apache_line(line, line_number)
            case LogFormat.NGINX:
                return parse_nginx_line(line, line_number)
            case LogFormat.WINDOWS:
                return parse_windows_line(line, line_number)
            case LogFormat.LINUX:
                return parse_linux_line(line, line_number)
            case LogFormat.GENERIC:
                return parse_generic_line(line, line_number)
            case _:
                raise UnsupportedLogFormatError(f"Unsupported log format: {log_format}")

    def parse_log_file(self, content: Union[str, bytes], filename: str = "") -> ParseResult:
        """
        Parse a whole log file.

        Args:
            content: File content, as text or UTF-8 bytes
            filename: Original filename (used for logging only)

        Returns:
            ParseResult with the detected format, entries and summary

        Raises:
            LogParseError: If the content can't be read or the format is unsupported
        """
        try:
            text = self._decode(content)
            numbered = [
                (number, line)
                for number, line in enumerate(LINE_BREAK.split(text), start=1)
                if line.strip()
            ]
            log_format = self.detect_format([line for _, line in numbered])

            entries: List[ParsedLogEntry] = []
            for number, line in numbered:
                try:
                    entry = self.parse_line(line, number, log_format)
                except UnsupportedLogFormatError:
                    raise
                except Exception as e:
                    logger.warning(f"Failed to parse line {number}: {e}")
                    continue

                if entry is not None:
                    entries.append(entry)

            logger.info(
                f"Parsed {filename or '<content>'}: {len(entries)}/{len(numbered)} lines as {log_format.value}"
            )

        except LogParseError as e:
            raise LogParseError(f"Failed to parse log file: {e}") from e

        return ParseResult(
            format=log_format,
            total_lines=len(numbered),
            parsed_entries=entries,
            summary=self.generate_summary(entries),
            filename=filename or None,
        )

    def generate_summary(self, entries: List[ParsedLogEntry]) -> LogSummary:
        """Aggregate statistics over parsed entries."""
        return generate_summary(entries)

    def _decode(self, content: Union[str, bytes]) -> str:
        if isinstance(content, str):
            return content
        if isinstance(content, (bytes, bytearray)):
            try:
                return bytes(content).decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise LogParseError(f"File must be UTF-8 encoded text ({e})") from e
        raise LogParseError(f"Unreadable log content of type {type(content).__name__}")
