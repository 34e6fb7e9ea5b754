"""
Pydantic models for LogScope.
"""

from logscope.models.log_entry import (
    LogFormat,
    LogSummary,
    ParsedLogEntry,
    ParseResult,
    TimeRange,
)
from logscope.models.analysis import (
    AnalysisResult,
    AnalyzedEntry,
    BatchAnalysis,
    Status,
    ThreatLevel,
)

__all__ = [
    "LogFormat",
    "LogSummary",
    "ParsedLogEntry",
    "ParseResult",
    "TimeRange",
    "AnalysisResult",
    "AnalyzedEntry",
    "BatchAnalysis",
    "Status",
    "ThreatLevel",
]
