"""
Analysis result models - the risk annotation attached to each parsed entry.
"""

import math
from enum import Enum
from typing import List
from pydantic import BaseModel, Field, ConfigDict, field_validator

from logscope.models.log_entry import ParsedLogEntry


MAX_EXPLANATION_LENGTH = 300


class Status(str, Enum):
    """Classification outcome for a single entry."""
    NORMAL = "normal"
    SUSPICIOUS = "suspicious"
    ANOMALY = "anomaly"


class ThreatLevel(str, Enum):
    """Coarse severity bucket."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnalysisResult(BaseModel):
    """
    Risk annotation produced by exactly one classifier tier.
    """

    status: Status = Field(
        default=Status.NORMAL,
        description="normal / suspicious / anomaly"
    )
    confidence_score: float = Field(
        default=0.5,
        description="Confidence in the status, clamped to [0.0, 1.0]"
    )
    explanation: str = Field(
        default="",
        description="Human-readable rationale"
    )
    threat_level: ThreatLevel = Field(
        default=ThreatLevel.LOW,
        description="low / medium / high / critical"
    )
    recommended_action: str = Field(
        default="Monitor",
        description="Short imperative response action"
    )
    analyzed_by: str = Field(
        default="rules",
        description="Name of the tier that produced this result"
    )

    @field_validator("confidence_score")
    @classmethod
    def _clamp_confidence(cls, value: float) -> float:
        if math.isnan(value):
            return 0.5
        return min(max(value, 0.0), 1.0)

    @field_validator("explanation")
    @classmethod
    def _truncate_explanation(cls, value: str) -> str:
        return value[:MAX_EXPLANATION_LENGTH]


class AnalyzedEntry(ParsedLogEntry):
    """
    A parsed entry merged with its analysis result.
    This is the unit handed to persistence / presentation.
    """

    status: Status
    confidence_score: float
    explanation: str
    threat_level: ThreatLevel
    recommended_action: str
    analyzed_by: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_parts(cls, entry: ParsedLogEntry, result: AnalysisResult) -> "AnalyzedEntry":
        """Merge an entry with the result of its analysis."""
        return cls(**entry.model_dump(), **result.model_dump())

    def analysis(self) -> AnalysisResult:
        """Extract the analysis fields back out."""
        return AnalysisResult(
            status=self.status,
            confidence_score=self.confidence_score,
            explanation=self.explanation,
            threat_level=self.threat_level,
            recommended_action=self.recommended_action,
            analyzed_by=self.analyzed_by,
        )


class BatchAnalysis(BaseModel):
    """Result of analyzing a batch of entries in order."""

    entries: List[AnalyzedEntry] = Field(default_factory=list)
    analyzed_entries: int = 0
    anomalies_found: int = 0
    suspicious_found: int = 0

    @classmethod
    def from_entries(cls, entries: List[AnalyzedEntry]) -> "BatchAnalysis":
        return cls(
            entries=entries,
            analyzed_entries=len(entries),
            anomalies_found=sum(1 for e in entries if e.status == Status.ANOMALY),
            suspicious_found=sum(1 for e in entries if e.status == Status.SUSPICIOUS),
        )
