"""
Parsing of LLM completions into analysis results.

Models don't always honour the JSON-only instruction. The parser tries,
in order: the whole text as JSON, a fenced ```json block, the first
brace-delimited span, and finally a keyword heuristic over the raw text.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from logscope.models.analysis import AnalysisResult, Status, ThreatLevel


logger = logging.getLogger(__name__)

FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
BRACED_JSON = re.compile(r"\{.*\}", re.DOTALL)

DEFAULT_CONFIDENCE = 0.5
HEURISTIC_CONFIDENCE = 0.7
HEURISTIC_EXPLANATION_LENGTH = 200


def parse_llm_response(text: str, analyzed_by: str = "openai") -> AnalysisResult:
    """
    Turn a completion into an AnalysisResult. Never raises on bad content.

    Args:
        text: Raw completion text
        analyzed_by: Tier name recorded on the result

    Returns:
        AnalysisResult, with defaults for anything the model left out
    """
    data = _load_object(text)
    if data is None:
        data = _extract_object(FENCED_JSON, text, group=1)
    if data is None:
        data = _extract_object(BRACED_JSON, text, group=0)

    if data is not None:
        return result_from_dict(data, analyzed_by)

    logger.info("LLM response was not JSON, falling back to keyword heuristic")
    return _keyword_heuristic(text, analyzed_by)


def result_from_dict(data: Dict[str, Any], analyzed_by: str = "openai") -> AnalysisResult:
    """Build a result from a decoded JSON object, defaulting missing or invalid fields."""
    return AnalysisResult(
        status=_coerce_enum(Status, data.get("status"), Status.NORMAL),
        confidence_score=_coerce_confidence(data.get("confidence_score")),
        explanation=str(data.get("explanation") or "AI analysis completed"),
        threat_level=_coerce_enum(ThreatLevel, data.get("threat_level"), ThreatLevel.LOW),
        recommended_action=str(data.get("recommended_action") or "Monitor"),
        analyzed_by=analyzed_by,
    )


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def _extract_object(pattern: re.Pattern, text: str, group: int) -> Optional[Dict[str, Any]]:
    match = pattern.search(text)
    if not match:
        return None
    data = _load_object(match.group(group))
    if data is None:
        logger.debug("Embedded JSON candidate failed to parse")
    return data


def _keyword_heuristic(text: str, analyzed_by: str) -> AnalysisResult:
    lowered = text.lower()
    status = Status.NORMAL
    confidence = DEFAULT_CONFIDENCE
    threat_level = ThreatLevel.LOW

    if "anomaly" in lowered:
        status = Status.ANOMALY
    elif "suspicious" in lowered:
        status = Status.SUSPICIOUS

    if status != Status.NORMAL:
        confidence = HEURISTIC_CONFIDENCE
        threat_level = ThreatLevel.MEDIUM

    return AnalysisResult(
        status=status,
        confidence_score=confidence,
        explanation=text[:HEURISTIC_EXPLANATION_LENGTH] or "AI analysis completed",
        threat_level=threat_level,
        recommended_action="Monitor",
        analyzed_by=analyzed_by,
    )


def _coerce_enum(enum_cls, value: Any, default):
    if isinstance(value, str):
        try:
            return enum_cls(value.strip().lower())
        except ValueError:
            pass
    return default


def _coerce_confidence(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_CONFIDENCE
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_CONFIDENCE
