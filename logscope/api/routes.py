"""
FastAPI API routes.
"""

import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from logscope import __version__
from logscope.api.dependencies import get_classifier, get_parser
from logscope.classifier.engine import AnomalyClassifier
from logscope.models.analysis import BatchAnalysis
from logscope.models.log_entry import LogFormat, LogSummary, ParsedLogEntry, ParseResult
from logscope.parsers.base import LogFileParser, LogParseError


logger = logging.getLogger(__name__)

router = APIRouter()


# Request/Response Models
class LogContentRequest(BaseModel):
    """Raw log file content."""
    content: str
    filename: Optional[str] = ""


class ReanalyzeRequest(BaseModel):
    """Previously parsed entries to score again."""
    entries: List[ParsedLogEntry]


class AnalyzeResponse(BaseModel):
    """Parse + analysis outcome for one file."""
    format: LogFormat
    total_lines: int
    summary: LogSummary
    analysis: BatchAnalysis
    processing_time_ms: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


def _parse_or_400(parser: LogFileParser, request: LogContentRequest) -> ParseResult:
    if not request.content or not request.content.strip():
        raise HTTPException(status_code=400, detail="Log content is required")

    try:
        return parser.parse_log_file(request.content, request.filename or "")
    except LogParseError as e:
        logger.error(f"Parse error for {request.filename or '<content>'}: {e}")
        raise HTTPException(status_code=400, detail=str(e))


# Routes
@router.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=__version__)


@router.get("/api/tiers")
async def list_tiers(classifier: AnomalyClassifier = Depends(get_classifier)):
    """List the active analysis tiers in the order they are tried."""
    return classifier.get_tier_info()


@router.post("/api/logs/parse", response_model=ParseResult)
async def parse_logs(
    request: LogContentRequest,
    parser: LogFileParser = Depends(get_parser),
):
    """Detect the format of log content and normalize its lines."""
    return _parse_or_400(parser, request)


@router.post("/api/logs/analyze", response_model=AnalyzeResponse)
async def analyze_logs(
    request: LogContentRequest,
    parser: LogFileParser = Depends(get_parser),
    classifier: AnomalyClassifier = Depends(get_classifier),
):
    """
    Parse log content and score every entry.

    This is the main endpoint that:
    1. Detects the log format
    2. Normalizes each line
    3. Runs the tiered classifier over the entries in order
    """
    start_time = time.time()

    parse_result = _parse_or_400(parser, request)
    analysis = await classifier.analyze_batch(parse_result.parsed_entries)

    duration_ms = int((time.time() - start_time) * 1000)

    return AnalyzeResponse(
        format=parse_result.format,
        total_lines=parse_result.total_lines,
        summary=parse_result.summary,
        analysis=analysis,
        processing_time_ms=duration_ms,
    )


@router.post("/api/logs/reanalyze", response_model=BatchAnalysis)
async def reanalyze_entries(
    request: ReanalyzeRequest,
    classifier: AnomalyClassifier = Depends(get_classifier),
):
    """Score previously parsed entries again, in the order given."""
    if not request.entries:
        raise HTTPException(status_code=400, detail="No log entries provided")

    return await classifier.analyze_batch(request.entries)
