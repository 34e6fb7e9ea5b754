"""
FastAPI dependencies for dependency injection.
"""

from functools import lru_cache

from logscope.classifier.engine import AnomalyClassifier
from logscope.config import get_settings
from logscope.parsers.base import LogFileParser


@lru_cache()
def get_parser() -> LogFileParser:
    """Get cached log file parser instance."""
    return LogFileParser()


@lru_cache()
def get_classifier() -> AnomalyClassifier:
    """Get cached classifier; tier availability is fixed at construction."""
    return AnomalyClassifier(get_settings())
