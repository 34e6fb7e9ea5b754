"""
Tiered anomaly classifier.
"""

from logscope.classifier.engine import AnomalyClassifier
from logscope.classifier.tiers import (
    AnalysisTier,
    LLMTier,
    RuleEngineTier,
    TierUnavailableError,
    ZeroShotTier,
)

__all__ = [
    "AnomalyClassifier",
    "AnalysisTier",
    "LLMTier",
    "RuleEngineTier",
    "TierUnavailableError",
    "ZeroShotTier",
]
