"""
Analysis tiers, tried in order until one produces a result.
"""

from logscope.classifier.tiers.base import AnalysisTier, TierUnavailableError
from logscope.classifier.tiers.llm_tier import LLMTier
from logscope.classifier.tiers.rules import RuleEngineTier
from logscope.classifier.tiers.zero_shot import ZeroShotTier

__all__ = [
    "AnalysisTier",
    "TierUnavailableError",
    "LLMTier",
    "RuleEngineTier",
    "ZeroShotTier",
]
