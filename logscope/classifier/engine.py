"""
Anomaly classifier - runs the tier cascade for each log entry.
"""

import logging
from typing import List, Optional, Sequence

from logscope.classifier.tiers.base import AnalysisTier
from logscope.classifier.tiers.llm_tier import LLMTier
from logscope.classifier.tiers.rules import RuleEngineTier
from logscope.classifier.tiers.zero_shot import ZeroShotTier
from logscope.config import Settings, get_settings
from logscope.models.analysis import AnalysisResult, AnalyzedEntry, BatchAnalysis
from logscope.models.log_entry import ParsedLogEntry


logger = logging.getLogger(__name__)


class AnomalyClassifier:
    """
    Classifies log entries by trying analysis tiers in order.

    The classifier:
    1. Keeps the remote tiers whose credentials are configured
    2. Tries them in order; a tier that raises hands over to the next
    3. Always ends with the deterministic rule engine, which cannot fail
    4. Threads a growing context list through batch analysis
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        tiers: Optional[List[AnalysisTier]] = None,
        fallback: Optional[RuleEngineTier] = None,
    ):
        """
        Initialize the classifier.

        Args:
            settings: Credentials and policy. Defaults to the cached app settings.
            tiers: Optional custom remote tiers. If None, builds OpenAI then
                Hugging Face from settings.
            fallback: Optional custom rule engine.
        """
        self.settings = settings or get_settings()

        candidates = tiers if tiers is not None else self._get_default_tiers()
        self.tiers = [tier for tier in candidates if tier.is_available()]
        self.fallback = fallback or RuleEngineTier(self.settings)

        logger.info(
            f"Classifier tiers: {', '.join(t.name for t in self.tiers + [self.fallback])}"
        )

    def _get_default_tiers(self) -> List[AnalysisTier]:
        """Remote tiers in priority order."""
        return [
            LLMTier(self.settings),
            ZeroShotTier(self.settings),
        ]

    async def analyze_log_entry(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        """
        Produce exactly one result for an entry. Never raises.

        Args:
            entry: Entry to classify
            context: Entries analyzed earlier in the batch, oldest first

        Returns:
            Result of the first tier that completed
        """
        for tier in self.tiers:
            try:
                return await tier.analyze(entry, context)
            except Exception as e:
                logger.warning(
                    f"{tier.name} analysis failed for line {entry.line_number}, falling back: {e}"
                )
                continue

        return self.fallback.evaluate(entry, context)

    async def analyze_batch(self, entries: Sequence[ParsedLogEntry]) -> BatchAnalysis:
        """
        Analyze entries sequentially, in input order.

        Each entry sees every entry before it as context, so reordering
        the input can change the results.

        Args:
            entries: Entries to analyze

        Returns:
            BatchAnalysis with one AnalyzedEntry per input entry
        """
        context: List[ParsedLogEntry] = []
        analyzed: List[AnalyzedEntry] = []

        for entry in entries:
            result = await self.analyze_log_entry(entry, context)
            analyzed.append(AnalyzedEntry.from_parts(entry, result))
            context.append(entry)

        batch = BatchAnalysis.from_entries(analyzed)
        logger.info(
            f"Analyzed {batch.analyzed_entries} entries: "
            f"{batch.anomalies_found} anomalies, {batch.suspicious_found} suspicious"
        )
        return batch

    async def aclose(self) -> None:
        """Close the HTTP clients held by the remote tiers."""
        for tier in self.tiers:
            await tier.aclose()

    def get_tier_info(self) -> List[dict]:
        """Get information about the active tiers, in the order they run."""
        return [
            {
                "name": t.name,
                "description": t.description,
                "remote": t.remote,
            }
            for t in self.tiers + [self.fallback]
        ]
