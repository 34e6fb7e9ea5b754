"""
Abstract base class for analysis tiers.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from logscope.models.log_entry import ParsedLogEntry
from logscope.models.analysis import AnalysisResult


class TierUnavailableError(RuntimeError):
    """Raised when a tier is not configured or can't produce a result."""
    pass


class AnalysisTier(ABC):
    """
    Abstract base class for all analysis tiers.

    Each tier must define:
    - name: Short identifier recorded on results (analyzed_by)
    - description: What the tier does
    - remote: Whether the tier calls an external service
    - analyze(): Produce a result or raise; raising hands over to the next tier
    """

    name: str
    description: str
    remote: bool = True

    def is_available(self) -> bool:
        """
        Whether this tier is usable at all.

        Remote tiers override this to check for their credential. A tier
        that is not available is skipped without being attempted.
        """
        return True

    async def aclose(self) -> None:
        """Release any client the tier opened. Safe to call when none was."""
        pass

    @abstractmethod
    async def analyze(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        """
        Analyze one entry.

        Args:
            entry: The entry to classify
            context: Entries analyzed earlier in the same batch (read only)

        Returns:
            AnalysisResult

        Raises:
            Exception: Any failure; the classifier falls through to the next tier
        """
        pass
