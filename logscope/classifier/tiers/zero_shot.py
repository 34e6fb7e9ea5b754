"""
Tier 2 - zero-shot classification through the Hugging Face inference API.
"""

from typing import Dict, Optional, Sequence

from logscope.classifier.tiers.base import AnalysisTier, TierUnavailableError
from logscope.config import Settings, get_settings
from logscope.llm.huggingface import HuggingFaceClient
from logscope.models.analysis import AnalysisResult, Status, ThreatLevel
from logscope.models.log_entry import ParsedLogEntry


LABEL_STATUS: Dict[str, Status] = {
    "normal": Status.NORMAL,
    "suspicious": Status.SUSPICIOUS,
    "malicious": Status.ANOMALY,
    "anomaly": Status.ANOMALY,
    "error": Status.SUSPICIOUS,
}

LABEL_ACTION: Dict[str, str] = {
    "normal": "Continue monitoring",
    "suspicious": "Monitor closely",
    "malicious": "Investigate immediately",
    "anomaly": "Investigate immediately",
    "error": "Check system logs",
}

MALICIOUS_LABELS = {"malicious", "anomaly"}
HIGH_THREAT_SCORE = 0.7
MEDIUM_THREAT_SCORE = 0.6


def threat_level_for(label: str, score: float) -> ThreatLevel:
    if label in MALICIOUS_LABELS and score > HIGH_THREAT_SCORE:
        return ThreatLevel.HIGH
    if label == "suspicious" and score > MEDIUM_THREAT_SCORE:
        return ThreatLevel.MEDIUM
    return ThreatLevel.LOW


class ZeroShotTier(AnalysisTier):
    """
    Classifies "<description> <ip> <raw line>" against a fixed label set
    and maps the top label onto status, threat level and action.
    """

    name = "huggingface"
    description = "Hugging Face zero-shot classification"

    def __init__(self, settings: Optional[Settings] = None, client: Optional[HuggingFaceClient] = None):
        self.settings = settings or get_settings()
        self.labels = list(self.settings.zero_shot_labels)
        self._client = client

    def is_available(self) -> bool:
        return self._client is not None or bool(self.settings.huggingface_api_key)

    @property
    def client(self) -> HuggingFaceClient:
        if self._client is None:
            if not self.settings.huggingface_api_key:
                raise TierUnavailableError("Hugging Face API key is not configured")
            self._client = HuggingFaceClient(self.settings)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def analyze(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        text = f"{entry.event_description} {entry.ip_address} {entry.raw_log_line}"
        scores = await self.client.classify(text, self.labels)

        label, score = scores[0]
        label = label.lower()

        return AnalysisResult(
            status=LABEL_STATUS.get(label, Status.NORMAL),
            confidence_score=score,
            explanation=f"Classified as {label} with {score * 100:.1f}% confidence",
            threat_level=threat_level_for(label, score),
            recommended_action=LABEL_ACTION.get(label, "Monitor"),
            analyzed_by=self.name,
        )
