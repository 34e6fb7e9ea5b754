"""
Deterministic rule engine - the terminal fallback tier.
"""

import re
from typing import FrozenSet, Iterable, List, NamedTuple, Optional, Sequence, Tuple

from logscope.classifier.tiers.base import AnalysisTier
from logscope.config import Settings, get_settings
from logscope.models.analysis import AnalysisResult, Status, ThreatLevel
from logscope.models.log_entry import ParsedLogEntry


class WeightedPattern(NamedTuple):
    name: str
    pattern: re.Pattern
    weight: float


# Evaluated in order against the event description and the raw line
SUSPICIOUS_PATTERNS = [
    WeightedPattern("failed_login", re.compile(r"failed login|authentication fail(?:ed|ure)", re.I), 0.3),
    WeightedPattern("blocked_traffic", re.compile(r"block|deny|drop", re.I), 0.4),
    WeightedPattern("malware", re.compile(r"malware|virus|trojan", re.I), 0.8),
    WeightedPattern("privileged_account", re.compile(r"admin|root|privileged", re.I), 0.3),
    WeightedPattern("web_attack", re.compile(r"sql injection|xss|csrf", re.I), 0.9),
    WeightedPattern("scan_or_brute_force", re.compile(r"port scan|brute force", re.I), 0.7),
    WeightedPattern("suspicious_keyword", re.compile(r"suspicious|anomalous", re.I), 0.6),
]

REPEATED_EVENTS_WEIGHT = 0.3
DENYLISTED_IP_WEIGHT = 0.8

ANOMALY_THRESHOLD = 0.7
SUSPICIOUS_THRESHOLD = 0.4
MAX_RULE_CONFIDENCE = 0.95


class RuleEngineTier(AnalysisTier):
    """
    Scores an entry with weighted regex patterns plus two context rules.

    Rules:
    - Each matching pattern adds its weight (once per pattern)
    - More than N earlier entries from the same IP adds 0.3
    - An IP on the configured denylist adds 0.8

    Total > 0.7 is an anomaly, 0.4 < total <= 0.7 is suspicious,
    anything else keeps the normal defaults. Always succeeds.
    """

    name = "rules"
    description = "Weighted keyword patterns with IP repetition and denylist checks"
    remote = False

    def __init__(
        self,
        settings: Optional[Settings] = None,
        patterns: Optional[List[WeightedPattern]] = None,
        denylisted_ips: Optional[Iterable[str]] = None,
        repeated_ip_threshold: Optional[int] = None,
    ):
        settings = settings or get_settings()
        self.patterns = patterns if patterns is not None else SUSPICIOUS_PATTERNS
        self.denylisted_ips: FrozenSet[str] = frozenset(
            denylisted_ips if denylisted_ips is not None else settings.denylisted_ips
        )
        self.repeated_ip_threshold = (
            repeated_ip_threshold
            if repeated_ip_threshold is not None
            else settings.repeated_ip_threshold
        )

    async def analyze(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        return self.evaluate(entry, context)

    def score(self, entry: ParsedLogEntry, context: Sequence[ParsedLogEntry] = ()) -> Tuple[float, List[str]]:
        """
        Compute the total score and the names of everything that matched.

        Returns:
            (total_score, matched_names)
        """
        total = 0.0
        matched: List[str] = []

        for rule in self.patterns:
            if rule.pattern.search(entry.event_description) or rule.pattern.search(entry.raw_log_line):
                total += rule.weight
                matched.append(rule.name)

        same_ip = sum(1 for e in context if e.ip_address == entry.ip_address)
        if same_ip > self.repeated_ip_threshold:
            total += REPEATED_EVENTS_WEIGHT
            matched.append("repeated_events")

        if entry.ip_address in self.denylisted_ips:
            total += DENYLISTED_IP_WEIGHT
            matched.append("denylisted_ip")

        # Round away float noise so 0.4 + 0.3 lands on the 0.7 boundary
        return round(total, 4), matched

    def evaluate(
        self,
        entry: ParsedLogEntry,
        context: Sequence[ParsedLogEntry] = (),
    ) -> AnalysisResult:
        """Synchronous, deterministic evaluation of one entry."""
        total, matched = self.score(entry, context)

        status = Status.NORMAL
        confidence = 0.5
        threat_level = ThreatLevel.LOW
        action = "Monitor"

        if total > ANOMALY_THRESHOLD:
            status = Status.ANOMALY
            confidence = min(total, MAX_RULE_CONFIDENCE)
            threat_level = ThreatLevel.HIGH
            action = "Investigate immediately"
        elif total > SUSPICIOUS_THRESHOLD:
            status = Status.SUSPICIOUS
            confidence = total
            threat_level = ThreatLevel.MEDIUM
            action = "Monitor closely"

        if matched:
            explanation = f"Rule-based analysis: Detected patterns: {', '.join(matched)}"
        else:
            explanation = "Rule-based analysis: No suspicious patterns detected"

        return AnalysisResult(
            status=status,
            confidence_score=confidence,
            explanation=explanation,
            threat_level=threat_level,
            recommended_action=action,
            analyzed_by=self.name,
        )
