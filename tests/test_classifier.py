"""
Tests for the tiered anomaly classifier.
"""

import asyncio
from typing import List, Optional

import httpx
import pytest

from logscope.classifier.engine import AnomalyClassifier
from logscope.classifier.tiers.base import AnalysisTier, TierUnavailableError
from logscope.classifier.tiers.llm_tier import LLMTier
from logscope.classifier.tiers.rules import RuleEngineTier
from logscope.classifier.tiers.zero_shot import ZeroShotTier, threat_level_for
from logscope.config import Settings
from logscope.llm.huggingface import HuggingFaceClient
from logscope.models.analysis import AnalysisResult, AnalyzedEntry, Status, ThreatLevel
from logscope.models.log_entry import LogFormat, ParsedLogEntry


def make_settings(**overrides) -> Settings:
    """Settings with no credentials unless given."""
    values = {"openai_api_key": "", "huggingface_api_key": "", "denylisted_ips": []}
    values.update(overrides)
    return Settings(**values)


def make_entry(description: str, ip: str = "10.0.0.1", raw: Optional[str] = None, line_number: int = 1) -> ParsedLogEntry:
    """Helper to create a generic entry whose raw line defaults to its description."""
    return ParsedLogEntry(
        timestamp="2024-01-15T03:22:15+00:00",
        ip_address=ip,
        event_description=description,
        raw_log_line=raw if raw is not None else description,
        log_type=LogFormat.GENERIC,
        line_number=line_number,
    )


class FakeTier(AnalysisTier):
    """Tier returning a canned result, or raising, and recording its calls."""

    description = "fake"

    def __init__(self, name: str, result: Optional[AnalysisResult] = None, error: Optional[Exception] = None, available: bool = True):
        self.name = name
        self.result = result
        self.error = error
        self.available = available
        self.calls: List[int] = []
        self.context_sizes: List[int] = []

    def is_available(self) -> bool:
        return self.available

    async def analyze(self, entry, context=()):
        self.calls.append(entry.line_number)
        self.context_sizes.append(len(context))
        if self.error is not None:
            raise self.error
        return self.result


class FakeOpenAIClient:
    def __init__(self, content: str = "", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.prompts: List[str] = []

    async def complete(self, system_prompt: str, user_prompt: str, **kwargs) -> str:
        self.prompts.append(user_prompt)
        if self.error is not None:
            raise self.error
        return self.content


def hf_client(settings: Settings, handler) -> HuggingFaceClient:
    """Hugging Face client backed by an in-process transport."""
    return HuggingFaceClient(
        settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestRuleEngineTier:
    """Tests for the deterministic rule engine."""

    def setup_method(self):
        self.engine = RuleEngineTier(make_settings())

    def test_no_match_keeps_defaults(self):
        result = self.engine.evaluate(make_entry("user logged out"))

        assert result.status == Status.NORMAL
        assert result.confidence_score == 0.5
        assert result.threat_level == ThreatLevel.LOW
        assert result.recommended_action == "Monitor"
        assert result.explanation == "Rule-based analysis: No suspicious patterns detected"
        assert result.analyzed_by == "rules"

    def test_sub_threshold_match_does_not_escalate(self):
        entry = make_entry("failed login attempt")
        total, matched = self.engine.score(entry)

        assert total == 0.3
        assert matched == ["failed_login"]

        result = self.engine.evaluate(entry)
        assert result.status == Status.NORMAL
        assert result.threat_level == ThreatLevel.LOW
        assert "failed_login" in result.explanation

    def test_anomaly_confidence_clamped(self):
        entry = make_entry("sql injection detected from admin account")
        total, matched = self.engine.score(entry)

        assert total == 1.2
        assert matched == ["privileged_account", "web_attack"]

        result = self.engine.evaluate(entry)
        assert result.status == Status.ANOMALY
        assert result.confidence_score == 0.95
        assert result.threat_level == ThreatLevel.HIGH
        assert result.recommended_action == "Investigate immediately"

    def test_suspicious_band(self):
        result = self.engine.evaluate(make_entry("suspicious traffic pattern"))

        assert result.status == Status.SUSPICIOUS
        assert result.confidence_score == 0.6
        assert result.threat_level == ThreatLevel.MEDIUM
        assert result.recommended_action == "Monitor closely"

    def test_seven_tenths_is_suspicious_not_anomaly(self):
        result = self.engine.evaluate(make_entry("request blocked for admin"))

        assert result.status == Status.SUSPICIOUS
        assert result.confidence_score == 0.7

    def test_patterns_checked_against_raw_line(self):
        entry = make_entry("Generic event", raw="2024 trojan found in upload")
        result = self.engine.evaluate(entry)

        assert result.status == Status.ANOMALY
        assert "malware" in result.explanation

    def test_case_insensitive(self):
        assert self.engine.score(make_entry("BRUTE FORCE attempt"))[0] == 0.7

    def test_repeated_ip_rule(self):
        context = [make_entry("ok", ip="9.9.9.9", line_number=i) for i in range(6)]
        entry = make_entry("user logged out", ip="9.9.9.9", line_number=7)

        total, matched = self.engine.score(entry, context)
        assert total >= 0.3
        assert "repeated_events" in matched

    def test_repeated_ip_needs_more_than_threshold(self):
        context = [make_entry("ok", ip="9.9.9.9", line_number=i) for i in range(5)]
        total, matched = self.engine.score(make_entry("ok", ip="9.9.9.9"), context)

        assert total == 0.0
        assert matched == []

    def test_repetition_combines_with_partial_match(self):
        context = [make_entry("ok", ip="9.9.9.9", line_number=i) for i in range(6)]
        entry = make_entry("failed login attempt", ip="9.9.9.9")

        result = self.engine.evaluate(entry, context)
        assert result.status == Status.SUSPICIOUS
        assert result.confidence_score == 0.6

    def test_denylisted_ip(self):
        engine = RuleEngineTier(make_settings(denylisted_ips=["198.51.100.7"]))
        result = engine.evaluate(make_entry("connection opened", ip="198.51.100.7"))

        assert result.status == Status.ANOMALY
        assert "denylisted_ip" in result.explanation

    def test_no_default_denylist(self):
        assert self.engine.denylisted_ips == frozenset()

    def test_deterministic(self):
        context = [make_entry("ok", ip="9.9.9.9", line_number=i) for i in range(6)]
        entry = make_entry("blocked port scan from root", ip="9.9.9.9")

        first = self.engine.evaluate(entry, context)
        second = self.engine.evaluate(entry, context)
        assert first == second

    @pytest.mark.parametrize("base,keyword", [
        ("user logged out", "failed login"),
        ("failed login attempt", "malware"),
        ("suspicious request", "xss"),
        ("blocked by proxy", "admin"),
    ])
    def test_adding_keyword_never_lowers_score(self, base, keyword):
        order = [Status.NORMAL, Status.SUSPICIOUS, Status.ANOMALY]
        before_total, _ = self.engine.score(make_entry(base))
        after_total, _ = self.engine.score(make_entry(f"{base} {keyword}"))

        assert after_total >= before_total

        before = self.engine.evaluate(make_entry(base))
        after = self.engine.evaluate(make_entry(f"{base} {keyword}"))
        assert order.index(after.status) >= order.index(before.status)


class TestZeroShotTier:
    """Tests for the Hugging Face tier."""

    def test_unavailable_without_key(self):
        assert ZeroShotTier(make_settings()).is_available() is False

    def test_available_with_key(self):
        assert ZeroShotTier(make_settings(huggingface_api_key="hf_x")).is_available() is True

    def test_maps_top_label(self):
        settings = make_settings(huggingface_api_key="hf_x")
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = request.read()
            return httpx.Response(200, json={
                "labels": ["malicious", "suspicious", "normal", "error"],
                "scores": [0.82, 0.1, 0.05, 0.03],
            })

        tier = ZeroShotTier(settings, client=hf_client(settings, handler))
        result = asyncio.run(tier.analyze(make_entry("trojan beacon", ip="10.9.9.9")))

        assert result.status == Status.ANOMALY
        assert result.confidence_score == 0.82
        assert result.threat_level == ThreatLevel.HIGH
        assert result.recommended_action == "Investigate immediately"
        assert result.explanation == "Classified as malicious with 82.0% confidence"
        assert result.analyzed_by == "huggingface"
        assert captured["auth"] == "Bearer hf_x"
        assert b"candidate_labels" in captured["body"]
        assert b"10.9.9.9" in captured["body"]

    def test_list_response_shape(self):
        settings = make_settings(huggingface_api_key="hf_x")

        def handler(request):
            return httpx.Response(200, json=[
                {"label": "normal", "score": 0.2},
                {"label": "suspicious", "score": 0.65},
            ])

        tier = ZeroShotTier(settings, client=hf_client(settings, handler))
        result = asyncio.run(tier.analyze(make_entry("odd request")))

        assert result.status == Status.SUSPICIOUS
        assert result.threat_level == ThreatLevel.MEDIUM
        assert result.recommended_action == "Monitor closely"

    def test_error_label(self):
        settings = make_settings(huggingface_api_key="hf_x")

        def handler(request):
            return httpx.Response(200, json={"labels": ["error"], "scores": [0.9]})

        tier = ZeroShotTier(settings, client=hf_client(settings, handler))
        result = asyncio.run(tier.analyze(make_entry("disk failure")))

        assert result.status == Status.SUSPICIOUS
        assert result.threat_level == ThreatLevel.LOW
        assert result.recommended_action == "Check system logs"

    def test_http_error_raises(self):
        settings = make_settings(huggingface_api_key="hf_x")

        def handler(request):
            return httpx.Response(503, json={"error": "loading"})

        tier = ZeroShotTier(settings, client=hf_client(settings, handler))
        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(tier.analyze(make_entry("anything")))

    def test_threat_level_mapping(self):
        assert threat_level_for("malicious", 0.71) == ThreatLevel.HIGH
        assert threat_level_for("malicious", 0.7) == ThreatLevel.LOW
        assert threat_level_for("suspicious", 0.61) == ThreatLevel.MEDIUM
        assert threat_level_for("suspicious", 0.6) == ThreatLevel.LOW
        assert threat_level_for("normal", 0.99) == ThreatLevel.LOW


class TestLLMTier:
    """Tests for the OpenAI tier."""

    def test_unavailable_without_key(self):
        assert LLMTier(make_settings()).is_available() is False

    def test_client_requires_key(self):
        with pytest.raises(TierUnavailableError):
            LLMTier(make_settings()).client

    def test_parses_json_response(self):
        client = FakeOpenAIClient(
            '{"status": "suspicious", "confidence_score": 0.8, "explanation": "odd", '
            '"threat_level": "medium", "recommended_action": "Review"}'
        )
        tier = LLMTier(make_settings(), client=client)
        result = asyncio.run(tier.analyze(make_entry("odd event")))

        assert result.status == Status.SUSPICIOUS
        assert result.confidence_score == 0.8
        assert result.recommended_action == "Review"
        assert result.analyzed_by == "openai"

    def test_prompt_includes_last_five_context_entries(self):
        client = FakeOpenAIClient('{"status": "normal"}')
        tier = LLMTier(make_settings(), client=client)
        context = [make_entry(f"event number {i}", line_number=i) for i in range(8)]

        asyncio.run(tier.analyze(make_entry("current event", raw="RAW LINE"), context))

        prompt = client.prompts[0]
        assert "current event" in prompt
        assert "RAW LINE" in prompt
        assert "event number 2" not in prompt
        for i in range(3, 8):
            assert f"event number {i}" in prompt

    def test_empty_completion_raises(self):
        tier = LLMTier(make_settings(), client=FakeOpenAIClient("   "))
        with pytest.raises(TierUnavailableError):
            asyncio.run(tier.analyze(make_entry("x")))


class TestAnomalyClassifier:
    """Tests for the tier cascade."""

    def test_no_credentials_uses_rule_engine_only(self):
        classifier = AnomalyClassifier(make_settings())

        assert classifier.tiers == []
        assert [t["name"] for t in classifier.get_tier_info()] == ["rules"]

    def test_credentials_enable_remote_tiers(self):
        classifier = AnomalyClassifier(make_settings(openai_api_key="sk-x", huggingface_api_key="hf_x"))
        assert [t.name for t in classifier.tiers] == ["openai", "huggingface"]

        classifier = AnomalyClassifier(make_settings(huggingface_api_key="hf_x"))
        assert [t.name for t in classifier.tiers] == ["huggingface"]

    def test_unconfigured_output_matches_rule_engine(self):
        settings = make_settings()
        classifier = AnomalyClassifier(settings)
        engine = RuleEngineTier(settings)
        entry = make_entry("sql injection detected from admin account")

        result = asyncio.run(classifier.analyze_log_entry(entry))
        assert result.model_dump_json() == engine.evaluate(entry).model_dump_json()

    def test_first_successful_tier_wins(self):
        first = FakeTier("first", result=AnalysisResult(status=Status.ANOMALY, analyzed_by="first"))
        second = FakeTier("second", result=AnalysisResult(analyzed_by="second"))
        classifier = AnomalyClassifier(make_settings(), tiers=[first, second])

        result = asyncio.run(classifier.analyze_log_entry(make_entry("x")))

        assert result.analyzed_by == "first"
        assert second.calls == []

    def test_failure_falls_through(self):
        first = FakeTier("first", error=RuntimeError("network down"))
        second = FakeTier("second", result=AnalysisResult(analyzed_by="second"))
        classifier = AnomalyClassifier(make_settings(), tiers=[first, second])

        result = asyncio.run(classifier.analyze_log_entry(make_entry("x")))

        assert result.analyzed_by == "second"
        assert first.calls == [1]

    def test_all_remote_failures_reach_rule_engine(self):
        tiers = [
            FakeTier("first", error=TierUnavailableError("no key")),
            FakeTier("second", error=ValueError("bad json")),
        ]
        classifier = AnomalyClassifier(make_settings(), tiers=tiers)

        result = asyncio.run(classifier.analyze_log_entry(make_entry("malware detected")))

        assert result.analyzed_by == "rules"
        assert result.status == Status.ANOMALY

    def test_unavailable_tier_never_attempted(self):
        skipped = FakeTier("skipped", result=AnalysisResult(), available=False)
        classifier = AnomalyClassifier(make_settings(), tiers=[skipped])

        asyncio.run(classifier.analyze_log_entry(make_entry("x")))
        assert skipped.calls == []

    @pytest.mark.parametrize("openai_error,hf_error", [
        (None, None),
        (RuntimeError("auth"), None),
        (None, RuntimeError("timeout")),
        (RuntimeError("auth"), RuntimeError("timeout")),
    ])
    def test_always_returns_complete_result(self, openai_error, hf_error):
        settings = make_settings(openai_api_key="sk-x", huggingface_api_key="hf_x")

        def handler(request):
            if hf_error is not None:
                raise httpx.ConnectError("timeout")
            return httpx.Response(200, json={"labels": ["normal"], "scores": [0.9]})

        tiers = [
            LLMTier(settings, client=FakeOpenAIClient("not json at all", error=openai_error)),
            ZeroShotTier(settings, client=hf_client(settings, handler)),
        ]
        classifier = AnomalyClassifier(settings, tiers=tiers)

        result = asyncio.run(classifier.analyze_log_entry(make_entry("blocked admin login")))

        assert isinstance(result, AnalysisResult)
        assert result.status in Status
        assert 0.0 <= result.confidence_score <= 1.0
        assert result.threat_level in ThreatLevel
        assert result.recommended_action
        assert result.explanation

    def test_aclose_closes_remote_clients(self):
        settings = make_settings(huggingface_api_key="hf_x")
        client = hf_client(settings, lambda request: httpx.Response(200, json=[]))
        classifier = AnomalyClassifier(settings, tiers=[ZeroShotTier(settings, client=client), LLMTier(settings)])

        asyncio.run(classifier.aclose())

        assert client.http_client.is_closed

    def test_batch_preserves_order_and_grows_context(self):
        tier = FakeTier("fake", result=AnalysisResult(analyzed_by="fake"))
        classifier = AnomalyClassifier(make_settings(), tiers=[tier])
        entries = [make_entry(f"event {i}", line_number=i) for i in range(1, 5)]

        batch = asyncio.run(classifier.analyze_batch(entries))

        assert tier.calls == [1, 2, 3, 4]
        assert tier.context_sizes == [0, 1, 2, 3]
        assert [e.line_number for e in batch.entries] == [1, 2, 3, 4]
        assert all(isinstance(e, AnalyzedEntry) for e in batch.entries)

    def test_batch_repetition_depends_on_order(self):
        classifier = AnomalyClassifier(make_settings())
        repeated = [make_entry("ok", ip="9.9.9.9", line_number=i) for i in range(1, 7)]
        target = make_entry("failed login attempt", ip="9.9.9.9", line_number=7)

        last_first = asyncio.run(classifier.analyze_batch(repeated + [target]))
        target_first = asyncio.run(classifier.analyze_batch([target] + repeated))

        assert last_first.entries[-1].status == Status.SUSPICIOUS
        assert target_first.entries[0].status == Status.NORMAL

    def test_batch_counts(self):
        classifier = AnomalyClassifier(make_settings())
        entries = [
            make_entry("malware detected", line_number=1),
            make_entry("suspicious request", line_number=2),
            make_entry("all good", line_number=3),
        ]

        batch = asyncio.run(classifier.analyze_batch(entries))

        assert batch.analyzed_entries == 3
        assert batch.anomalies_found == 1
        assert batch.suspicious_found == 1

    def test_analyzed_entry_merges_fields(self):
        classifier = AnomalyClassifier(make_settings())
        entry = make_entry("malware detected", ip="10.1.1.1")

        batch = asyncio.run(classifier.analyze_batch([entry]))
        analyzed = batch.entries[0]

        assert analyzed.raw_log_line == entry.raw_log_line
        assert analyzed.ip_address == "10.1.1.1"
        assert analyzed.analysis() == RuleEngineTier(make_settings()).evaluate(entry)
