"""
Tests for API endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from logscope.api.dependencies import get_classifier
from logscope.classifier.engine import AnomalyClassifier
from logscope.config import Settings
from logscope.main import app


APACHE_LOG = "\n".join([
    '127.0.0.1 - - [10/Oct/2023:13:55:36 +0000] "GET /admin HTTP/1.1" 403 2326',
    '10.0.0.8 - - [10/Oct/2023:13:56:01 +0000] "GET /index.html HTTP/1.1" 200 512',
    "",
    '10.0.0.8 - - [10/Oct/2023:13:57:12 +0000] "GET /search?q=union+select HTTP/1.1" 200 87',
])

LINUX_LOG = "\n".join([
    "Jan 15 03:22:15 server sshd[12345]: Failed password for admin from 192.168.1.100 port 54321 ssh2",
    "Jan 15 03:22:20 server sshd[12346]: Accepted password for bob from 192.168.1.20 port 50000 ssh2",
    "Jan 15 03:23:01 server CRON[999]: (root) CMD (run-parts /etc/cron.hourly)",
])


@pytest.fixture
def client():
    """Create test client with credential-free tiers."""
    classifier = AnomalyClassifier(Settings(openai_api_key="", huggingface_api_key="", denylisted_ips=[]))
    app.dependency_overrides[get_classifier] = lambda: classifier
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Health endpoint should return healthy status."""
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data


class TestTiersEndpoint:
    """Tests for tier listing endpoint."""

    def test_rule_engine_only_without_credentials(self, client):
        response = client.get("/api/tiers")

        assert response.status_code == 200
        tiers = response.json()
        assert [t["name"] for t in tiers] == ["rules"]
        assert tiers[0]["remote"] is False
        assert tiers[0]["description"]


class TestParseEndpoint:
    """Tests for log parsing endpoint."""

    def test_parse_apache(self, client):
        response = client.post("/api/logs/parse", json={"content": APACHE_LOG, "filename": "access.log"})

        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "apache"
        assert data["total_lines"] == 3
        assert data["filename"] == "access.log"
        assert [e["line_number"] for e in data["parsed_entries"]] == [1, 2, 4]

        first = data["parsed_entries"][0]
        assert first["status_code"] == 403
        assert first["event_description"] == "Apache: GET /admin - Status: 403"
        assert first["timestamp"] == "2023-10-10T13:55:36+00:00"

        summary = data["summary"]
        assert summary["total_entries"] == 3
        assert summary["unique_ips"] == 2
        assert summary["top_ips"]["10.0.0.8"] == 2

    def test_parse_linux(self, client):
        response = client.post("/api/logs/parse", json={"content": LINUX_LOG})

        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "linux"
        assert len(data["parsed_entries"]) == 3
        assert data["parsed_entries"][0]["service"] == "sshd[12345]"

    def test_empty_content(self, client):
        response = client.post("/api/logs/parse", json={"content": "   \n  "})

        assert response.status_code == 400
        assert "required" in response.json()["detail"]

    def test_missing_content(self, client):
        response = client.post("/api/logs/parse", json={})
        assert response.status_code == 422


class TestAnalyzeEndpoint:
    """Tests for the parse-and-analyze endpoint."""

    def test_analyze_apache(self, client):
        response = client.post("/api/logs/analyze", json={"content": APACHE_LOG})

        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "apache"
        assert data["total_lines"] == 3
        assert data["processing_time_ms"] >= 0

        analysis = data["analysis"]
        assert analysis["analyzed_entries"] == 3
        assert len(analysis["entries"]) == 3

        # "/admin" hits the privileged account rule only
        first = analysis["entries"][0]
        assert first["status"] == "normal"
        assert first["analyzed_by"] == "rules"
        assert first["raw_log_line"].startswith("127.0.0.1")
        assert "privileged_account" in first["explanation"]

    def test_analyze_linux_results_complete(self, client):
        response = client.post("/api/logs/analyze", json={"content": LINUX_LOG})

        assert response.status_code == 200
        entries = response.json()["analysis"]["entries"]
        for entry in entries:
            assert entry["status"] in {"normal", "suspicious", "anomaly"}
            assert 0.0 <= entry["confidence_score"] <= 1.0
            assert entry["threat_level"] in {"low", "medium", "high", "critical"}

    def test_analyze_empty(self, client):
        response = client.post("/api/logs/analyze", json={"content": ""})
        assert response.status_code == 400


class TestReanalyzeEndpoint:
    """Tests for re-scoring parsed entries."""

    def test_reanalyze_parsed_entries(self, client):
        parsed = client.post("/api/logs/parse", json={"content": APACHE_LOG}).json()

        response = client.post("/api/logs/reanalyze", json={"entries": parsed["parsed_entries"]})

        assert response.status_code == 200
        data = response.json()
        assert data["analyzed_entries"] == 3
        assert [e["line_number"] for e in data["entries"]] == [1, 2, 4]

    def test_reanalyze_minimal_entry(self, client):
        entry = {
            "timestamp": "2024-01-15T03:22:15+00:00",
            "event_description": "malware detected on host",
            "raw_log_line": "malware detected on host",
        }

        response = client.post("/api/logs/reanalyze", json={"entries": [entry]})

        assert response.status_code == 200
        data = response.json()
        assert data["anomalies_found"] == 1
        assert data["entries"][0]["ip_address"] == "unknown"
        assert data["entries"][0]["threat_level"] == "high"

    def test_reanalyze_empty(self, client):
        response = client.post("/api/logs/reanalyze", json={"entries": []})
        assert response.status_code == 400


class TestLifespan:
    """Tests for application startup/shutdown."""

    def test_shutdown_closes_cached_classifier(self, monkeypatch):
        closed = []

        async def record_close(self):
            closed.append(self)

        get_classifier.cache_clear()
        monkeypatch.setattr(AnomalyClassifier, "aclose", record_close)
        classifier = get_classifier()

        with TestClient(app) as client:
            assert client.get("/api/health").status_code == 200

        assert closed == [classifier]
        get_classifier.cache_clear()
