"""
Pytest test module for the /sources HTTP endpoints.

Uses FastAPI's TestClient as a context manager so the lifespan runs and
background scoring tasks share one event loop across requests. The scheduler
dependency is overridden with a zero-delay instance.
"""

import time
from typing import Any, Dict, Generator

import pytest
from fastapi.testclient import TestClient

from citation_engine.core.config import Settings
from citation_engine.core.dependencies import get_scheduler_dependency, get_settings_dependency
from citation_engine.main import app
from citation_engine.models import SentimentScale
from citation_engine.services.scheduler import DeferredScoringScheduler


SNAPSHOT_KEY = {"brandId": "brand-1", "startDate": "2025-01-01", "endDate": "2025-01-31"}


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    scheduler = DeferredScoringScheduler(idle_delay_seconds=0.0, cache_size=4)
    app.dependency_overrides[get_scheduler_dependency] = lambda: scheduler
    try:
        with TestClient(app) as test_client:
            yield test_client
            test_client.portal.call(scheduler.close)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def analyze_body(raw_payloads) -> Dict[str, Any]:
    return {"sources": raw_payloads}


def _poll_status(client: TestClient, timeout: float = 5.0) -> Dict[str, Any]:
    deadline = time.monotonic() + timeout
    while True:
        data = client.get("/sources/snapshots/status", params=SNAPSHOT_KEY).json()
        if data["state"] != "pending" or time.monotonic() > deadline:
            return data
        time.sleep(0.01)


# =============================================================================
# Test Class: TestHealth
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root(self, client):
        data = client.get("/").json()
        assert data["name"] == "Citation Engine API"
        assert data["docs"] == "/docs"


# =============================================================================
# Test Class: TestAnalysisEndpoints
# =============================================================================

class TestAnalysisEndpoints:

    def test_analyze(self, client, analyze_body):
        response = client.post("/sources/analyze", json=analyze_body)
        assert response.status_code == 200

        data = response.json()
        quadrants = {s["name"]: s["quadrant"] for s in data["sources"]}
        assert quadrants == {"a.com": "priority", "b.com": "monitor", "c.com": "reputation"}
        assert data["quadrantCounts"] == {"priority": 1, "reputation": 1, "growth": 0, "monitor": 1}
        assert data["sources"][0]["valueScore"] == pytest.approx(73.0)
        assert data["thresholds"]["compositeTopQuartile"] == pytest.approx(0.805)
        assert data["correlation"]["labels"] == ["Mention Rate", "SOA", "Sentiment", "Citations"]
        assert 1 <= len(data["takeaways"]) <= 4

    def test_analyze_empty(self, client):
        data = client.post("/sources/analyze", json={"sources": []}).json()
        assert data["sources"] == []
        assert data["thresholds"] is None
        assert data["correlation"] == {"labels": [], "matrix": []}
        assert [t["id"] for t in data["takeaways"]] == ["no-data"]

    def test_analyze_signed_sentiment(self, client):
        body = {
            "sources": [{"name": "a.com", "sentiment": -1}, {"name": "b.com", "sentiment": 1}],
            "sentimentScale": "signed",
        }
        data = client.post("/sources/analyze", json=body).json()
        assert [s["sentiment"] for s in data["sources"]] == [0, 100]

    def test_injected_default_sentiment_scale(self, client):
        signed = Settings(default_sentiment_scale=SentimentScale.SIGNED)
        app.dependency_overrides[get_settings_dependency] = lambda: signed
        body = {"sources": [{"name": "a.com", "sentiment": -1}, {"name": "b.com", "sentiment": 0.5}]}

        analyzed = client.post("/sources/analyze", json=body).json()
        scored = client.post("/sources/score", json=body).json()
        zoned = client.post("/sources/zones", json=body).json()

        assert [s["sentiment"] for s in analyzed["sources"]] == [0, 75]
        assert [s["sentiment"] for s in scored] == [0, 75]
        assert [z["sentiment"] for z in zoned] == [0, 75]

    def test_score(self, client, analyze_body):
        data = client.post("/sources/score", json=analyze_body).json()
        assert [s["name"] for s in data] == ["a.com", "b.com", "c.com"]
        assert [s["valueScore"] for s in data] == pytest.approx([73.0, 23.9, 45.0])

    def test_correlations(self, client, analyze_body):
        data = client.post("/sources/correlations", json=analyze_body).json()
        matrix = data["matrix"]
        assert len(matrix) == 4
        assert all(matrix[i][j] == matrix[j][i] for i in range(4) for j in range(4))

    def test_takeaways_for_scored_rows(self, client, analyze_body):
        scored = client.post("/sources/score", json=analyze_body).json()
        data = client.post("/sources/takeaways", json={"sources": scored}).json()
        assert 1 <= len(data) <= 4
        assert len({t["id"] for t in data}) == len(data)

    def test_takeaways_empty(self, client):
        data = client.post("/sources/takeaways", json={"sources": []}).json()
        assert data[0]["id"] == "no-data"

    def test_zones(self, client, analyze_body):
        data = client.post("/sources/zones", json=analyze_body).json()
        zones = {z["name"]: z["zone"] for z in data}
        assert zones["a.com"] == "market_leaders"

    def test_distribution(self, client, analyze_body):
        data = client.post("/sources/distribution", json=analyze_body).json()
        assert [(d["sourceType"], d["count"]) for d in data] == [("editorial", 2), ("ugc", 1)]


# =============================================================================
# Test Class: TestTableAndTrendEndpoints
# =============================================================================

class TestTableAndTrendEndpoints:

    def test_filter(self, client, analyze_body):
        body = dict(analyze_body, filters=[
            {"column": "valueScore", "operator": "lt", "value": 50},
            {"column": "citations", "operator": None},
        ])
        data = client.post("/sources/filter", json=body).json()
        assert [s["name"] for s in data] == ["b.com", "c.com"]
        assert data[1]["quadrant"] == "reputation"

    def test_trends(self, client):
        body = {
            "points": [
                {"date": "2025-01-02", "name": "a.com", "mentionRate": 30},
                {"date": "2025-01-01", "name": "a.com", "mentionRate": 10},
                {"date": "2025-01-01", "name": "a.com", "mentionRate": 20},
                {"date": "2025-01-01", "name": "b.com", "mentionRate": 5},
            ],
            "selected": ["a.com"],
            "metric": "mentionRate",
        }
        data = client.post("/sources/trends", json=body).json()
        assert len(data) == 1
        assert data[0]["points"] == [
            {"date": "2025-01-01", "value": 15.0},
            {"date": "2025-01-02", "value": 30.0},
        ]

    def test_trends_reject_value_score(self, client):
        body = {"points": [], "selected": ["a.com"], "metric": "valueScore"}
        response = client.post("/sources/trends", json=body)
        assert response.status_code == 400
        assert "valueScore" in response.json()["detail"]


# =============================================================================
# Test Class: TestSnapshotEndpoints
# =============================================================================

class TestSnapshotEndpoints:

    def test_submit_then_poll(self, client, raw_payloads):
        response = client.post("/sources/snapshots", json={"key": SNAPSHOT_KEY, "sources": raw_payloads})
        assert response.status_code == 200

        submitted = response.json()
        assert submitted["state"] == "pending"
        assert [s["name"] for s in submitted["rawSources"]] == ["a.com", "b.com", "c.com"]
        assert submitted["analysis"] is None

        ready = _poll_status(client)
        assert ready["state"] == "ready"
        assert ready["analysis"]["quadrantCounts"]["priority"] == 1

    def test_empty_snapshot(self, client):
        data = client.post("/sources/snapshots", json={"key": SNAPSHOT_KEY, "sources": []}).json()
        assert data["state"] == "empty"

    def test_other_range_is_stale(self, client, raw_payloads):
        client.post("/sources/snapshots", json={"key": SNAPSHOT_KEY, "sources": raw_payloads})
        params = dict(SNAPSHOT_KEY, startDate="2024-12-01", endDate="2024-12-31")
        data = client.get("/sources/snapshots/status", params=params).json()
        assert data["state"] == "stale"
        assert data["rawSources"] == []

    def test_status_before_submit(self, client):
        assert _poll_status(client)["state"] == "empty"


# =============================================================================
# Test Class: TestErrors
# =============================================================================

class TestErrors:

    def test_takeaways_require_scored_rows(self, client):
        response = client.post("/sources/takeaways", json={"sources": [{"name": "a.com"}]})
        assert response.status_code == 422

    def test_invalid_filter_operator(self, client, analyze_body):
        body = dict(analyze_body, filters=[{"column": "citations", "operator": "ne", "value": 1}])
        assert client.post("/sources/filter", json=body).status_code == 422

    def test_status_requires_key(self, client):
        assert client.get("/sources/snapshots/status").status_code == 422

    def test_unexpected_failure_is_500(self, client, analyze_body, monkeypatch):
        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("citation_engine.api.sources.analyze_sources", broken)
        response = client.post("/sources/analyze", json=analyze_body)
        assert response.status_code == 500
        assert response.json()["detail"] == "Error analyzing sources: boom"
