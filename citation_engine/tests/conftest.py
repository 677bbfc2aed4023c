"""
Pytest Configuration and Shared Fixtures for Citation Engine Tests.

This module provides fixtures for all engine tests:
- Settings cache reset so environment overrides never leak between tests
- Factories for canonical (SourceMetric) and scored (ScoredSource) rows
- The reference three-source scenario and a four-quadrant dataset
- Raw upstream payloads using alternate field names
- Daily trend rows for aggregation tests
- A fast DeferredScoringScheduler for async tests

Dependencies:
- pytest
- pytest-asyncio
- numpy
"""

from datetime import date, timedelta
from typing import Any, Callable, Dict, Generator, List

import pytest
import pytest_asyncio

from citation_engine.core.config import get_settings
from citation_engine.models import (
    Quadrant,
    ScoredSource,
    SnapshotKey,
    SourceMetric,
    SourceTrendPoint,
)
from citation_engine.services.scheduler import DeferredScoringScheduler


# ============================================================
# PYTEST HOOKS
# ============================================================

def pytest_configure(config) -> None:
    """
    Register custom markers.

    - slow: Marks tests as slow (deselect with -m "not slow")
    - scenario: Marks reference-scenario tests with hand-computed expectations
    """
    config.addinivalue_line(
        'markers',
        'slow: marks tests as slow (deselect with -m "not slow")'
    )
    config.addinivalue_line(
        'markers',
        'scenario: marks reference-scenario tests with hand-computed expectations'
    )


# ============================================================
# SETTINGS FIXTURES
# ============================================================

@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Clear the cached Settings before and after every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ============================================================
# SOURCE FACTORIES
# ============================================================

@pytest.fixture
def make_source() -> Callable[..., SourceMetric]:
    """
    Factory for canonical SourceMetric rows.

    Usage:
        def test_something(make_source):
            src = make_source("a.com", mentionRate=80, shareOfAnswer=70)
    """
    def _make(name: str, **fields: Any) -> SourceMetric:
        return SourceMetric(name=name, **fields)
    return _make


@pytest.fixture
def make_scored() -> Callable[..., ScoredSource]:
    """
    Factory for ScoredSource rows with explicit valueScore and quadrant.

    Takeaway tests build rows directly so each rule can be triggered in
    isolation.
    """
    def _make(
        name: str,
        valueScore: float = 50.0,
        quadrant: Quadrant = Quadrant.MONITOR,
        **fields: Any,
    ) -> ScoredSource:
        fields.setdefault("mentionRate", 20.0)
        fields.setdefault("shareOfAnswer", 20.0)
        fields.setdefault("sentiment", 60.0)
        return ScoredSource(name=name, valueScore=valueScore, quadrant=quadrant, **fields)
    return _make


# ============================================================
# DATASET FIXTURES
# ============================================================

@pytest.fixture
def scenario_sources(make_source) -> List[SourceMetric]:
    """
    Reference scenario with all deltas 0.

    Hand-computed classification composites: A 0.805, B 0.2465, C 0.5
    (median 0.5, 75th percentile 0.805).
    """
    return [
        make_source("a.com", mentionRate=80, shareOfAnswer=70, sentiment=90, citations=50),
        make_source("b.com", mentionRate=10, shareOfAnswer=5, sentiment=95, citations=2),
        make_source("c.com", mentionRate=50, shareOfAnswer=50, sentiment=50, citations=25),
    ]


@pytest.fixture
def four_quadrant_sources(make_source) -> List[SourceMetric]:
    """
    Dataset that lands one source in each quadrant.

    Composites: x 0.91, y 0.595, z 0.24, w 0.325 (median 0.46, p75 0.91).
    Medians: mention 55, soa 50, sentiment 0.55, citations 0.5.
    """
    return [
        make_source("x.com", mentionRate=90, shareOfAnswer=90, sentiment=90, citations=100),
        make_source("y.com", mentionRate=10, shareOfAnswer=80, sentiment=95, citations=90),
        make_source("z.com", mentionRate=50, shareOfAnswer=10, sentiment=10, citations=10),
        make_source("w.com", mentionRate=60, shareOfAnswer=20, sentiment=20, citations=5),
    ]


@pytest.fixture
def identical_sources(make_source) -> List[SourceMetric]:
    return [
        make_source(name, mentionRate=40, shareOfAnswer=30, sentiment=70, citations=12)
        for name in ("one.com", "two.com", "three.com")
    ]


@pytest.fixture
def raw_payloads() -> List[Dict[str, Any]]:
    """Upstream payloads using the alternate field names the feed sends."""
    return [
        {
            "domain": "https://www.A.com/articles/1",
            "type": "Editorial",
            "mention_rate": 80,
            "soa": "70",
            "sentimentScore": 90,
            "citationCount": 50,
        },
        {
            "source": "b.com",
            "category": "ugc",
            "mentionRate": 10,
            "share_of_answer": 5,
            "sentiment": 95,
            "citation_count": 2,
        },
        {
            "name": "c.com",
            "mentionRate": 50,
            "shareOfAnswer": 50,
            "sentiment": 50,
            "citations": 25,
        },
    ]


@pytest.fixture
def trend_points() -> List[SourceTrendPoint]:
    """
    Daily rows for three sources over three days.

    a.com has two rows on day 1 (mention 10 and 20) which must average to 15;
    rows are intentionally out of date order.
    """
    day1 = date(2025, 1, 1)
    day2 = day1 + timedelta(days=1)
    day3 = day1 + timedelta(days=2)
    return [
        SourceTrendPoint(date=day3, name="a.com", mentionRate=40, shareOfAnswer=4),
        SourceTrendPoint(date=day1, name="a.com", mentionRate=10, shareOfAnswer=1),
        SourceTrendPoint(date=day1, name="a.com", mentionRate=20, shareOfAnswer=3),
        SourceTrendPoint(date=day2, name="a.com", mentionRate=30, shareOfAnswer=2),
        SourceTrendPoint(date=day1, name="b.com", mentionRate=5, shareOfAnswer=50),
        SourceTrendPoint(date=day2, name="b.com", mentionRate=6, shareOfAnswer=60),
        SourceTrendPoint(date=day1, name="c.com", mentionRate=99, shareOfAnswer=99),
    ]


# ============================================================
# SCHEDULER FIXTURES
# ============================================================

@pytest.fixture
def snapshot_key() -> SnapshotKey:
    return SnapshotKey(brandId="brand-1", startDate=date(2025, 1, 1), endDate=date(2025, 1, 31))


@pytest.fixture
def other_snapshot_key() -> SnapshotKey:
    return SnapshotKey(brandId="brand-1", startDate=date(2025, 2, 1), endDate=date(2025, 2, 28))


@pytest_asyncio.fixture
async def scheduler():
    """Scheduler with no idle delay; closed after the test."""
    instance = DeferredScoringScheduler(idle_delay_seconds=0.0, max_delay_seconds=1.5, cache_size=4)
    yield instance
    await instance.close()
