"""
Quadrant Classification Service

Partitions citation sources into four strategic buckets using thresholds
derived from the current dataset rather than fixed absolute cutoffs: "high
visibility" is relative to the brand's own citation landscape.

Step 1 - dataset statistics (compute_dataset_thresholds):
- mentionMedian, soaMedian: medians of raw mentionRate / shareOfAnswer
- sentimentMedian: median of sentiment on the 0-1 scale
- citationsMedian: median of citations / maxCitations
- compositeMedian, compositeTopQuartile: median and 75th percentile of the
  classification composite

    composite = 0.35 * mention/100 + 0.35 * soa/100
              + 0.20 * sentiment/100 + 0.10 * citations/maxCitations

  This composite is classification-only and deliberately weighted
  differently from the value score.

Step 2 - predicates (all `>=` against the thresholds above).

Step 3 - cascade, first match wins:
1. priority:   visibilityStrong AND soaStrong AND compositeStrong
2. reputation: visibilityStrong AND (NOT sentimentPositive OR NOT citationsStrong)
3. growth:     NOT visibilityStrong AND (sentimentPositive OR citationsStrong)
               AND compositeHealthy
4. monitor:    otherwise

A single-source dataset compares every value with itself, so every predicate
is true and the source is classified priority. A dataset of identical rows
behaves the same way for every row.

The module also provides the zone view (market_leaders, reputation_risks,
growth_bets, monitor_improve), a second classification of the same data on a
0-100 composite scale.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from citation_engine.core.config import Settings, get_settings
from citation_engine.models import (
    DatasetThresholds,
    NormalizationBounds,
    Quadrant,
    QuadrantCounts,
    ScoredSource,
    SourceMetric,
    Zone,
    ZonedSource,
)
from citation_engine.services.scoring import (
    compute_normalization_bounds,
    normalized_sentiment,
    value_score_for_source,
)
from citation_engine.services.statistics import finite_or_zero, median, percentile

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS - Zone View Cutoffs
# Sentiment and citation cutoffs are on the 0-100 scale.
# =============================================================================

ZONE_LEADER_MIN_SENTIMENT = 50.0
ZONE_LEADER_MIN_CITATIONS = 25.0
ZONE_RISK_MAX_SENTIMENT = 50.0
ZONE_RISK_MAX_CITATIONS = 20.0
ZONE_GROWTH_MIN_SENTIMENT = 55.0
ZONE_GROWTH_MIN_CITATIONS = 30.0


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class QuadrantPredicates:
    """Boolean predicates of one source relative to the dataset thresholds."""
    visibility_strong: bool
    soa_strong: bool
    sentiment_positive: bool
    citations_strong: bool
    composite_strong: bool
    composite_healthy: bool


# =============================================================================
# THRESHOLDS
# =============================================================================


def _citations_ratio(source: SourceMetric, bounds: NormalizationBounds) -> float:
    return max(0.0, finite_or_zero(source.citations)) / bounds.maxCitations


def classification_composite_score(
    source: SourceMetric,
    bounds: NormalizationBounds,
    settings: Optional[Settings] = None,
) -> float:
    """
    Classification-only composite on a 0-1 scale.

    Args:
        source: Canonical source metrics
        bounds: Dataset maxima
        settings: Weight overrides (defaults to get_settings())

    Returns:
        Composite score used for the compositeStrong/compositeHealthy predicates
    """
    settings = settings or get_settings()
    return (
        settings.composite_weight_mention * finite_or_zero(source.mentionRate) / 100.0
        + settings.composite_weight_soa * finite_or_zero(source.shareOfAnswer) / 100.0
        + settings.composite_weight_sentiment * normalized_sentiment(source) / 100.0
        + settings.composite_weight_citations * _citations_ratio(source, bounds)
    )


def compute_dataset_thresholds(
    sources: Sequence[SourceMetric],
    bounds: Optional[NormalizationBounds] = None,
    settings: Optional[Settings] = None,
) -> DatasetThresholds:
    """
    Compute the dataset-relative thresholds used by classify_quadrant().

    Args:
        sources: Every source in the snapshot
        bounds: Precomputed maxima (computed here when omitted)
        settings: Weight and percentile overrides

    Returns:
        DatasetThresholds; all zeros for an empty dataset
    """
    settings = settings or get_settings()
    bounds = bounds or compute_normalization_bounds(sources)

    composites = [classification_composite_score(s, bounds, settings) for s in sources]

    thresholds = DatasetThresholds(
        mentionMedian=median(s.mentionRate for s in sources),
        soaMedian=median(s.shareOfAnswer for s in sources),
        sentimentMedian=median(normalized_sentiment(s) / 100.0 for s in sources),
        citationsMedian=median(_citations_ratio(s, bounds) for s in sources),
        compositeMedian=median(composites),
        compositeTopQuartile=percentile(composites, settings.top_quartile_percentile),
        maxCitations=bounds.maxCitations,
        maxTopics=bounds.maxTopics,
    )
    logger.debug(f"Dataset thresholds for {len(sources)} sources: {thresholds.model_dump()}")
    return thresholds


# =============================================================================
# CLASSIFICATION
# =============================================================================


def evaluate_quadrant_predicates(
    source: SourceMetric,
    thresholds: DatasetThresholds,
    settings: Optional[Settings] = None,
) -> QuadrantPredicates:
    bounds = NormalizationBounds(
        maxCitations=thresholds.maxCitations,
        maxTopics=thresholds.maxTopics,
    )
    composite = classification_composite_score(source, bounds, settings)

    return QuadrantPredicates(
        visibility_strong=finite_or_zero(source.mentionRate) >= thresholds.mentionMedian,
        soa_strong=finite_or_zero(source.shareOfAnswer) >= thresholds.soaMedian,
        sentiment_positive=normalized_sentiment(source) / 100.0 >= thresholds.sentimentMedian,
        citations_strong=_citations_ratio(source, bounds) >= thresholds.citationsMedian,
        composite_strong=composite >= thresholds.compositeTopQuartile,
        composite_healthy=composite >= thresholds.compositeMedian,
    )


def classify_quadrant(
    source: SourceMetric,
    thresholds: DatasetThresholds,
    settings: Optional[Settings] = None,
) -> Quadrant:
    """
    Assign a quadrant to one source. Rules are evaluated in order; the first
    match wins and monitor is always reachable.
    """
    p = evaluate_quadrant_predicates(source, thresholds, settings)

    if p.visibility_strong and p.soa_strong and p.composite_strong:
        return Quadrant.PRIORITY
    if p.visibility_strong and (not p.sentiment_positive or not p.citations_strong):
        return Quadrant.REPUTATION
    if (
        not p.visibility_strong
        and (p.sentiment_positive or p.citations_strong)
        and p.composite_healthy
    ):
        return Quadrant.GROWTH
    return Quadrant.MONITOR


def score_and_classify(
    sources: Sequence[SourceMetric],
    settings: Optional[Settings] = None,
) -> List[ScoredSource]:
    """
    Score and classify one dataset snapshot in a single pass.

    valueScore and quadrant are derived from the same bounds and thresholds,
    so callers never see fields from different snapshots combined.

    Args:
        sources: Canonical sources of one snapshot
        settings: Composite weight overrides (defaults to get_settings())
        settings: Weight and cutoff overrides

    Returns:
        ScoredSource list in input order (empty for an empty dataset)
    """
    if not sources:
        return []

    settings = settings or get_settings()
    bounds = compute_normalization_bounds(sources)
    thresholds = compute_dataset_thresholds(sources, bounds, settings)

    scored: List[ScoredSource] = []
    for source in sources:
        scored.append(
            ScoredSource(
                **source.model_dump(exclude={"valueScore", "quadrant"}),
                valueScore=value_score_for_source(source, bounds, settings),
                quadrant=classify_quadrant(source, thresholds, settings),
            )
        )
    return scored


def count_quadrants(scored: Sequence[ScoredSource]) -> QuadrantCounts:
    """Count sources per quadrant. The counts always sum to len(scored)."""
    counts: Dict[str, int] = {q.value: 0 for q in Quadrant}
    for source in scored:
        counts[Quadrant(source.quadrant).value] += 1
    return QuadrantCounts(**counts)


# =============================================================================
# ZONE VIEW
# =============================================================================


def zone_score(
    source: SourceMetric,
    max_citations: float,
    settings: Optional[Settings] = None,
) -> float:
    """
    Zone composite on a 0-100 scale.

    Uses the classification composite weights with citations expressed as a
    percentage of the dataset maximum, capped at 100.
    """
    settings = settings or get_settings()
    return (
        settings.composite_weight_mention * finite_or_zero(source.mentionRate)
        + settings.composite_weight_soa * finite_or_zero(source.shareOfAnswer)
        + settings.composite_weight_sentiment * normalized_sentiment(source)
        + settings.composite_weight_citations * _citations_pct(source, max_citations)
    )


def _citations_pct(source: SourceMetric, max_citations: float) -> float:
    return min(100.0, 100.0 * max(0.0, finite_or_zero(source.citations)) / max_citations)


def classify_zone(
    source: SourceMetric,
    score: float,
    score_p75: float,
    score_median: float,
    mention_median: float,
    soa_median: float,
    max_citations: float,
) -> Zone:
    """Assign one source to a zone; the first matching rule wins."""
    sentiment = normalized_sentiment(source)
    citations = _citations_pct(source, max_citations)
    mention = finite_or_zero(source.mentionRate)
    soa = finite_or_zero(source.shareOfAnswer)

    if (
        score >= score_p75
        and sentiment >= ZONE_LEADER_MIN_SENTIMENT
        and citations >= ZONE_LEADER_MIN_CITATIONS
    ):
        return Zone.MARKET_LEADERS
    if (
        (mention >= mention_median or soa >= soa_median)
        and (sentiment < ZONE_RISK_MAX_SENTIMENT or citations < ZONE_RISK_MAX_CITATIONS)
        and score < score_p75
    ):
        return Zone.REPUTATION_RISKS
    if (
        score_median <= score < score_p75
        and (sentiment >= ZONE_GROWTH_MIN_SENTIMENT or citations >= ZONE_GROWTH_MIN_CITATIONS)
        and mention < mention_median
    ):
        return Zone.GROWTH_BETS
    return Zone.MONITOR_IMPROVE


def classify_zones(
    sources: Sequence[SourceMetric],
    settings: Optional[Settings] = None,
) -> List[ZonedSource]:
    """
    Classify every source of a snapshot into the zone view.

    Args:
        sources: Canonical sources of one snapshot
        settings: Composite weight overrides (defaults to get_settings())

    Returns:
        ZonedSource list in input order
    """
    if not sources:
        return []

    bounds = compute_normalization_bounds(sources)
    settings = settings or get_settings()
    scores = [zone_score(s, bounds.maxCitations, settings) for s in sources]
    score_p75 = percentile(scores, 75)
    score_median = median(scores)
    mention_median = median(s.mentionRate for s in sources)
    soa_median = median(s.shareOfAnswer for s in sources)

    zoned: List[ZonedSource] = []
    for source, score in zip(sources, scores):
        zoned.append(
            ZonedSource(
                name=source.name,
                sourceType=source.sourceType,
                mentionRate=source.mentionRate,
                shareOfAnswer=source.shareOfAnswer,
                sentiment=source.sentiment,
                citations=source.citations,
                score=score,
                zone=classify_zone(
                    source,
                    score,
                    score_p75,
                    score_median,
                    mention_median,
                    soa_median,
                    bounds.maxCitations,
                ),
            )
        )
    return zoned


__all__ = [
    "QuadrantPredicates",
    "classification_composite_score",
    "compute_dataset_thresholds",
    "evaluate_quadrant_predicates",
    "classify_quadrant",
    "score_and_classify",
    "count_quadrants",
    "zone_score",
    "classify_zone",
    "classify_zones",
]
