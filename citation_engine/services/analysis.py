"""
Source Analysis Orchestration

Runs the complete analysis of one dataset snapshot: boundary normalization,
the atomic score-and-classify pass, dataset thresholds, quadrant counts, the
correlation matrix and key takeaways. This is the unit of work the deferred
scoring scheduler runs off the request path.

Also provides the source type distribution shown next to the quadrant chart.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from citation_engine.core.config import Settings, get_settings
from citation_engine.models import (
    SentimentScale,
    SourceAnalysis,
    SourceMetric,
    SourceType,
    SourceTypeShare,
)
from citation_engine.services.classification import (
    compute_dataset_thresholds,
    count_quadrants,
    score_and_classify,
)
from citation_engine.services.correlation import calculate_correlation_matrix
from citation_engine.services.normalization import normalize_source_payloads
from citation_engine.services.takeaways import generate_takeaways

logger = logging.getLogger(__name__)


# Display order of known source types; unknown types follow alphabetically
SOURCE_TYPE_ORDER: Dict[str, int] = {
    SourceType.EDITORIAL.value: 1,
    SourceType.CORPORATE.value: 2,
    SourceType.UGC.value: 3,
    SourceType.BRAND.value: 4,
    SourceType.REFERENCE.value: 5,
    SourceType.INSTITUTIONAL.value: 6,
}
UNKNOWN_SOURCE_TYPE_RANK = 99


def source_type_distribution(sources: Sequence[SourceMetric]) -> List[SourceTypeShare]:
    """
    Count sources per type with their percentage of the dataset.

    Args:
        sources: Canonical or scored sources

    Returns:
        One SourceTypeShare per present type, known types first in display order
    """
    if not sources:
        return []

    counts: Dict[str, int] = {}
    for source in sources:
        counts[source.sourceType] = counts.get(source.sourceType, 0) + 1

    total = len(sources)
    ordered = sorted(
        counts.items(),
        key=lambda item: (SOURCE_TYPE_ORDER.get(item[0], UNKNOWN_SOURCE_TYPE_RANK), item[0]),
    )
    return [
        SourceTypeShare(sourceType=source_type, count=count, percentage=100.0 * count / total)
        for source_type, count in ordered
    ]


def _as_metrics(
    sources: Sequence[Union[SourceMetric, Mapping[str, Any]]],
    sentiment_scale: Optional[SentimentScale],
) -> List[SourceMetric]:
    if all(isinstance(s, SourceMetric) for s in sources):
        return list(sources)
    payloads = [s.model_dump() if isinstance(s, SourceMetric) else s for s in sources]
    return normalize_source_payloads(payloads, sentiment_scale)


def analyze_sources(
    sources: Sequence[Union[SourceMetric, Mapping[str, Any]]],
    sentiment_scale: Optional[SentimentScale] = None,
    settings: Optional[Settings] = None,
) -> SourceAnalysis:
    """
    Analyze one dataset snapshot end to end.

    Args:
        sources: Canonical SourceMetric rows, or raw upstream payloads which
            are normalized first
        sentiment_scale: Declared scale of raw payload sentiment
        settings: Weight and cutoff overrides

    Returns:
        SourceAnalysis; an empty dataset yields no rows, no thresholds, an
        empty correlation matrix and the single 'no-data' takeaway
    """
    settings = settings or get_settings()
    metrics = _as_metrics(sources, sentiment_scale or settings.default_sentiment_scale)

    scored = score_and_classify(metrics, settings)
    analysis = SourceAnalysis(
        sources=scored,
        thresholds=compute_dataset_thresholds(metrics, settings=settings) if metrics else None,
        quadrantCounts=count_quadrants(scored),
        correlation=calculate_correlation_matrix(metrics),
        takeaways=generate_takeaways(scored, settings),
    )
    logger.debug(
        f"Analyzed {len(scored)} sources: {analysis.quadrantCounts.model_dump()}"
    )
    return analysis


__all__ = [
    "SOURCE_TYPE_ORDER",
    "source_type_distribution",
    "analyze_sources",
]
