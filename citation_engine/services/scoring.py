"""
Composite Value Scorer

Reduces a SourceMetric to a single valueScore reflecting the overall value of
the citation source to the brand. The weights are fixed product policy (see
Settings.value_weight_*), not learned.

    valueScore = 0.30 * mentionRate
               + 0.30 * shareOfAnswer
               + 0.20 * sentimentNormalized
               + 0.10 * 100 * citations / maxCitations
               + 0.10 * 100 * topicCount / maxTopics

Sentiment is already on the canonical 0-100 scale, so normalization is a
clamp. Normalization maxima are computed once per dataset and floored at 1.

Scoring never raises: malformed numbers are treated as 0 before weighting.
"""

import logging
from typing import Optional, Sequence

from citation_engine.core.config import Settings, get_settings
from citation_engine.models import NormalizationBounds, SourceMetric
from citation_engine.services.statistics import clamp, finite_or_zero, max_or_floor

logger = logging.getLogger(__name__)


def normalized_sentiment(source: SourceMetric) -> float:
    """Sentiment on the 0-100 scale."""
    return clamp(finite_or_zero(source.sentiment), 0.0, 100.0)


def topic_count(source: SourceMetric) -> int:
    return len(source.topics or [])


def compute_normalization_bounds(sources: Sequence[SourceMetric]) -> NormalizationBounds:
    """
    Compute the per-dataset citation and topic maxima.

    Args:
        sources: Every source in the snapshot

    Returns:
        NormalizationBounds with both maxima floored at 1
    """
    bounds = NormalizationBounds(
        maxCitations=max_or_floor((s.citations for s in sources), 1.0),
        maxTopics=max_or_floor((topic_count(s) for s in sources), 1.0),
    )
    logger.debug(
        f"Normalization bounds: maxCitations={bounds.maxCitations}, maxTopics={bounds.maxTopics}"
    )
    return bounds


def value_score_for_source(
    source: SourceMetric,
    bounds: NormalizationBounds,
    settings: Optional[Settings] = None,
) -> float:
    """
    Calculate the composite value score for one source.

    Args:
        source: Canonical source metrics
        bounds: Dataset maxima from compute_normalization_bounds()
        settings: Weight overrides (defaults to get_settings())

    Returns:
        Value score, designed to land in 0-100 for well-formed data
    """
    settings = settings or get_settings()

    citations = max(0.0, finite_or_zero(source.citations))
    citations_normalized = 100.0 * citations / bounds.maxCitations
    topics_normalized = 100.0 * topic_count(source) / bounds.maxTopics

    score = (
        settings.value_weight_mention * finite_or_zero(source.mentionRate)
        + settings.value_weight_soa * finite_or_zero(source.shareOfAnswer)
        + settings.value_weight_sentiment * normalized_sentiment(source)
        + settings.value_weight_citations * citations_normalized
        + settings.value_weight_topics * topics_normalized
    )
    return finite_or_zero(score)


__all__ = [
    "normalized_sentiment",
    "topic_count",
    "compute_normalization_bounds",
    "value_score_for_source",
]
