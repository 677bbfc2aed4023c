"""
Correlation Analyzer

Builds the pairwise Pearson correlation matrix across the raw per-source
metric columns [mentionRate, shareOfAnswer, sentiment, citations].

Guarantees:
- The matrix is exactly symmetric: each off-diagonal value is computed once
  and mirrored
- Zero variance in either column (single source, identical values) yields 0
  instead of NaN
- The diagonal is 1.0 except for zero-variance columns, where it is 0
- An empty dataset yields an empty matrix and an empty label list
"""

import logging
from typing import Callable, List, Sequence, Tuple

import numpy as np

from citation_engine.models import CorrelationMatrix, SourceMetric
from citation_engine.services.statistics import finite_or_zero

logger = logging.getLogger(__name__)


# Ordered (label, accessor) pairs; the order fixes matrix indices
CORRELATION_COLUMNS: List[Tuple[str, Callable[[SourceMetric], float]]] = [
    ("Mention Rate", lambda s: s.mentionRate),
    ("SOA", lambda s: s.shareOfAnswer),
    ("Sentiment", lambda s: s.sentiment),
    ("Citations", lambda s: s.citations),
]

CORRELATION_LABELS: List[str] = [label for label, _ in CORRELATION_COLUMNS]


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """
    Pearson correlation of two equally sized columns.

    Args:
        x: First column
        y: Second column

    Returns:
        r in [-1, 1], or 0.0 when either column has zero variance
    """
    if x.size == 0 or x.size != y.size:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = np.sqrt(np.sum(dx * dx) * np.sum(dy * dy))
    if denominator == 0 or not np.isfinite(denominator):
        return 0.0

    r = float(np.sum(dx * dy) / denominator)
    return max(-1.0, min(1.0, r))


def _metric_columns(sources: Sequence[SourceMetric]) -> np.ndarray:
    """Matrix of shape (n_columns, n_sources); malformed values become 0."""
    return np.array(
        [[finite_or_zero(getter(s)) for s in sources] for _, getter in CORRELATION_COLUMNS],
        dtype=np.float64,
    )


def calculate_correlation_matrix(sources: Sequence[SourceMetric]) -> CorrelationMatrix:
    """
    Calculate the symmetric correlation matrix of one dataset snapshot.

    Args:
        sources: Canonical (or scored) sources

    Returns:
        CorrelationMatrix indexed by CORRELATION_LABELS
    """
    if not sources:
        return CorrelationMatrix(labels=[], matrix=[])

    columns = _metric_columns(sources)
    size = len(CORRELATION_COLUMNS)
    matrix = np.zeros((size, size), dtype=np.float64)

    for i in range(size):
        for j in range(i, size):
            if i == j:
                has_variance = bool(np.any(columns[i] != columns[i][0]))
                matrix[i, i] = 1.0 if has_variance else 0.0
                continue
            r = pearson_correlation(columns[i], columns[j])
            matrix[i, j] = r
            matrix[j, i] = r

    logger.debug(f"Correlation matrix computed over {len(sources)} sources")
    return CorrelationMatrix(labels=list(CORRELATION_LABELS), matrix=matrix.tolist())


__all__ = [
    "CORRELATION_COLUMNS",
    "CORRELATION_LABELS",
    "pearson_correlation",
    "calculate_correlation_matrix",
]
