"""
Citation Engine Services Module

Business logic for scoring, classifying and summarizing citation sources.
Every service except the scheduler is stateless and pure: the same snapshot
always yields the same output.

Services:
- statistics: Median, nearest-rank percentile and descriptive statistics
- normalization: Boundary conversion of upstream payloads to SourceMetric
- scoring: Composite value score
- classification: Dataset-relative quadrant classification and the zone view
- correlation: Pairwise Pearson correlation matrix
- takeaways: Rule-based key takeaway generator
- filters: Numeric column filters over scored rows
- trends: Capped trend selection and per-source trend aggregation
- analysis: End-to-end analysis bundle and source type distribution
- scheduler: Deferred scoring scheduler with cancellation and memo cache

All services are designed to be consumed by the API layer (citation_engine/api/).
"""

# =============================================================================
# Statistics Exports
# =============================================================================

from citation_engine.services.statistics import (
    finite_values,
    finite_or_zero,
    mean,
    median,
    percentile,
    std_dev,
)

# =============================================================================
# Normalization Service Exports
# Alias resolution, numeric coercion, domain normalization, sentiment scales
# =============================================================================

from citation_engine.services.normalization import (
    normalize_domain,
    infer_source_type,
    normalize_sentiment,
    normalize_source_payload,
    normalize_source_payloads,
)

# =============================================================================
# Scoring and Classification Exports
# =============================================================================

from citation_engine.services.scoring import (
    compute_normalization_bounds,
    value_score_for_source,
)

from citation_engine.services.classification import (
    classification_composite_score,
    compute_dataset_thresholds,
    classify_quadrant,
    score_and_classify,
    count_quadrants,
    classify_zones,
)

# =============================================================================
# Correlation and Takeaway Exports
# =============================================================================

from citation_engine.services.correlation import (
    CORRELATION_LABELS,
    calculate_correlation_matrix,
)

from citation_engine.services.takeaways import (
    NO_DATA_TAKEAWAY,
    generate_takeaways,
)

# =============================================================================
# Table and Trend Exports
# =============================================================================

from citation_engine.services.filters import apply_numeric_filters

from citation_engine.services.trends import (
    TrendSelection,
    aggregate_trends,
)

# =============================================================================
# Orchestration Exports
# =============================================================================

from citation_engine.services.analysis import (
    analyze_sources,
    source_type_distribution,
)

from citation_engine.services.scheduler import DeferredScoringScheduler


__all__ = [
    # Statistics
    "finite_values",
    "finite_or_zero",
    "mean",
    "median",
    "percentile",
    "std_dev",
    # Normalization
    "normalize_domain",
    "infer_source_type",
    "normalize_sentiment",
    "normalize_source_payload",
    "normalize_source_payloads",
    # Scoring and classification
    "compute_normalization_bounds",
    "value_score_for_source",
    "classification_composite_score",
    "compute_dataset_thresholds",
    "classify_quadrant",
    "score_and_classify",
    "count_quadrants",
    "classify_zones",
    # Correlation and takeaways
    "CORRELATION_LABELS",
    "calculate_correlation_matrix",
    "NO_DATA_TAKEAWAY",
    "generate_takeaways",
    # Tables and trends
    "apply_numeric_filters",
    "TrendSelection",
    "aggregate_trends",
    # Orchestration
    "analyze_sources",
    "source_type_distribution",
    "DeferredScoringScheduler",
]
