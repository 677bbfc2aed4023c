"""
Package initialization file for citation_engine models.

This module exports all Pydantic schemas and enumerations from schemas.py and
enums.py, making them importable from citation_engine.models directly.

Usage:
    from citation_engine.models import (
        Quadrant,
        SourceMetric,
        ScoredSource,
        Takeaway,
        # ... etc
    )
"""

# =============================================================================
# Enums - Import and re-export all enumerations from enums.py
# =============================================================================

from citation_engine.models.enums import (
    FilterOperator,
    MetricColumn,
    Quadrant,
    ScoringState,
    SentimentScale,
    SourceType,
    TakeawayType,
    Zone,
)


# =============================================================================
# Schemas - Import and re-export all Pydantic models from schemas.py
# =============================================================================

from citation_engine.models.schemas import (
    # -------------------------------------------------------------------------
    # Core Records
    # -------------------------------------------------------------------------
    SourceMetric,
    ScoredSource,

    # -------------------------------------------------------------------------
    # Dataset Statistics
    # -------------------------------------------------------------------------
    NormalizationBounds,
    DatasetThresholds,
    QuadrantCounts,

    # -------------------------------------------------------------------------
    # Analysis Outputs
    # -------------------------------------------------------------------------
    CorrelationMatrix,
    Takeaway,
    ZonedSource,
    SourceTypeShare,
    NumericFilter,

    # -------------------------------------------------------------------------
    # Trends
    # -------------------------------------------------------------------------
    SourceTrendPoint,
    TrendValue,
    TrendSeries,

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------
    SnapshotKey,
    SourceAnalysis,
    SnapshotStatus,

    # -------------------------------------------------------------------------
    # Request Bodies
    # -------------------------------------------------------------------------
    AnalyzeRequest,
    TakeawaysRequest,
    FilterRequest,
    TrendRequest,
    SnapshotRequest,
)


__all__ = [
    # =========================================================================
    # Enums
    # =========================================================================
    "FilterOperator",
    "MetricColumn",
    "Quadrant",
    "ScoringState",
    "SentimentScale",
    "SourceType",
    "TakeawayType",
    "Zone",

    # =========================================================================
    # Schemas - Core Records
    # =========================================================================
    "SourceMetric",
    "ScoredSource",

    # =========================================================================
    # Schemas - Dataset Statistics
    # =========================================================================
    "NormalizationBounds",
    "DatasetThresholds",
    "QuadrantCounts",

    # =========================================================================
    # Schemas - Analysis Outputs
    # =========================================================================
    "CorrelationMatrix",
    "Takeaway",
    "ZonedSource",
    "SourceTypeShare",
    "NumericFilter",

    # =========================================================================
    # Schemas - Trends
    # =========================================================================
    "SourceTrendPoint",
    "TrendValue",
    "TrendSeries",

    # =========================================================================
    # Schemas - Snapshots
    # =========================================================================
    "SnapshotKey",
    "SourceAnalysis",
    "SnapshotStatus",

    # =========================================================================
    # Schemas - Request Bodies
    # =========================================================================
    "AnalyzeRequest",
    "TakeawaysRequest",
    "FilterRequest",
    "TrendRequest",
    "SnapshotRequest",
]
