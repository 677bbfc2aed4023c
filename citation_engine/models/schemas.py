"""
Pydantic request/response models for the citation source analytics backend.

This module provides type-safe data validation and serialization for the
scoring, classification, correlation and takeaway contracts, plus the
request bodies accepted by the HTTP surface.

Model groups:
- Core records: SourceMetric (canonical input), ScoredSource (derived output)
- Dataset statistics: NormalizationBounds, DatasetThresholds, QuadrantCounts
- Analysis outputs: CorrelationMatrix, Takeaway, ZonedSource, SourceTypeShare
- Trend models: SourceTrendPoint, TrendValue, TrendSeries
- Snapshot models: SnapshotKey, SourceAnalysis, SnapshotStatus
- Request bodies: AnalyzeRequest, TakeawaysRequest, FilterRequest, TrendRequest,
  SnapshotRequest

Core records are frozen: they are value objects computed on demand from one
snapshot of upstream metrics and are never mutated after creation.

All models use Pydantic v2 syntax.
"""

from datetime import date as DateType
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from citation_engine.models.enums import (
    FilterOperator,
    MetricColumn,
    Quadrant,
    ScoringState,
    SentimentScale,
    TakeawayType,
    Zone,
)


# =============================================================================
# Core Records
# =============================================================================


class SourceMetric(BaseModel):
    """
    Canonical per-source metrics for one reporting period.

    Produced by the boundary normalization step from heterogeneous upstream
    payloads. Percentages are on a 0-100 scale, sentiment included.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "name": "wikipedia.org",
                "sourceType": "reference",
                "mentionRate": 42.5,
                "mentionChange": -3.1,
                "shareOfAnswer": 18.0,
                "soaChange": 1.2,
                "sentiment": 72.0,
                "sentimentChange": 0.5,
                "citations": 37,
                "topics": ["pricing", "reviews"],
                "prompts": ["best crm for startups"],
                "pages": ["https://en.wikipedia.org/wiki/CRM"],
            }
        }
    )

    name: str = Field(
        ...,
        min_length=1,
        description="Source identifier (normalized domain), unique within a snapshot"
    )
    sourceType: str = Field(
        default="editorial",
        description="Source category; known values are listed in SourceType, others are kept"
    )
    url: Optional[str] = Field(
        default=None,
        description="Representative URL for the source"
    )
    mentionRate: float = Field(
        default=0.0,
        description="Share of responses citing this source that mention the brand (0-100)"
    )
    mentionChange: float = Field(
        default=0.0,
        description="Mention rate delta versus the prior period, in percentage points"
    )
    shareOfAnswer: float = Field(
        default=0.0,
        description="Share of answer attributable to the brand for this source (0-100)"
    )
    soaChange: float = Field(
        default=0.0,
        description="Share of answer delta versus the prior period"
    )
    sentiment: float = Field(
        default=0.0,
        description="Brand sentiment on the 0-100 scale"
    )
    sentimentChange: float = Field(
        default=0.0,
        description="Sentiment delta versus the prior period"
    )
    citations: int = Field(
        default=0,
        ge=0,
        description="Number of citations of this source"
    )
    topics: List[str] = Field(
        default_factory=list,
        description="Topics in which the source was cited"
    )
    prompts: List[str] = Field(
        default_factory=list,
        description="Prompts whose answers cited the source"
    )
    pages: List[str] = Field(
        default_factory=list,
        description="Cited pages on the source"
    )


class ScoredSource(SourceMetric):
    """
    A SourceMetric enriched with its value score and quadrant.

    Both derived fields come from the same dataset snapshot: thresholds are
    dataset-relative, so they are always recomputed together.
    """
    valueScore: float = Field(
        ...,
        description="Composite value score, designed to land in 0-100"
    )
    quadrant: Quadrant = Field(
        ...,
        description="Strategic classification bucket"
    )


# =============================================================================
# Dataset Statistics
# =============================================================================


class NormalizationBounds(BaseModel):
    """Per-dataset maxima used to normalize citation and topic counts."""
    model_config = ConfigDict(frozen=True)

    maxCitations: float = Field(default=1.0, ge=1.0)
    maxTopics: float = Field(default=1.0, ge=1.0)


class DatasetThresholds(BaseModel):
    """
    Dataset-relative thresholds driving quadrant classification.

    Sentiment, citation and composite thresholds are on a 0-1 scale;
    mention and share of answer medians are raw percentages.
    """
    model_config = ConfigDict(frozen=True)

    mentionMedian: float = 0.0
    soaMedian: float = 0.0
    sentimentMedian: float = 0.0
    citationsMedian: float = 0.0
    compositeMedian: float = 0.0
    compositeTopQuartile: float = 0.0
    maxCitations: float = 1.0
    maxTopics: float = 1.0


class QuadrantCounts(BaseModel):
    """Number of sources per quadrant; the counts always sum to the dataset size."""
    priority: int = 0
    reputation: int = 0
    growth: int = 0
    monitor: int = 0

    @property
    def total(self) -> int:
        return self.priority + self.reputation + self.growth + self.monitor


# =============================================================================
# Analysis Outputs
# =============================================================================


class CorrelationMatrix(BaseModel):
    """
    Symmetric pairwise Pearson correlation matrix.

    matrix[i][j] is the correlation between labels[i] and labels[j].
    """
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "labels": ["Mention Rate", "SOA", "Sentiment", "Citations"],
                "matrix": [
                    [1.0, 0.82, 0.11, 0.64],
                    [0.82, 1.0, 0.05, 0.58],
                    [0.11, 0.05, 1.0, -0.2],
                    [0.64, 0.58, -0.2, 1.0],
                ],
            }
        }
    )

    labels: List[str] = Field(default_factory=list)
    matrix: List[List[float]] = Field(default_factory=list)


class Takeaway(BaseModel):
    """
    A ranked, natural-language finding about the dataset.

    Takeaways are recomputed fresh on every dataset change.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "issue-sentiment",
                "type": "critical",
                "title": "Negative Sentiment",
                "description": "High-impact sources like reddit.com show negative sentiment.",
                "priority": 10,
                "relatedSources": ["reddit.com"],
            }
        }
    )

    id: str = Field(..., description="Stable rule identifier")
    type: TakeawayType = Field(..., description="Takeaway tone")
    title: str = Field(..., description="Short headline")
    description: str = Field(..., description="One-sentence explanation")
    priority: int = Field(..., description="Ranking priority; higher ranks first")
    relatedSources: Optional[List[str]] = Field(
        default=None,
        description="All sources matching the rule, in rule order"
    )


class ZonedSource(BaseModel):
    """A source placed in the alternate zone view with its 0-100 composite score."""
    model_config = ConfigDict(frozen=True)

    name: str
    sourceType: str
    mentionRate: float
    shareOfAnswer: float
    sentiment: float
    citations: int
    score: float
    zone: Zone


class SourceTypeShare(BaseModel):
    """Count and share of sources for one source type."""
    sourceType: str
    count: int
    percentage: float


class NumericFilter(BaseModel):
    """
    A filter on one numeric column.

    An operator of None means the filter is inactive. For gt/lt/eq the
    `value` is used; for between, `min` and `max` (inclusive).
    """
    column: MetricColumn
    operator: Optional[FilterOperator] = None
    value: Optional[float] = None
    min: Optional[float] = None
    max: Optional[float] = None


# =============================================================================
# Trend Models
# =============================================================================


class SourceTrendPoint(BaseModel):
    """Daily metrics for one source, the input row of trend aggregation."""
    date: DateType
    name: str
    mentionRate: float = 0.0
    shareOfAnswer: float = 0.0
    sentiment: float = 0.0
    citations: float = 0.0


class TrendValue(BaseModel):
    date: DateType
    value: float


class TrendSeries(BaseModel):
    """Date-ordered series of one metric for one selected source."""
    name: str
    metric: MetricColumn
    points: List[TrendValue] = Field(default_factory=list)


# =============================================================================
# Snapshot Models
# =============================================================================


class SnapshotKey(BaseModel):
    """Identity of a dataset snapshot: one brand over one date range."""
    model_config = ConfigDict(frozen=True)

    brandId: str = Field(..., min_length=1)
    startDate: DateType
    endDate: DateType


class SourceAnalysis(BaseModel):
    """Complete analysis bundle for one snapshot."""
    sources: List[ScoredSource] = Field(default_factory=list)
    thresholds: Optional[DatasetThresholds] = None
    quadrantCounts: QuadrantCounts = Field(default_factory=QuadrantCounts)
    correlation: CorrelationMatrix = Field(default_factory=CorrelationMatrix)
    takeaways: List[Takeaway] = Field(default_factory=list)


class SnapshotStatus(BaseModel):
    """
    Scheduler view of one snapshot.

    While pending, `rawSources` holds the unscored rows so callers can render
    immediately; once ready, `analysis` holds the committed bundle.
    """
    key: SnapshotKey
    state: ScoringState
    rawSources: List[SourceMetric] = Field(default_factory=list)
    analysis: Optional[SourceAnalysis] = None


# =============================================================================
# Request Bodies
# =============================================================================


class AnalyzeRequest(BaseModel):
    """Raw upstream source payloads plus the declared sentiment scale."""
    sources: List[Dict[str, Any]] = Field(default_factory=list)
    sentimentScale: Optional[SentimentScale] = None


class TakeawaysRequest(BaseModel):
    """Already scored and classified rows."""
    sources: List[ScoredSource] = Field(default_factory=list)


class FilterRequest(AnalyzeRequest):
    filters: List[NumericFilter] = Field(default_factory=list)


class TrendRequest(BaseModel):
    points: List[SourceTrendPoint] = Field(default_factory=list)
    selected: List[str] = Field(default_factory=list)
    metric: MetricColumn = MetricColumn.MENTION_RATE


class SnapshotRequest(AnalyzeRequest):
    key: SnapshotKey
