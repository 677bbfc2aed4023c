"""
FastAPI router module for citation source analytics endpoints.

This module is a plain-data adapter for the presentation layer. Every
endpoint takes raw upstream source payloads (or already scored rows), runs
the pure services and returns structured data for tables and charts.

Endpoints:
- POST /sources/analyze: Full analysis bundle (scored rows, thresholds,
  quadrant counts, correlation matrix, takeaways)
- POST /sources/score: Scored and classified rows
- POST /sources/correlations: Metric correlation matrix
- POST /sources/takeaways: Key takeaways for scored rows
- POST /sources/zones: Zone view of the dataset
- POST /sources/distribution: Source type distribution
- POST /sources/filter: Scored rows matching numeric column filters
- POST /sources/trends: Trend series for a capped source selection
- POST /sources/snapshots: Schedule deferred scoring of a snapshot
- GET /sources/snapshots/status: State of a scheduled snapshot

Validation errors return 422 (FastAPI default). Unexpected failures are
logged and returned as 500.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, HTTPException, Query

from citation_engine.core.dependencies import SchedulerDep, SettingsDep
from citation_engine.models import (
    AnalyzeRequest,
    CorrelationMatrix,
    FilterRequest,
    ScoredSource,
    SnapshotKey,
    SnapshotRequest,
    SnapshotStatus,
    SourceAnalysis,
    SourceTypeShare,
    Takeaway,
    TakeawaysRequest,
    TrendRequest,
    TrendSeries,
    ZonedSource,
)
from citation_engine.services.analysis import analyze_sources, source_type_distribution
from citation_engine.services.classification import classify_zones, score_and_classify
from citation_engine.services.correlation import calculate_correlation_matrix
from citation_engine.services.filters import apply_numeric_filters
from citation_engine.services.normalization import normalize_source_payloads
from citation_engine.services.takeaways import generate_takeaways
from citation_engine.services.trends import TrendSelection, aggregate_trends

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sources", tags=["sources"])


# =============================================================================
# Analysis Endpoints
# =============================================================================


@router.post("/analyze", response_model=SourceAnalysis)
async def analyze(body: AnalyzeRequest, settings: SettingsDep) -> SourceAnalysis:
    """
    Run the complete analysis of one snapshot.

    An empty source list is not an error: it yields no rows, an empty
    correlation matrix and the single 'no-data' takeaway.

    Raises:
        HTTPException 500: If analysis computation fails
    """
    try:
        return analyze_sources(
            body.sources, body.sentimentScale or settings.default_sentiment_scale, settings
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error analyzing sources: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error analyzing sources: {str(e)}",
        )


@router.post("/score", response_model=List[ScoredSource])
async def score(body: AnalyzeRequest, settings: SettingsDep) -> List[ScoredSource]:
    """Score and classify the snapshot; valueScore and quadrant come from one pass."""
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        return score_and_classify(metrics, settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error scoring sources: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error scoring sources: {str(e)}",
        )


@router.post("/correlations", response_model=CorrelationMatrix)
async def correlations(body: AnalyzeRequest, settings: SettingsDep) -> CorrelationMatrix:
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        return calculate_correlation_matrix(metrics)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing correlation matrix: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing correlation matrix: {str(e)}",
        )


@router.post("/takeaways", response_model=List[Takeaway])
async def takeaways(body: TakeawaysRequest, settings: SettingsDep) -> List[Takeaway]:
    """
    Generate key takeaways for rows that are already scored and classified.

    Returns between 1 and 4 takeaways.
    """
    try:
        return generate_takeaways(body.sources, settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating takeaways: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error generating takeaways: {str(e)}",
        )


@router.post("/zones", response_model=List[ZonedSource])
async def zones(body: AnalyzeRequest, settings: SettingsDep) -> List[ZonedSource]:
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        return classify_zones(metrics, settings)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error classifying zones: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error classifying zones: {str(e)}",
        )


@router.post("/distribution", response_model=List[SourceTypeShare])
async def distribution(body: AnalyzeRequest, settings: SettingsDep) -> List[SourceTypeShare]:
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        return source_type_distribution(metrics)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error computing source type distribution: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error computing source type distribution: {str(e)}",
        )


# =============================================================================
# Table and Trend Endpoints
# =============================================================================


@router.post("/filter", response_model=List[ScoredSource])
async def filter_sources(body: FilterRequest, settings: SettingsDep) -> List[ScoredSource]:
    """
    Score the snapshot, then keep the rows matching every active filter.

    Filters apply after scoring so thresholds always reflect the full dataset.
    """
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        return apply_numeric_filters(score_and_classify(metrics, settings), body.filters)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error filtering sources: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error filtering sources: {str(e)}",
        )


@router.post("/trends", response_model=List[TrendSeries])
async def trends(body: TrendRequest, settings: SettingsDep) -> List[TrendSeries]:
    """
    Build trend series for the selected sources.

    Selections longer than the configured limit are truncated in order.

    Raises:
        HTTPException 400: If the metric is not available on daily rows
        HTTPException 500: If aggregation fails
    """
    try:
        selection = TrendSelection.of(body.selected, limit=settings.trend_selection_limit)
        return aggregate_trends(body.points, selection, body.metric)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error aggregating trends: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error aggregating trends: {str(e)}",
        )


# =============================================================================
# Deferred Scoring Endpoints
# =============================================================================


@router.post("/snapshots", response_model=SnapshotStatus)
async def submit_snapshot(
    body: SnapshotRequest,
    scheduler: SchedulerDep,
    settings: SettingsDep,
) -> SnapshotStatus:
    """
    Make the posted snapshot current and schedule its analysis.

    Returns immediately with the state and the unscored raw rows; poll
    /sources/snapshots/status for the committed analysis.
    """
    try:
        metrics = normalize_source_payloads(
            body.sources, body.sentimentScale or settings.default_sentiment_scale
        )
        await scheduler.submit(body.key, metrics)
        return scheduler.snapshot_status(body.key)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error scheduling snapshot {body.key.brandId}: {e}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Error scheduling snapshot: {str(e)}",
        )


@router.get("/snapshots/status", response_model=SnapshotStatus)
async def snapshot_status(
    scheduler: SchedulerDep,
    brand_id: str = Query(..., alias="brandId", min_length=1),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
) -> SnapshotStatus:
    """
    State of a snapshot: empty, pending (raw rows only), ready (with
    analysis) or stale (superseded by a newer snapshot).
    """
    key = SnapshotKey(brandId=brand_id, startDate=start_date, endDate=end_date)
    return scheduler.snapshot_status(key)
