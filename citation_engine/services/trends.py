"""
Trend Selection and Aggregation Service

Trend charts plot one metric over time for an explicit, capped set of
selected sources. The selection is an immutable value (TrendSelection) passed
into aggregate_trends() as a parameter; every operation returns a new
selection instead of mutating shared state.

Aggregation uses pandas:
- Rows outside the selection are dropped
- Duplicate rows for the same (date, source) are averaged
- One series per selected source, in selection order, sorted by date
- Selected sources without any rows produce an empty series
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from citation_engine.core.config import get_settings
from citation_engine.models import MetricColumn, SourceTrendPoint, TrendSeries, TrendValue

logger = logging.getLogger(__name__)


# Metrics available on daily trend rows (valueScore is snapshot-only)
TREND_METRICS: Tuple[MetricColumn, ...] = (
    MetricColumn.MENTION_RATE,
    MetricColumn.SHARE_OF_ANSWER,
    MetricColumn.SENTIMENT,
    MetricColumn.CITATIONS,
)


# =============================================================================
# SELECTION
# =============================================================================

@dataclass(frozen=True)
class TrendSelection:
    """
    Ordered, capped set of source names selected for trend charts.

    Adding beyond the limit is rejected: the unchanged selection is returned
    and `at_limit` stays True.
    """
    names: Tuple[str, ...] = ()
    limit: int = field(default_factory=lambda: get_settings().trend_selection_limit)

    @property
    def at_limit(self) -> bool:
        return len(self.names) >= self.limit

    def __contains__(self, name: object) -> bool:
        return name in self.names

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    def add(self, name: str) -> "TrendSelection":
        name = name.strip()
        if not name or name in self.names:
            return self
        if self.at_limit:
            logger.debug(f"Trend selection is at its limit of {self.limit}; ignoring '{name}'")
            return self
        return TrendSelection(names=self.names + (name,), limit=self.limit)

    def remove(self, name: str) -> "TrendSelection":
        if name not in self.names:
            return self
        return TrendSelection(
            names=tuple(n for n in self.names if n != name),
            limit=self.limit,
        )

    def toggle(self, name: str) -> "TrendSelection":
        return self.remove(name) if name in self.names else self.add(name)

    def clear(self) -> "TrendSelection":
        return TrendSelection(names=(), limit=self.limit)

    def select_many(self, names: Iterable[str]) -> "TrendSelection":
        """Add names in order until the limit is reached."""
        selection = self
        for name in names:
            if selection.at_limit:
                break
            selection = selection.add(name)
        return selection

    @classmethod
    def of(cls, names: Iterable[str], limit: Optional[int] = None) -> "TrendSelection":
        empty = cls(limit=limit) if limit is not None else cls()
        return empty.select_many(names)


# =============================================================================
# AGGREGATION
# =============================================================================


def aggregate_trends(
    points: Sequence[SourceTrendPoint],
    selection: Union[TrendSelection, Iterable[str]],
    metric: MetricColumn = MetricColumn.MENTION_RATE,
) -> List[TrendSeries]:
    """
    Build per-source time series of one metric for the selected sources.

    Args:
        points: Daily per-source metric rows
        selection: TrendSelection (or plain names, capped like a selection)
        metric: Metric to plot

    Returns:
        One TrendSeries per selected source, in selection order

    Raises:
        ValueError: If the metric is not available on daily trend rows
    """
    metric = MetricColumn(metric)
    if metric not in TREND_METRICS:
        raise ValueError(f"Metric '{metric.value}' is not available for trends")

    if not isinstance(selection, TrendSelection):
        selection = TrendSelection.of(selection)
    if not selection.names:
        return []

    series = {name: TrendSeries(name=name, metric=metric, points=[]) for name in selection}

    if points:
        df = pd.DataFrame([p.model_dump() for p in points])
        df = df[df['name'].isin(selection.names)].copy()
        if not df.empty:
            df[metric.value] = (
                pd.to_numeric(df[metric.value], errors='coerce')
                .replace([np.inf, -np.inf], np.nan)
                .fillna(0)
            )
            grouped = (
                df.groupby(['name', 'date'], sort=True)[metric.value]
                .mean()
                .reset_index()
            )
            for name, rows in grouped.groupby('name', sort=False):
                series[name] = TrendSeries(
                    name=name,
                    metric=metric,
                    points=[
                        TrendValue(date=row['date'], value=float(row[metric.value]))
                        for _, row in rows.iterrows()
                    ],
                )

    logger.debug(f"Aggregated {metric.value} trends for {len(selection)} sources")
    return [series[name] for name in selection]


__all__ = [
    "TREND_METRICS",
    "TrendSelection",
    "aggregate_trends",
]
