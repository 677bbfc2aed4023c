"""
Numeric Column Filters

Applies per-column numeric filters (gt, lt, eq, between) to scored rows.
All active filters must match (AND). Inactive filters (no operator) and
incomplete filters (missing value, or missing min/max for between) are
ignored rather than rejected, matching how the table filter widgets behave
while a user is still typing.
"""

import logging
import math
from typing import List, Optional, Sequence

from citation_engine.models import FilterOperator, NumericFilter, ScoredSource
from citation_engine.services.statistics import finite_or_zero

logger = logging.getLogger(__name__)


# Tolerance for eq, so values shown with two decimals can be matched
EQ_TOLERANCE = 0.005


def is_filter_active(flt: NumericFilter) -> bool:
    if flt.operator is None:
        return False
    if flt.operator == FilterOperator.BETWEEN:
        return flt.min is not None and flt.max is not None
    return flt.value is not None


def matches_filter(source: ScoredSource, flt: NumericFilter) -> bool:
    """
    Check one row against one filter.

    Args:
        source: Scored row
        flt: Filter; inactive filters always match

    Returns:
        True if the row passes
    """
    if not is_filter_active(flt):
        return True

    actual = finite_or_zero(getattr(source, flt.column.value, 0.0))

    if flt.operator == FilterOperator.GT:
        return actual > flt.value
    if flt.operator == FilterOperator.LT:
        return actual < flt.value
    if flt.operator == FilterOperator.EQ:
        return math.isclose(actual, flt.value, abs_tol=EQ_TOLERANCE)

    low, high = sorted((flt.min, flt.max))
    return low <= actual <= high


def apply_numeric_filters(
    sources: Sequence[ScoredSource],
    filters: Optional[Sequence[NumericFilter]] = None,
) -> List[ScoredSource]:
    """
    Keep the rows that pass every active filter, in input order.

    Args:
        sources: Scored rows
        filters: Column filters; None or empty keeps every row

    Returns:
        Filtered rows
    """
    active = [f for f in (filters or []) if is_filter_active(f)]
    if not active:
        return list(sources)

    result = [s for s in sources if all(matches_filter(s, f) for f in active)]
    logger.debug(f"Numeric filters kept {len(result)} of {len(sources)} rows")
    return result


__all__ = [
    "EQ_TOLERANCE",
    "is_filter_active",
    "matches_filter",
    "apply_numeric_filters",
]
