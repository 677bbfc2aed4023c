"""
Key Takeaway Generator

A small rule engine that inspects a scored and classified dataset and
produces a short, ranked, deduplicated list of natural-language findings.

Candidate rules (priority in parentheses, higher ranks first):
- info        Snapshot (5): overall sentiment health, always emitted
- insight     Strong Visibility (5) / critical Reputation Risk (6) /
  opportunity Growth Potential (6): quadrant dominance above 40% share,
  at most one, checked priority -> reputation -> growth
- critical    Negative Sentiment (10): valueScore > 60 and sentiment < 40
- critical    Declining Visibility (9): mentionChange < -10
- critical    Conversion Gap (8): mentionRate > 40 and shareOfAnswer < 15
- opportunity Rising Stars (9): growth/monitor sources gaining > 10 points
- opportunity Sentiment Leaders (7): sentiment > 85 and mentionRate < 30,
  only when Rising Stars did not fire
- insight     Category Strength (6): best source type (2+ members) beats the
  dataset average value score by at least 25%

Selection:
1. The highest-priority critical candidate, else the highest-priority opportunity
2. The next highest-priority non-info candidate
3. The info snapshot while fewer than 3 are chosen
4. Fill from the remaining candidates up to 3; truncate to 4

The generator never raises. Missing deltas are 0 and simply suppress the
rules that depend on them. Takeaways are recomputed on every call.
"""

import logging
import math
from typing import Callable, Dict, List, Optional, Sequence

from citation_engine.core.config import Settings, get_settings
from citation_engine.models import Quadrant, ScoredSource, Takeaway, TakeawayType
from citation_engine.services.classification import count_quadrants
from citation_engine.services.scoring import normalized_sentiment
from citation_engine.services.statistics import finite_or_zero, mean

logger = logging.getLogger(__name__)


# Number of offending source names quoted in a description
NAMES_IN_DESCRIPTION = 2

NO_DATA_TAKEAWAY = Takeaway(
    id="no-data",
    type=TakeawayType.INFO,
    title="Insufficient Data",
    description=(
        "Not enough data to generate takeaways. "
        "Check back after more citations are collected."
    ),
    priority=1,
)


# =============================================================================
# HELPERS
# =============================================================================


def _round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (dashboard rounding)."""
    return int(math.floor(value + 0.5))


def _quoted_names(sources: Sequence[ScoredSource]) -> str:
    return ", ".join(s.name for s in sources[:NAMES_IN_DESCRIPTION])


def _matching_sources(
    sources: Sequence[ScoredSource],
    predicate: Callable[[ScoredSource], bool],
    sort_key: Callable[[ScoredSource], float],
    descending: bool = True,
) -> List[ScoredSource]:
    matches = [s for s in sources if predicate(s)]
    return sorted(matches, key=sort_key, reverse=descending)


def _issue_takeaway(
    takeaway_id: str,
    takeaway_type: TakeawayType,
    title: str,
    description: str,
    priority: int,
    matches: Sequence[ScoredSource],
) -> Takeaway:
    return Takeaway(
        id=takeaway_id,
        type=takeaway_type,
        title=title,
        description=description,
        priority=priority,
        relatedSources=[s.name for s in matches],
    )


# =============================================================================
# CANDIDATE RULES
# =============================================================================


def _health_takeaway(sources: Sequence[ScoredSource], settings: Settings) -> Takeaway:
    avg_sentiment = mean(normalized_sentiment(s) for s in sources)

    label = "Moderate"
    if avg_sentiment >= settings.health_strong_sentiment:
        label = "Strong"
    elif avg_sentiment < settings.health_concerning_sentiment:
        label = "Concerning"

    return Takeaway(
        id="summary-health",
        type=TakeawayType.INFO,
        title="Snapshot",
        description=(
            f"Across {len(sources)} sources, your brand maintains {label.lower()} "
            f"sentiment (Avg: {_round_half_up(avg_sentiment)})."
        ),
        priority=5,
    )


def _dominance_takeaway(
    sources: Sequence[ScoredSource],
    settings: Settings,
) -> Optional[Takeaway]:
    counts = count_quadrants(sources)
    total = len(sources)

    def share(count: int) -> float:
        return count / total

    def pct(count: int) -> int:
        return _round_half_up(share(count) * 100)

    if share(counts.priority) > settings.dominance_share:
        return Takeaway(
            id="dom-priority",
            type=TakeawayType.INSIGHT,
            title="Strong Visibility",
            description=(
                f"{pct(counts.priority)}% of your sources are 'Priority Partnerships', "
                f"indicating strong all-around performance."
            ),
            priority=5,
        )
    if share(counts.reputation) > settings.dominance_share:
        return Takeaway(
            id="dom-reputation",
            type=TakeawayType.CRITICAL,
            title="Reputation Risk",
            description=(
                f"{pct(counts.reputation)}% of sources are in 'Reputation Management', "
                f"meaning high visibility but lower sentiment/citations."
            ),
            priority=6,
        )
    if share(counts.growth) > settings.dominance_share:
        return Takeaway(
            id="dom-growth",
            type=TakeawayType.OPPORTUNITY,
            title="Growth Potential",
            description=(
                f"{pct(counts.growth)}% of sources are 'Growth Opportunities'. "
                f"You have good sentiment but need more visibility."
            ),
            priority=6,
        )
    return None


def _category_strength_takeaway(
    sources: Sequence[ScoredSource],
    settings: Settings,
) -> Optional[Takeaway]:
    by_type: Dict[str, List[float]] = {}
    for source in sources:
        by_type.setdefault(source.sourceType, []).append(finite_or_zero(source.valueScore))

    best_type = ""
    best_avg = 0.0
    for source_type, scores in by_type.items():
        avg = sum(scores) / len(scores)
        if avg > best_avg and len(scores) > 1:
            best_avg = avg
            best_type = source_type

    overall_avg = mean(finite_or_zero(s.valueScore) for s in sources)
    if not best_type or overall_avg <= 0:
        return None
    if best_avg < overall_avg * settings.category_strength_uplift:
        return None

    return Takeaway(
        id="insight-category",
        type=TakeawayType.INSIGHT,
        title="Category Strength",
        description=(
            f"Your brand performs exceptionally well in '{best_type[:1].upper()}{best_type[1:]}' "
            f"sources compared to other channels."
        ),
        priority=6,
    )


def build_takeaway_candidates(
    sources: Sequence[ScoredSource],
    settings: Optional[Settings] = None,
) -> List[Takeaway]:
    """
    Evaluate every rule and return all candidates, unranked.

    Args:
        sources: Non-empty scored and classified dataset
        settings: Cutoff overrides

    Returns:
        Candidate takeaways in rule order
    """
    settings = settings or get_settings()
    candidates: List[Takeaway] = [_health_takeaway(sources, settings)]

    dominance = _dominance_takeaway(sources, settings)
    if dominance:
        candidates.append(dominance)

    # CRITICAL: High value sources with negative sentiment
    negative = _matching_sources(
        sources,
        lambda s: (
            finite_or_zero(s.valueScore) > settings.negative_sentiment_min_value
            and normalized_sentiment(s) < settings.negative_sentiment_max_sentiment
        ),
        lambda s: finite_or_zero(s.valueScore),
    )
    if negative:
        candidates.append(_issue_takeaway(
            "issue-sentiment",
            TakeawayType.CRITICAL,
            "Negative Sentiment",
            f"High-impact sources like {_quoted_names(negative)} show negative sentiment. "
            f"Prioritize reputation management here.",
            10,
            negative,
        ))

    # CRITICAL: Dropping visibility, most negative change first
    dropping = _matching_sources(
        sources,
        lambda s: finite_or_zero(s.mentionChange) < settings.declining_visibility_change,
        lambda s: finite_or_zero(s.mentionChange),
        descending=False,
    )
    if dropping:
        candidates.append(_issue_takeaway(
            "issue-visibility",
            TakeawayType.CRITICAL,
            "Declining Visibility",
            f"Visibility is dropping on: {_quoted_names(dropping)}. "
            f"Mentions decreased significantly this period.",
            9,
            dropping,
        ))

    # CRITICAL: Mentioned often but rarely the answer
    gap = _matching_sources(
        sources,
        lambda s: (
            finite_or_zero(s.mentionRate) > settings.conversion_gap_min_mention
            and finite_or_zero(s.shareOfAnswer) < settings.conversion_gap_max_soa
        ),
        lambda s: finite_or_zero(s.mentionRate),
    )
    if gap:
        candidates.append(_issue_takeaway(
            "issue-conversion",
            TakeawayType.CRITICAL,
            "Conversion Gap",
            f"High mention rate but low Share of Answer on: {_quoted_names(gap)}. "
            f"Review content alignment to improve citations.",
            8,
            gap,
        ))

    # OPPORTUNITY: Lower-quadrant sources with momentum
    rising = _matching_sources(
        sources,
        lambda s: (
            s.quadrant in (Quadrant.GROWTH, Quadrant.MONITOR)
            and (
                finite_or_zero(s.mentionChange) > settings.rising_star_min_change
                or finite_or_zero(s.soaChange) > settings.rising_star_min_change
            )
        ),
        lambda s: max(finite_or_zero(s.mentionChange), finite_or_zero(s.soaChange)),
    )
    if rising:
        candidates.append(_issue_takeaway(
            "opp-rising",
            TakeawayType.OPPORTUNITY,
            "Rising Stars",
            f"Momentum detected: {_quoted_names(rising)} are showing rapid growth metrics. "
            f"Consider targeted partnerships.",
            9,
            rising,
        ))

    # OPPORTUNITY: Positive but barely visible; suppressed by Rising Stars
    leaders = _matching_sources(
        sources,
        lambda s: (
            normalized_sentiment(s) > settings.sentiment_leader_min_sentiment
            and finite_or_zero(s.mentionRate) < settings.sentiment_leader_max_mention
        ),
        normalized_sentiment,
    )
    if leaders and not rising:
        candidates.append(_issue_takeaway(
            "opp-sentiment",
            TakeawayType.OPPORTUNITY,
            "Sentiment Leaders",
            f"{_quoted_names(leaders)} host positive content but have low visibility. "
            f"Explore ways to boost traffic.",
            7,
            leaders,
        ))

    category = _category_strength_takeaway(sources, settings)
    if category:
        candidates.append(category)

    return candidates


# =============================================================================
# SELECTION
# =============================================================================


def select_takeaways(
    candidates: Sequence[Takeaway],
    settings: Optional[Settings] = None,
) -> List[Takeaway]:
    """
    Rank candidates and pick the final list.

    Sorting is stable, so candidates of equal priority keep rule order.
    """
    settings = settings or get_settings()
    ranked = sorted(candidates, key=lambda c: c.priority, reverse=True)
    chosen: List[Takeaway] = []

    def first(predicate: Callable[[Takeaway], bool]) -> Optional[Takeaway]:
        for candidate in ranked:
            if not any(c is candidate for c in chosen) and predicate(candidate):
                return candidate
        return None

    lead = first(lambda c: c.type == TakeawayType.CRITICAL)
    if lead is None:
        lead = first(lambda c: c.type == TakeawayType.OPPORTUNITY)
    if lead is not None:
        chosen.append(lead)

    next_best = first(lambda c: c.type != TakeawayType.INFO)
    if next_best is not None:
        chosen.append(next_best)

    summary = first(lambda c: c.type == TakeawayType.INFO)
    if summary is not None and len(chosen) < settings.min_takeaways:
        chosen.append(summary)

    while len(chosen) < settings.min_takeaways:
        filler = first(lambda c: True)
        if filler is None:
            break
        chosen.append(filler)

    return chosen[:settings.max_takeaways]


def generate_takeaways(
    sources: Sequence[ScoredSource],
    settings: Optional[Settings] = None,
) -> List[Takeaway]:
    """
    Generate the ranked key takeaways for a scored dataset.

    Args:
        sources: Scored and classified sources of one snapshot
        settings: Cutoff overrides

    Returns:
        Between 1 and 4 takeaways; exactly the 'no-data' takeaway for an
        empty dataset
    """
    if not sources:
        return [NO_DATA_TAKEAWAY]

    candidates = build_takeaway_candidates(sources, settings)
    selected = select_takeaways(candidates, settings)
    logger.debug(
        f"Generated {len(candidates)} takeaway candidates, selected "
        f"{[t.id for t in selected]}"
    )
    return selected


__all__ = [
    "NO_DATA_TAKEAWAY",
    "build_takeaway_candidates",
    "select_takeaways",
    "generate_takeaways",
]
