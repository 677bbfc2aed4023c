"""
Enumeration definitions for the citation source analytics backend.

All enums inherit from both `str` and `Enum` to ensure JSON serialization
compatibility with Pydantic models, enabling automatic serialization and
deserialization in API responses.

Enums:
- SourceType: Known categories of citation sources (open set at the boundary)
- Quadrant: Strategic classification bucket assigned per source
- Zone: Alternate four-way zone view of the same dataset
- TakeawayType: Tone of a generated key takeaway
- ScoringState: Lifecycle state of a deferred scoring pass
- SentimentScale: Declared scale of upstream sentiment values
- FilterOperator: Comparison operators for numeric column filters
- MetricColumn: Numeric columns addressable by filters and trend charts
"""

from enum import Enum


class SourceType(str, Enum):
    """
    Known citation source categories.

    Values: ['brand', 'editorial', 'corporate', 'reference', 'ugc', 'institutional']

    The upstream feed may send other category strings. Those are kept as
    plain strings on SourceMetric.sourceType rather than rejected, so this
    enum lists the known values only (used for ordering and inference).
    """
    BRAND = "brand"
    EDITORIAL = "editorial"
    CORPORATE = "corporate"
    REFERENCE = "reference"
    UGC = "ugc"
    INSTITUTIONAL = "institutional"


class Quadrant(str, Enum):
    """
    Strategic classification bucket for a citation source.

    - priority: Strong visibility and share of answer with a top-quartile composite
    - reputation: Visible, but sentiment or citation depth lags the dataset
    - growth: Not yet visible, but sentiment or citations are healthy
    - monitor: Fallback bucket; always reachable
    """
    PRIORITY = "priority"
    REPUTATION = "reputation"
    GROWTH = "growth"
    MONITOR = "monitor"


class Zone(str, Enum):
    """
    Alternate zone classification computed on a 0-100 composite scale.

    - market_leaders: Top-quartile score with healthy sentiment and citations
    - reputation_risks: Above-median visibility or SOA with weak sentiment/citations
    - growth_bets: Mid-band score with good sentiment or citations, low visibility
    - monitor_improve: Everything else
    """
    MARKET_LEADERS = "market_leaders"
    REPUTATION_RISKS = "reputation_risks"
    GROWTH_BETS = "growth_bets"
    MONITOR_IMPROVE = "monitor_improve"


class TakeawayType(str, Enum):
    """
    Tone of a generated key takeaway.

    - critical: Needs attention now (reputation or visibility problems)
    - opportunity: Upside worth pursuing
    - insight: Neutral-to-positive pattern in the data
    - info: Summary or sentinel message
    """
    CRITICAL = "critical"
    OPPORTUNITY = "opportunity"
    INSIGHT = "insight"
    INFO = "info"


class ScoringState(str, Enum):
    """
    Lifecycle state of a snapshot in the deferred scoring scheduler.

    - empty: No data for the snapshot (nothing submitted, or zero sources)
    - pending: Scoring is scheduled or running; the raw view is available
    - ready: Scored and classified results are committed
    - stale: The snapshot was superseded by a newer submission
    """
    EMPTY = "empty"
    PENDING = "pending"
    READY = "ready"
    STALE = "stale"


class SentimentScale(str, Enum):
    """
    Declared scale of sentiment values in an upstream payload.

    - percent: Already on the canonical 0-100 scale
    - signed: Legacy -1..1 scale, converted with (x + 1) * 50
    - auto: Detect signed data when every finite value lies in [-1, 1]
      and at least one value is negative
    """
    PERCENT = "percent"
    SIGNED = "signed"
    AUTO = "auto"


class FilterOperator(str, Enum):
    """Comparison operators for numeric column filters."""
    GT = "gt"
    LT = "lt"
    EQ = "eq"
    BETWEEN = "between"


class MetricColumn(str, Enum):
    """
    Numeric columns of a scored source addressable by filters and trends.

    Values match the camelCase field names on ScoredSource.
    """
    MENTION_RATE = "mentionRate"
    SHARE_OF_ANSWER = "shareOfAnswer"
    SENTIMENT = "sentiment"
    CITATIONS = "citations"
    VALUE_SCORE = "valueScore"
