"""
Source Payload Normalization Service

Converts heterogeneous upstream source payloads into canonical SourceMetric
records. This is the only place where alternate field names, unit scales and
malformed values are handled; the scoring, classification and takeaway
services assume canonical input.

Rules applied at the boundary:
- Field name fallbacks (name/domain/source, soa/shareOfAnswer, ...) are
  resolved once, in FIELD_ALIASES order
- Missing, non-numeric, NaN or infinite numbers become 0
- Negative citation counts become 0; citations are truncated to int
- Names are normalized to bare domains; rows without a name are dropped
- Duplicate names keep the first occurrence
- Unknown source types are kept as lower-cased strings; missing types are
  inferred from the domain
- Sentiment is converted to the 0-100 scale according to the declared
  SentimentScale
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence
from urllib.parse import urlparse

from citation_engine.core.config import get_settings
from citation_engine.models import SentimentScale, SourceMetric, SourceType
from citation_engine.services.statistics import clamp, finite_or_zero, finite_values

# Configure module logger
logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS - Upstream Field Aliases
# First present key wins.
# =============================================================================

FIELD_ALIASES: Dict[str, Sequence[str]] = {
    "name": ("name", "domain", "source", "sourceName", "source_name"),
    "sourceType": ("sourceType", "type", "source_type", "category"),
    "url": ("url", "sourceUrl", "source_url"),
    "mentionRate": ("mentionRate", "mention_rate", "visibility"),
    "mentionChange": ("mentionChange", "mention_change"),
    "shareOfAnswer": ("shareOfAnswer", "soa", "share_of_answer", "shareOfAnswers"),
    "soaChange": ("soaChange", "soa_change", "shareOfAnswerChange"),
    "sentiment": ("sentiment", "sentimentScore", "sentiment_score"),
    "sentimentChange": ("sentimentChange", "sentiment_change"),
    "citations": ("citations", "citationCount", "citation_count", "totalCitations"),
    "topics": ("topics",),
    "prompts": ("prompts", "queries"),
    "pages": ("pages", "topPages", "top_pages"),
}

# Domain fragments used to infer a type when the payload has none
REFERENCE_DOMAIN_HINTS = ("wikipedia", "britannica", "dictionary")
UGC_DOMAIN_HINTS = ("reddit", "twitter", "medium", "github")
INSTITUTIONAL_SUFFIXES = (".edu", ".gov")


# =============================================================================
# FIELD HELPERS
# =============================================================================


def _pick(payload: Mapping[str, Any], field: str) -> Any:
    for key in FIELD_ALIASES[field]:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _as_string_list(value: Any) -> List[str]:
    """Coerce a list-like value to a list of unique non-empty strings, order kept."""
    if value is None or isinstance(value, (str, bytes)):
        return [value] if isinstance(value, str) and value.strip() else []
    if isinstance(value, Mapping):
        value = list(value.keys())
    try:
        items = list(value)
    except TypeError:
        return []
    seen = set()
    result: List[str] = []
    for item in items:
        if item is None:
            continue
        text = str(item).strip()
        if text and text not in seen:
            seen.add(text)
            result.append(text)
    return result


def normalize_domain(value: Optional[str]) -> str:
    """
    Reduce a URL or domain string to a bare lower-case domain.

    Example:
        >>> normalize_domain("https://www.Example.com/path?q=1")
        'example.com'
        >>> normalize_domain("www.reddit.com/r/crm")
        'reddit.com'
        >>> normalize_domain("   ")
        ''
    """
    if not value:
        return ''
    raw = str(value).strip().lower()
    if not raw:
        return ''

    if raw.startswith(('http://', 'https://')):
        try:
            hostname = urlparse(raw).hostname
        except ValueError:
            # Malformed URL (e.g. an unbalanced IPv6 bracket)
            hostname = None
        if hostname:
            raw = hostname
        else:
            raw = raw.split('://', 1)[1]

    if raw.startswith('www.'):
        raw = raw[4:]
    return raw.split('/')[0]


def infer_source_type(domain: str) -> str:
    """
    Infer a source type from its domain when the upstream category is missing.

    Args:
        domain: Normalized domain

    Returns:
        One of the SourceType values; 'editorial' when nothing matches
    """
    lower = domain.lower()
    if any(hint in lower for hint in REFERENCE_DOMAIN_HINTS):
        return SourceType.REFERENCE.value
    if lower.endswith(INSTITUTIONAL_SUFFIXES) or any(f"{s}." in lower for s in INSTITUTIONAL_SUFFIXES):
        return SourceType.INSTITUTIONAL.value
    if any(hint in lower for hint in UGC_DOMAIN_HINTS):
        return SourceType.UGC.value
    return SourceType.EDITORIAL.value


def resolve_sentiment_scale(
    payloads: Sequence[Mapping[str, Any]],
    scale: Optional[SentimentScale] = None,
) -> SentimentScale:
    """
    Resolve AUTO (or None, meaning the configured default) to a concrete scale.

    A dataset is treated as signed when every finite sentiment lies in
    [-1, 1] and at least one is negative. A dataset of values in [0, 1] is
    ambiguous and stays on the percent scale.
    """
    if scale is None:
        scale = get_settings().default_sentiment_scale
    if scale != SentimentScale.AUTO:
        return scale

    values = finite_values(_pick(p, "sentiment") for p in payloads)
    if values and all(-1.0 <= v <= 1.0 for v in values) and any(v < 0 for v in values):
        return SentimentScale.SIGNED
    return SentimentScale.PERCENT


def normalize_sentiment(value: Any, scale: SentimentScale = SentimentScale.PERCENT) -> float:
    """
    Convert a sentiment value to the canonical 0-100 scale.

    Args:
        value: Raw sentiment value
        scale: PERCENT (clamped to 0-100) or SIGNED (-1..1 mapped with (x + 1) * 50)

    Returns:
        Sentiment in [0, 100]; malformed values map to 0
    """
    raw = finite_or_zero(value)
    if scale == SentimentScale.SIGNED:
        raw = (clamp(raw, -1.0, 1.0) + 1.0) * 50.0
    return clamp(raw, 0.0, 100.0)


# =============================================================================
# PAYLOAD NORMALIZATION
# =============================================================================


def normalize_source_payload(
    payload: Mapping[str, Any],
    sentiment_scale: SentimentScale = SentimentScale.PERCENT,
) -> Optional[SourceMetric]:
    """
    Convert one upstream payload into a SourceMetric.

    Args:
        payload: Upstream record with any of the FIELD_ALIASES keys
        sentiment_scale: Concrete scale of the payload's sentiment (not AUTO)

    Returns:
        SourceMetric, or None when the payload has no usable name
    """
    name = normalize_domain(_pick(payload, "name"))
    if not name:
        return None

    raw_type = _pick(payload, "sourceType")
    source_type = str(raw_type).strip().lower() if raw_type is not None else ''
    if not source_type:
        source_type = infer_source_type(name)

    url = _pick(payload, "url")
    citations = int(max(0.0, finite_or_zero(_pick(payload, "citations"))))

    return SourceMetric(
        name=name,
        sourceType=source_type,
        url=str(url) if url else None,
        mentionRate=finite_or_zero(_pick(payload, "mentionRate")),
        mentionChange=finite_or_zero(_pick(payload, "mentionChange")),
        shareOfAnswer=finite_or_zero(_pick(payload, "shareOfAnswer")),
        soaChange=finite_or_zero(_pick(payload, "soaChange")),
        sentiment=normalize_sentiment(_pick(payload, "sentiment"), sentiment_scale),
        sentimentChange=finite_or_zero(_pick(payload, "sentimentChange")),
        citations=citations,
        topics=_as_string_list(_pick(payload, "topics")),
        prompts=_as_string_list(_pick(payload, "prompts")),
        pages=_as_string_list(_pick(payload, "pages")),
    )


def normalize_source_payloads(
    payloads: Iterable[Mapping[str, Any]],
    sentiment_scale: Optional[SentimentScale] = None,
) -> List[SourceMetric]:
    """
    Normalize a snapshot of upstream payloads into unique SourceMetric records.

    Args:
        payloads: Upstream records for one (brand, date range) snapshot
        sentiment_scale: Declared scale; None uses the configured default,
            AUTO detects signed data from the snapshot

    Returns:
        SourceMetric list in input order, without nameless rows or duplicates
    """
    rows = [p for p in payloads if isinstance(p, Mapping)]
    scale = resolve_sentiment_scale(rows, sentiment_scale)

    sources: List[SourceMetric] = []
    seen_names = set()
    dropped = 0
    for payload in rows:
        metric = normalize_source_payload(payload, scale)
        if metric is None:
            dropped += 1
            continue
        if metric.name in seen_names:
            logger.warning(f"Duplicate source '{metric.name}' in snapshot; keeping first occurrence")
            continue
        seen_names.add(metric.name)
        sources.append(metric)

    if dropped:
        logger.warning(f"Dropped {dropped} source payloads without a usable name")

    soa_values = [s.shareOfAnswer for s in sources]
    if soa_values and all(0.0 <= v <= 1.0 for v in soa_values) and any(v > 0 for v in soa_values):
        logger.warning(
            "All share-of-answer values are within [0, 1]; upstream may be sending fractions "
            "instead of percentages"
        )

    logger.debug(f"Normalized {len(sources)} sources (sentiment scale: {scale.value})")
    return sources


__all__ = [
    "FIELD_ALIASES",
    "normalize_domain",
    "infer_source_type",
    "resolve_sentiment_scale",
    "normalize_sentiment",
    "normalize_source_payload",
    "normalize_source_payloads",
]
