"""
Settings and environment management module for the citation analytics backend.

This module provides centralized configuration management using pydantic-settings,
which automatically loads settings from environment variables and .env files.

Key Features:
- Environment variable validation and type coercion
- Defaults that reproduce the dashboard's fixed scoring policy
- Singleton pattern via @lru_cache for efficient access

Environment Variables (all optional, prefix CITATION_):
- CITATION_VALUE_WEIGHT_MENTION etc.: Value score weights
- CITATION_COMPOSITE_WEIGHT_MENTION etc.: Classification composite weights
- CITATION_TREND_SELECTION_LIMIT: Maximum sources selectable for trend charts
- CITATION_IDLE_DELAY_SECONDS / CITATION_MAX_DELAY_SECONDS: Deferred scoring bounds
- CITATION_CACHE_SIZE: Number of snapshot analyses kept in memory

Usage:
    from citation_engine.core.config import get_settings

    settings = get_settings()
    weight = settings.value_weight_mention
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from citation_engine.models.enums import SentimentScale


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Scoring weights and insight cutoffs are policy constants. They can be
    overridden through the environment, but the defaults are the values the
    dashboard has always shipped with; changing them changes product behavior.

    Attributes:
        value_weight_*: Weights of the five value score components.
        composite_weight_*: Weights of the classification-only composite.
        top_quartile_percentile: Percentile used for the composite "strong" cut.
        dominance_share: Quadrant share above which a dominance takeaway fires.
        negative_sentiment_min_value / negative_sentiment_max_sentiment:
            Negative Sentiment rule cutoffs.
        declining_visibility_change: Mention change below which visibility is declining.
        conversion_gap_min_mention / conversion_gap_max_soa: Conversion Gap cutoffs.
        rising_star_min_change: Mention or SOA change above which a source is rising.
        sentiment_leader_min_sentiment / sentiment_leader_max_mention:
            Sentiment Leaders cutoffs.
        category_strength_uplift: Ratio over the dataset average for Category Strength.
        health_strong_sentiment / health_concerning_sentiment: Snapshot health labels.
        max_takeaways / min_takeaways: Bounds on the final takeaway list.
        trend_selection_limit: Maximum number of sources in a trend selection.
        idle_delay_seconds: Delay before the deferred scoring pass starts.
        max_delay_seconds: Upper bound on the scheduling delay.
        cache_size: Number of snapshot analyses kept in the memo cache.
        default_sentiment_scale: Scale assumed for upstream sentiment values.
    """

    model_config = SettingsConfigDict(
        env_prefix='CITATION_',
        env_file='.env',
        env_file_encoding='utf-8',
        extra='ignore',
        case_sensitive=False,
    )

    # =========================================================================
    # Value Score Weights
    # =========================================================================

    value_weight_mention: float = 0.30
    value_weight_soa: float = 0.30
    value_weight_sentiment: float = 0.20
    value_weight_citations: float = 0.10
    value_weight_topics: float = 0.10

    # =========================================================================
    # Classification Composite Weights
    # Deliberately distinct from the value score weights.
    # =========================================================================

    composite_weight_mention: float = 0.35
    composite_weight_soa: float = 0.35
    composite_weight_sentiment: float = 0.20
    composite_weight_citations: float = 0.10

    top_quartile_percentile: float = 75.0

    # =========================================================================
    # Takeaway Rule Cutoffs
    # =========================================================================

    dominance_share: float = 0.40
    negative_sentiment_min_value: float = 60.0
    negative_sentiment_max_sentiment: float = 40.0
    declining_visibility_change: float = -10.0
    conversion_gap_min_mention: float = 40.0
    conversion_gap_max_soa: float = 15.0
    rising_star_min_change: float = 10.0
    sentiment_leader_min_sentiment: float = 85.0
    sentiment_leader_max_mention: float = 30.0
    category_strength_uplift: float = 1.25
    health_strong_sentiment: float = 80.0
    health_concerning_sentiment: float = 50.0
    max_takeaways: int = 4
    min_takeaways: int = 3

    # =========================================================================
    # Trend Selection
    # =========================================================================

    trend_selection_limit: int = 10

    # =========================================================================
    # Deferred Scoring Scheduler
    # =========================================================================

    idle_delay_seconds: float = 0.05
    max_delay_seconds: float = 1.5
    cache_size: int = 32

    # =========================================================================
    # Input Normalization
    # =========================================================================

    default_sentiment_scale: SentimentScale = SentimentScale.PERCENT


@lru_cache()
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Returns:
        Settings: The cached settings instance.

    Raises:
        pydantic.ValidationError: If an environment override has an invalid value.

    Note:
        To refresh settings in tests, clear the cache:
        >>> get_settings.cache_clear()
    """
    return Settings()
