"""
Process-wide deferred scoring scheduler.

Holds the single DeferredScoringScheduler shared by all requests, with an
explicit lifecycle driven by the FastAPI lifespan.

Key Components:
- Global scheduler singleton (_scheduler)
- init_scheduler(): Create the scheduler at application startup
- get_scheduler(): Get the scheduler instance (creates it if needed)
- close_scheduler(): Cancel in-flight work at application shutdown

Usage:
    # At application startup (in FastAPI lifespan)
    await init_scheduler()

    # In endpoints
    scheduler = get_scheduler()
    state = await scheduler.submit(key, sources)

    # At application shutdown
    await close_scheduler()
"""

import logging
from typing import Optional

from citation_engine.services.scheduler import DeferredScoringScheduler

logger = logging.getLogger(__name__)


# =============================================================================
# Global Scheduler Singleton
# =============================================================================

# None until init_scheduler() or get_scheduler() is called
_scheduler: Optional[DeferredScoringScheduler] = None


# =============================================================================
# Scheduler Lifecycle Functions
# =============================================================================

async def init_scheduler() -> DeferredScoringScheduler:
    """
    Create the scheduler singleton. Idempotent.

    Delay bounds and cache size come from get_settings().
    """
    global _scheduler

    if _scheduler is None:
        _scheduler = DeferredScoringScheduler()
        logger.info(
            f"Deferred scoring scheduler ready (idle delay {_scheduler.idle_delay_seconds}s, "
            f"max delay {_scheduler.max_delay_seconds}s, cache size {_scheduler.cache_size})"
        )

    return _scheduler


def get_scheduler() -> DeferredScoringScheduler:
    """
    Get the scheduler singleton, creating it if needed.

    Returns:
        DeferredScoringScheduler: The shared scheduler instance.
    """
    global _scheduler

    if _scheduler is None:
        _scheduler = DeferredScoringScheduler()

    return _scheduler


async def close_scheduler() -> None:
    """
    Cancel in-flight work and release the scheduler.

    Safe to call when the scheduler was never created.
    """
    global _scheduler

    if _scheduler is not None:
        await _scheduler.close()
        _scheduler = None
        logger.info("Deferred scoring scheduler closed")
