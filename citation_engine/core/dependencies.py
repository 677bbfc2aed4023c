"""
FastAPI dependency injection module for the citation analytics backend.

Key Dependencies Provided:
- get_settings_dependency: Returns the cached Settings singleton
- get_scheduler_dependency: Returns the shared DeferredScoringScheduler
- SettingsDep: Type alias for injecting Settings into endpoints
- SchedulerDep: Type alias for injecting the scheduler into endpoints

Both are thin wrappers so tests can replace them through
app.dependency_overrides.

Usage Examples:
    @router.post("/snapshots")
    async def submit_snapshot(
        body: SnapshotRequest,
        scheduler: SchedulerDep,
        settings: SettingsDep
    ) -> SnapshotStatus:
        ...
"""

from typing import Annotated

from fastapi import Depends

from citation_engine.core.config import Settings, get_settings
from citation_engine.core.runtime import get_scheduler
from citation_engine.services.scheduler import DeferredScoringScheduler


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    In tests, override with:

        app.dependency_overrides[get_settings_dependency] = lambda: custom_settings
    """
    return get_settings()


# =============================================================================
# Scheduler Dependency
# =============================================================================

def get_scheduler_dependency() -> DeferredScoringScheduler:
    """Return the process-wide deferred scoring scheduler."""
    return get_scheduler()


# =============================================================================
# Type Aliases for Dependency Injection
# =============================================================================

# Usage: async def endpoint(settings: SettingsDep)
SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]

# Usage: async def endpoint(scheduler: SchedulerDep)
SchedulerDep = Annotated[DeferredScoringScheduler, Depends(get_scheduler_dependency)]
