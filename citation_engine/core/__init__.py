"""
Core infrastructure package for the citation analytics backend.

Provides:
- Configuration management via pydantic-settings (config)
- The process-wide deferred scoring scheduler lifecycle (runtime)
- FastAPI dependency injection utilities (dependencies)

Only configuration is re-exported here. The services package imports
citation_engine.core.config, and runtime/dependencies import the services
package, so re-exporting them from this package would create an import
cycle. Import them from their modules:

    from citation_engine.core import get_settings
    from citation_engine.core.runtime import init_scheduler, close_scheduler
    from citation_engine.core.dependencies import SettingsDep, SchedulerDep
"""

from citation_engine.core.config import Settings, get_settings

__all__ = [
    'Settings',
    'get_settings',
]
