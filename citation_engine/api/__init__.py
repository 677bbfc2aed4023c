"""
Citation engine API package initialization.

Router modules:
- sources: Scoring, classification, correlation, takeaway, trend and
  deferred snapshot endpoints under /sources
"""

from fastapi import APIRouter

from citation_engine.api.sources import router as sources_router

# Create main API router
api_router = APIRouter()

# The sources router carries its own /sources prefix
api_router.include_router(sources_router)

__all__ = [
    "api_router",
    "sources_router",
]
