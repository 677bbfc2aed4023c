"""
Deferred Scoring Scheduler

Keeps the score-and-classify pass off the request path. A caller submits the
raw rows of a snapshot and gets back immediately; the analysis runs after a
short idle delay in a worker thread, and callers can render the unscored raw
view while the snapshot is pending.

Key Features:
- Generation counter: each submission supersedes the previous one; an
  in-flight job for an older generation is cancelled and its result discarded,
  never merged
- Bounded delay: the idle delay is capped by max_delay_seconds
- Worker offload via asyncio.to_thread so the event loop stays responsive
- LRU memo cache keyed by snapshot identity plus content hash; evicting is
  always safe because the cache is never the source of truth

States (ScoringState):
- empty: nothing submitted for the key, or the snapshot has no sources
- pending: the pass is scheduled or running; raw_view() is available
- ready: the analysis is committed
- stale: another snapshot was submitted after this one

Usage:
    scheduler = DeferredScoringScheduler()
    state = await scheduler.submit(key, sources)
    rows = scheduler.raw_view(key)          # render immediately
    analysis = await scheduler.wait_for(key, timeout=2.0)
    await scheduler.close()
"""

import asyncio
import hashlib
import json
import logging
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from citation_engine.core.config import get_settings
from citation_engine.models import (
    ScoringState,
    SnapshotKey,
    SnapshotStatus,
    SourceAnalysis,
    SourceMetric,
)
from citation_engine.services.analysis import analyze_sources

logger = logging.getLogger(__name__)


CacheKey = Tuple[SnapshotKey, str]
Analyzer = Callable[[Sequence[SourceMetric]], SourceAnalysis]


def snapshot_content_hash(sources: Sequence[SourceMetric]) -> str:
    """Stable hash of a snapshot's rows, order included."""
    payload = json.dumps(
        [s.model_dump(mode="json") for s in sources],
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class ScoringJob:
    """One submitted snapshot and its deferred analysis task."""
    key: SnapshotKey
    generation: int
    sources: List[SourceMetric]
    content_hash: str
    submitted_at: float = field(default_factory=time.monotonic)
    task: Optional["asyncio.Task[None]"] = None
    analysis: Optional[SourceAnalysis] = None
    error: Optional[BaseException] = None


class DeferredScoringScheduler:
    """
    Schedules the analysis of the current snapshot off the request path.

    Only one snapshot is current at a time. All methods must be called from
    the event loop thread; the analysis itself runs in a worker thread and
    touches no scheduler state.
    """

    def __init__(
        self,
        idle_delay_seconds: Optional[float] = None,
        max_delay_seconds: Optional[float] = None,
        cache_size: Optional[int] = None,
        analyzer: Optional[Analyzer] = None,
    ) -> None:
        settings = get_settings()
        self.idle_delay_seconds = (
            settings.idle_delay_seconds if idle_delay_seconds is None else idle_delay_seconds
        )
        self.max_delay_seconds = (
            settings.max_delay_seconds if max_delay_seconds is None else max_delay_seconds
        )
        self.cache_size = settings.cache_size if cache_size is None else cache_size
        self._analyzer: Analyzer = analyzer or analyze_sources

        self._generation = 0
        self._current: Optional[ScoringJob] = None
        self._cache: "OrderedDict[CacheKey, SourceAnalysis]" = OrderedDict()

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def current_key(self) -> Optional[SnapshotKey]:
        return self._current.key if self._current else None

    @property
    def effective_delay(self) -> float:
        """Idle delay before the pass starts, never above max_delay_seconds."""
        return max(0.0, min(self.idle_delay_seconds, self.max_delay_seconds))

    # =========================================================================
    # Submission
    # =========================================================================

    async def submit(self, key: SnapshotKey, sources: Sequence[SourceMetric]) -> ScoringState:
        """
        Make `key` the current snapshot and schedule its analysis.

        Any in-flight job is cancelled; its result will never be committed.

        Args:
            key: Snapshot identity (brand + date range)
            sources: Canonical rows of the snapshot

        Returns:
            EMPTY for a snapshot without rows, READY on a cache hit,
            otherwise PENDING
        """
        self._generation += 1
        self._cancel_current()

        rows = list(sources)
        job = ScoringJob(
            key=key,
            generation=self._generation,
            sources=rows,
            content_hash=snapshot_content_hash(rows),
        )
        self._current = job

        if not rows:
            logger.debug(f"Snapshot {key.brandId} {key.startDate}..{key.endDate} has no sources")
            return ScoringState.EMPTY

        cached = self._cache_get((key, job.content_hash))
        if cached is not None:
            job.analysis = cached
            logger.debug(f"Snapshot cache hit for generation {job.generation}")
            return ScoringState.READY

        job.task = asyncio.get_running_loop().create_task(self._run(job))
        return ScoringState.PENDING

    def _cancel_current(self) -> None:
        job = self._current
        if job is not None and job.task is not None and not job.task.done():
            logger.debug(f"Cancelling superseded scoring job (generation {job.generation})")
            job.task.cancel()

    def _is_current(self, job: ScoringJob) -> bool:
        return job.generation == self._generation and self._current is job

    async def _run(self, job: ScoringJob) -> None:
        try:
            await asyncio.sleep(self.effective_delay)
            if not self._is_current(job):
                return
            analysis = await asyncio.to_thread(self._analyzer, job.sources)
        except asyncio.CancelledError:
            if self._is_current(job):
                raise
            logger.debug(f"Scoring job for generation {job.generation} was superseded")
            return
        except Exception as e:
            logger.error(
                f"Scoring pass failed for {job.key.brandId} (generation {job.generation}): {e}",
                exc_info=True,
            )
            job.error = e
            return

        if not self._is_current(job):
            logger.warning(
                f"Discarding stale scoring result for generation {job.generation} "
                f"(current generation {self._generation})"
            )
            return

        job.analysis = analysis
        self._cache_put((job.key, job.content_hash), analysis)
        elapsed = time.monotonic() - job.submitted_at
        logger.info(
            f"Committed analysis of {len(analysis.sources)} sources for {job.key.brandId} "
            f"{job.key.startDate}..{job.key.endDate} in {elapsed:.3f}s"
        )
        if elapsed > self.max_delay_seconds:
            logger.warning(
                f"Scoring pass exceeded the {self.max_delay_seconds}s latency bound ({elapsed:.3f}s)"
            )

    # =========================================================================
    # Queries
    # =========================================================================

    def _job_for(self, key: SnapshotKey) -> Optional[ScoringJob]:
        if self._current is not None and self._current.key == key:
            return self._current
        return None

    def status(self, key: SnapshotKey) -> ScoringState:
        """Lifecycle state of `key` relative to the current snapshot."""
        if self._current is None:
            return ScoringState.EMPTY
        job = self._job_for(key)
        if job is None:
            return ScoringState.STALE
        if not job.sources or job.error is not None:
            return ScoringState.EMPTY
        if job.analysis is not None:
            return ScoringState.READY
        return ScoringState.PENDING

    def raw_view(self, key: SnapshotKey) -> List[SourceMetric]:
        """Unscored rows of the current snapshot; empty for any other key."""
        job = self._job_for(key)
        return list(job.sources) if job else []

    def result(self, key: SnapshotKey) -> Optional[SourceAnalysis]:
        """Committed analysis of the current snapshot, or None."""
        job = self._job_for(key)
        return job.analysis if job else None

    def snapshot_status(self, key: SnapshotKey) -> SnapshotStatus:
        state = self.status(key)
        return SnapshotStatus(
            key=key,
            state=state,
            rawSources=self.raw_view(key),
            analysis=self.result(key) if state == ScoringState.READY else None,
        )

    async def wait_for(
        self,
        key: SnapshotKey,
        timeout: Optional[float] = None,
    ) -> Optional[SourceAnalysis]:
        """
        Wait for the in-flight analysis of `key`.

        Args:
            key: Snapshot identity
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            The committed analysis, or None if the key is not current, has no
            rows, failed, or was superseded while waiting

        Raises:
            asyncio.TimeoutError: If the analysis is still pending after `timeout`
        """
        job = self._job_for(key)
        if job is None:
            return None
        if job.task is not None and not job.task.done():
            try:
                await asyncio.wait_for(asyncio.shield(job.task), timeout)
            except asyncio.CancelledError:
                # Job cancelled before it started running
                if job.task.cancelled() and not self._is_current(job):
                    return None
                raise
        return self.result(key)

    # =========================================================================
    # Cache
    # =========================================================================

    def _cache_get(self, cache_key: CacheKey) -> Optional[SourceAnalysis]:
        analysis = self._cache.get(cache_key)
        if analysis is not None:
            self._cache.move_to_end(cache_key)
        return analysis

    def _cache_put(self, cache_key: CacheKey, analysis: SourceAnalysis) -> None:
        if self.cache_size <= 0:
            return
        self._cache[cache_key] = analysis
        self._cache.move_to_end(cache_key)
        while len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

    @property
    def cache_len(self) -> int:
        return len(self._cache)

    def clear_cache(self) -> None:
        self._cache.clear()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def close(self) -> None:
        """Cancel any in-flight job and drop all state."""
        self._generation += 1
        job = self._current
        self._cancel_current()
        if job is not None and job.task is not None:
            await asyncio.gather(job.task, return_exceptions=True)
        self._current = None
        self._cache.clear()


__all__ = [
    "snapshot_content_hash",
    "ScoringJob",
    "DeferredScoringScheduler",
]
