"""
Keeps the QueryEngine's snapshot fresh.

Refresh path: fetch -> persist -> load -> swap. A failed refresh never
touches the snapshot being served.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .engine import QueryEngine
from .errors import CatalogueError, CatalogueNotFound, CorruptData
from .fetcher import CatalogueFetcher
from .models import CatalogueSnapshot
from .store import CatalogueStore


logger = logging.getLogger(__name__)

DEFAULT_REFRESH_CRON = "0 2 * * *"  # daily, 02:00 UTC
JOB_ID = "leetcode_refresh"


class RefreshState(enum.Enum):
    IDLE = "idle"
    REFRESHING = "refreshing"


def parse_cron(expr: str) -> dict[str, Any]:
    parts = expr.split()
    if len(parts) != 5:
        raise ValueError(f"Invalid cron: {expr}")
    minute, hour, day, month, dow = parts
    kwargs: dict[str, Any] = {"second": 0}
    if minute != "*": kwargs["minute"] = minute
    if hour != "*": kwargs["hour"] = hour
    if day != "*": kwargs["day"] = day
    if month != "*": kwargs["month"] = month
    if dow != "*": kwargs["day_of_week"] = dow
    return kwargs


class CatalogueRefresher:
    def __init__(self, fetcher: CatalogueFetcher, store: CatalogueStore, engine: QueryEngine):
        self.fetcher = fetcher
        self.store = store
        self.engine = engine
        self._lock = asyncio.Lock()

    @property
    def state(self) -> RefreshState:
        return RefreshState.REFRESHING if self._lock.locked() else RefreshState.IDLE

    async def initialize(self) -> None:
        """
        Load the persisted catalogue, falling back to a full refresh.
        Leaves the engine unready instead of raising if both fail.
        """
        try:
            snapshot = await asyncio.to_thread(self.store.load)
        except (CatalogueNotFound, CorruptData) as e:
            logger.info("LeetCode cache unusable (%s), refreshing from upstream", e)
        else:
            self.engine.swap(snapshot)
            return

        try:
            await self.refresh()
        except CatalogueError as e:
            logger.error("Initial LeetCode refresh failed, cache is empty: %s", e)

    async def refresh(self) -> CatalogueSnapshot:
        """
        Run the full refresh path. Concurrent callers queue behind the lock.
        Raises CatalogueError subclasses; the served snapshot is untouched then.
        """
        async with self._lock:
            return await self._refresh_locked()

    async def ensure_ready(self) -> None:
        """
        Refresh only if the engine still has nothing to serve once the lock is
        ours. A caller that queued behind an in-flight refresh which succeeded
        returns without fetching again.
        """
        async with self._lock:
            if self.engine.is_ready:
                logger.debug("LeetCode catalogue became ready while waiting, no refresh needed")
                return
            await self._refresh_locked()

    async def _refresh_locked(self) -> CatalogueSnapshot:
        logger.info("LeetCode refresh starting")
        try:
            records = await self.fetcher.fetch()
            await asyncio.to_thread(self.store.persist, CatalogueSnapshot(records=tuple(records)))
            snapshot = await asyncio.to_thread(self.store.load)
        except CatalogueError as e:
            logger.error("LeetCode refresh failed: %s", e)
            raise
        self.engine.swap(snapshot)
        logger.info("LeetCode refresh complete - %d free problems cached", len(snapshot))
        return snapshot

    async def scheduled_refresh(self) -> None:
        logger.info("LeetCode refresh job triggered")
        if self._lock.locked():
            logger.warning("LeetCode refresh already in progress, skipping scheduled run")
            return
        try:
            await self.refresh()
        except CatalogueError:
            logger.warning(
                "Scheduled LeetCode refresh failed; still serving %d cached problems",
                self.engine.current_size(),
            )

    def schedule(self, scheduler: AsyncIOScheduler, cron: str = DEFAULT_REFRESH_CRON) -> None:
        scheduler.add_job(
            self.scheduled_refresh,
            "cron",
            id=JOB_ID,
            replace_existing=True,
            timezone="UTC",
            **parse_cron(cron),
        )
        logger.info("Scheduled LeetCode refresh: %s (UTC)", cron)
