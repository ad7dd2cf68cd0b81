from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .engine import QueryEngine
from .fetcher import CatalogueFetcher
from .models import ProblemFilter, ProblemRecord
from .refresh import DEFAULT_REFRESH_CRON, CatalogueRefresher
from .store import CatalogueStore


logger = logging.getLogger(__name__)


class LeetCodeService:
    """What command handlers see of the problem catalogue."""

    def __init__(self, engine: QueryEngine, refresher: CatalogueRefresher):
        self.engine = engine
        self.refresher = refresher

    def get_random_problem(self, filter: ProblemFilter | None = None) -> Optional[ProblemRecord]:
        return self.engine.random_record(filter)

    def search_categories(self, query: str) -> List[str]:
        return self.engine.suggest_categories(query)

    def get_cache_size(self) -> int:
        return self.engine.current_size()

    @property
    def is_ready(self) -> bool:
        return self.engine.is_ready

    async def force_refresh(self) -> None:
        await self.refresher.refresh()

    async def ensure_ready(self) -> None:
        """Load the catalogue if nothing is served yet; errors propagate."""
        await self.refresher.ensure_ready()

    async def start(self, scheduler: AsyncIOScheduler, cron: str = DEFAULT_REFRESH_CRON) -> None:
        await self.refresher.initialize()
        self.refresher.schedule(scheduler, cron)


def build_leetcode_service(
    config: dict[str, Any],
    client: httpx.AsyncClient | None = None,
) -> LeetCodeService:
    """*config* comes from get_config(), so its leetcode section is complete."""
    lc_cfg = config["leetcode"]
    fetcher = CatalogueFetcher(
        client=client,
        endpoint=lc_cfg["endpoint"],
        timeout=lc_cfg["request_timeout"],
    )
    store = CatalogueStore(lc_cfg["cache_path"])
    engine = QueryEngine()
    return LeetCodeService(engine, CatalogueRefresher(fetcher, store, engine))
