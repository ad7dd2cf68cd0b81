from __future__ import annotations

import logging
import random
from typing import List, NamedTuple, Optional

from .category_index import MAX_SUGGESTIONS, CategoryIndex
from .models import CatalogueSnapshot, ProblemFilter, ProblemRecord


logger = logging.getLogger(__name__)


class _Served(NamedTuple):
    snapshot: CatalogueSnapshot
    index: CategoryIndex


class QueryEngine:
    """
    Serves lookups against the current snapshot.

    The snapshot and its category index live in one tuple that `swap`
    rebinds only after both are fully built, so a reader always sees a
    matching pair.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.Random()
        self._served: Optional[_Served] = None

    @property
    def is_ready(self) -> bool:
        return self._served is not None

    @property
    def snapshot(self) -> Optional[CatalogueSnapshot]:
        served = self._served
        return served.snapshot if served else None

    def current_size(self) -> int:
        served = self._served
        return len(served.snapshot.records) if served else 0

    def categories(self) -> List[str]:
        served = self._served
        return list(served.index.categories) if served else []

    def random_record(self, filter: ProblemFilter | None = None) -> Optional[ProblemRecord]:
        served = self._served
        if served is None or not served.snapshot.records:
            return None
        records = served.snapshot.records
        if filter is not None:
            records = [r for r in records if filter.matches(r)]
        if not records:
            return None
        return self._rng.choice(records)

    def suggest_categories(self, query: str, limit: int = MAX_SUGGESTIONS) -> List[str]:
        served = self._served
        if served is None:
            return []
        return served.index.search(query, limit)

    def swap(self, snapshot: CatalogueSnapshot) -> None:
        served = _Served(snapshot, CategoryIndex(snapshot.categories))
        self._served = served
        logger.info(
            "Serving %d LeetCode problems across %d categories",
            len(snapshot.records),
            len(served.index),
        )
