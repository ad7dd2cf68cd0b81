from __future__ import annotations

from typing import Iterable, List

from rapidfuzz import fuzz, process, utils

from .models import sorted_categories


MAX_SUGGESTIONS = 25  # Discord autocomplete limit
SCORE_CUTOFF = 60


class CategoryIndex:
    """
    Fuzzy lookup over the distinct topic tags of one snapshot.

    Exact (case-insensitive) matches rank first, then partial-ratio matches
    by score, ties broken by overall similarity and then alphabetically.
    """

    def __init__(self, categories: Iterable[str] = ()):
        self.categories: tuple[str, ...] = sorted_categories(categories)
        self._processed = [utils.default_process(c) for c in self.categories]

    def __len__(self) -> int:
        return len(self.categories)

    def search(self, query: str, limit: int = MAX_SUGGESTIONS) -> List[str]:
        limit = min(limit, MAX_SUGGESTIONS)
        if limit <= 0:
            return []
        if not query or not query.strip():
            return list(self.categories[:limit])

        wanted = query.strip().lower()
        exact = [c for c in self.categories if c.lower() == wanted]

        processed_query = utils.default_process(query)
        matches = process.extract(
            processed_query,
            self._processed,
            scorer=fuzz.partial_ratio,
            processor=None,
            limit=None,
            score_cutoff=SCORE_CUTOFF,
        )
        ranked = sorted(
            (m for m in matches if self.categories[m[2]] not in exact),
            key=lambda m: (-m[1], -fuzz.ratio(processed_query, m[0]), m[2]),
        )
        return (exact + [self.categories[m[2]] for m in ranked])[:limit]
