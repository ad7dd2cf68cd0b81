from .category_index import CategoryIndex, MAX_SUGGESTIONS
from .engine import QueryEngine
from .errors import (
    CatalogueError,
    CatalogueNotFound,
    CorruptData,
    PersistenceError,
    UpstreamSchemaMismatch,
    UpstreamUnavailable,
    format_user_friendly_error,
)
from .fetcher import CatalogueFetcher, normalize_questions
from .models import CatalogueSnapshot, Difficulty, ProblemFilter, ProblemRecord
from .refresh import CatalogueRefresher, RefreshState
from .service import LeetCodeService, build_leetcode_service
from .store import CatalogueStore

__all__ = [
    "CategoryIndex",
    "MAX_SUGGESTIONS",
    "QueryEngine",
    "CatalogueError",
    "CatalogueNotFound",
    "CorruptData",
    "PersistenceError",
    "UpstreamSchemaMismatch",
    "UpstreamUnavailable",
    "format_user_friendly_error",
    "CatalogueFetcher",
    "normalize_questions",
    "CatalogueSnapshot",
    "Difficulty",
    "ProblemFilter",
    "ProblemRecord",
    "CatalogueRefresher",
    "RefreshState",
    "LeetCodeService",
    "build_leetcode_service",
    "CatalogueStore",
]
