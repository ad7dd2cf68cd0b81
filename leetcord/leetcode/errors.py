from __future__ import annotations


class CatalogueError(Exception):
    """Base error for problem catalogue failures."""


class UpstreamUnavailable(CatalogueError):
    pass


class UpstreamSchemaMismatch(CatalogueError):
    pass


class PersistenceError(CatalogueError):
    pass


class CatalogueNotFound(CatalogueError):
    pass


class CorruptData(CatalogueError):
    pass


NO_DATA_MESSAGE = "❌ No LeetCode problems available yet. Please try again later."
NO_MATCH_MESSAGE = "❌ No LeetCode problems found matching: {filters}"


def format_user_friendly_error(error: Exception) -> str:
    """
    Short, safe error message suitable for end users.
    """
    if isinstance(error, UpstreamUnavailable):
        return "❌ Failed to fetch LeetCode problems: LeetCode is not reachable right now."
    if isinstance(error, UpstreamSchemaMismatch):
        return "❌ Failed to fetch LeetCode problems: LeetCode returned an unexpected response."
    if isinstance(error, PersistenceError):
        return "❌ Failed to save LeetCode problems, please notify an admin."
    if isinstance(error, (CatalogueNotFound, CorruptData)):
        return NO_DATA_MESSAGE
    return "❌ Failed to fetch LeetCode problems due to an unexpected error."
