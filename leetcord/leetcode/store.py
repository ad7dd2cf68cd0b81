"""
JSON file persistence for catalogue snapshots.

Document layout:

{
    "metadata": {"totalProblems": 3, "lastUpdate": "2025-01-01T02:00:00+00:00"},
    "problems": [
        {"id": "1", "displayId": "1", "title": "Two Sum", "slug": "two-sum",
         "url": "https://leetcode.com/problems/two-sum/", "difficulty": "Easy",
         "acRate": 49.5, "tags": ["Array", "Hash Table"]},
        ...
    ],
    "topics": ["Array", "Hash Table", ...]
}

`acRate` is a percentage rounded to two decimals.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from .errors import CatalogueNotFound, CorruptData, PersistenceError
from .models import CatalogueSnapshot, Difficulty, ProblemRecord, problem_url


logger = logging.getLogger(__name__)

DEFAULT_CACHE_PATH = Path(".cache") / "data.json"


def _problem_to_dict(record: ProblemRecord) -> Dict[str, Any]:
    return {
        "id": record.id,
        "displayId": record.display_id,
        "title": record.title,
        "slug": record.slug,
        "url": record.url,
        "difficulty": record.difficulty.value,
        "acRate": record.acceptance_rate,
        "tags": sorted(record.tags),
    }


def snapshot_to_document(snapshot: CatalogueSnapshot) -> Dict[str, Any]:
    return {
        "metadata": {
            "totalProblems": len(snapshot.records),
            "lastUpdate": snapshot.last_update.isoformat(),
        },
        "problems": [_problem_to_dict(r) for r in snapshot.records],
        "topics": list(snapshot.categories),
    }


# ── Validation ──────────────────────────────────────────────────────────────

def _text(raw: dict, key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str) or not value.strip():
        raise CorruptData(f"{where}.{key} must be a non-empty string")
    return value


def _problem_from_dict(raw: Any, index: int) -> ProblemRecord:
    where = f"problems[{index}]"
    if not isinstance(raw, dict):
        raise CorruptData(f"{where} must be an object, got {type(raw).__name__}")

    slug = _text(raw, "slug", where)
    if raw.get("url") != problem_url(slug):
        raise CorruptData(f"{where}.url does not match slug '{slug}'")

    try:
        difficulty = Difficulty(raw.get("difficulty"))
    except ValueError as e:
        raise CorruptData(f"{where}.difficulty: {e}") from e

    ac_rate = raw.get("acRate")
    if isinstance(ac_rate, bool) or not isinstance(ac_rate, (int, float)):
        raise CorruptData(f"{where}.acRate must be a number")
    if not 0 <= ac_rate <= 100:
        raise CorruptData(f"{where}.acRate out of range: {ac_rate}")

    tags = raw.get("tags")
    if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
        raise CorruptData(f"{where}.tags must be a list of strings")

    return ProblemRecord(
        id=_text(raw, "id", where),
        display_id=_text(raw, "displayId", where),
        title=_text(raw, "title", where),
        slug=slug,
        difficulty=difficulty,
        acceptance_rate=float(ac_rate),
        tags=frozenset(tags),
    )


def snapshot_from_document(doc: Any) -> CatalogueSnapshot:
    """
    Rebuild a snapshot from a decoded document, asserting the shape a
    well-formed fetch would have produced. Raises CorruptData otherwise.
    """
    if not isinstance(doc, dict):
        raise CorruptData(f"Cache root must be an object, got {type(doc).__name__}")

    meta = doc.get("metadata")
    problems = doc.get("problems")
    topics = doc.get("topics")
    if not isinstance(meta, dict):
        raise CorruptData("Missing 'metadata' object")
    if not isinstance(problems, list):
        raise CorruptData("'problems' must be a list")
    if not isinstance(topics, list) or not all(isinstance(t, str) for t in topics):
        raise CorruptData("'topics' must be a list of strings")

    total = meta.get("totalProblems")
    if isinstance(total, bool) or not isinstance(total, int) or total != len(problems):
        raise CorruptData(
            f"metadata.totalProblems ({total!r}) does not match {len(problems)} problems"
        )
    try:
        last_update = datetime.fromisoformat(meta.get("lastUpdate"))
    except (TypeError, ValueError) as e:
        raise CorruptData("metadata.lastUpdate must be an ISO-8601 string") from e

    records = [_problem_from_dict(raw, i) for i, raw in enumerate(problems)]
    ids = [r.id for r in records]
    if len(set(ids)) != len(ids):
        raise CorruptData("Duplicate problem ids in cache")

    snapshot = CatalogueSnapshot(records=tuple(records), last_update=last_update)
    if list(snapshot.categories) != topics:
        raise CorruptData("'topics' does not match the tags of the cached problems")
    return snapshot


# ── Store ───────────────────────────────────────────────────────────────────

class CatalogueStore:
    def __init__(self, path: str | os.PathLike = DEFAULT_CACHE_PATH):
        self.path = Path(path)

    def persist(self, snapshot: CatalogueSnapshot) -> None:
        """
        Write *snapshot* to disk, replacing any previous content.

        A snapshot that load() would reject is refused before the old file is
        touched, so a bad fetch can never clobber a good cache.
        """
        doc = snapshot_to_document(snapshot)
        try:
            snapshot_from_document(doc)
        except CorruptData as e:
            logger.error("Refusing to persist invalid LeetCode catalogue: %s", e)
            raise PersistenceError(f"Snapshot would not load back: {e}") from e

        payload = json.dumps(doc, ensure_ascii=False, indent=2)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to persist LeetCode catalogue to %s: %s", self.path, e)
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e
        logger.info("Persisted %d LeetCode problems to %s", len(snapshot), self.path)

    def load(self) -> CatalogueSnapshot:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            logger.info("No LeetCode cache file at %s", self.path)
            raise CatalogueNotFound(f"No cache file at {self.path}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise CorruptData(f"Could not read {self.path}: {e}") from e

        try:
            doc = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning("LeetCode cache %s is not valid JSON: %s", self.path, e)
            raise CorruptData(f"Invalid JSON in {self.path}: {e}") from e

        try:
            snapshot = snapshot_from_document(doc)
        except CorruptData as e:
            logger.warning("LeetCode cache %s failed validation: %s", self.path, e)
            raise
        logger.info("Loaded %d LeetCode problems from %s", len(snapshot), self.path)
        return snapshot
