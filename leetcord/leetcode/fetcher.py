"""
leetcord/leetcode/fetcher.py

Downloads the whole LeetCode problem set with one GraphQL request and turns
it into ProblemRecords. Paid-only questions never leave this module.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import httpx

from .errors import UpstreamSchemaMismatch, UpstreamUnavailable
from .models import Difficulty, ProblemRecord


logger = logging.getLogger(__name__)

GRAPHQL_ENDPOINT = "https://leetcode.com/graphql/"
DEFAULT_PAGE_SIZE = 10000
DEFAULT_TIMEOUT_SECONDS = 30.0

PROBLEMSET_QUERY = r"""
query problemsetQuestionListV2($filters: QuestionFilterInput, $limit: Int, $skip: Int) {
  problemsetQuestionListV2(
    filters: $filters
    limit: $limit
    skip: $skip
  ) {
    questions {
      id
      titleSlug
      title
      questionFrontendId
      paidOnly
      difficulty
      topicTags {
        name
        slug
      }
      acRate
    }
    totalLength
  }
}
"""


def build_payload(page_size: int = DEFAULT_PAGE_SIZE) -> dict[str, Any]:
    return {
        "query": PROBLEMSET_QUERY,
        "variables": {
            "skip": 0,
            "limit": page_size,
            "filters": {"filterCombineType": "ALL"},
        },
    }


# ── Schema-checked parsing ──────────────────────────────────────────────────

def _require(question: dict, key: str, types: type | tuple[type, ...], index: int) -> Any:
    if key not in question:
        raise UpstreamSchemaMismatch(f"question[{index}] is missing '{key}'")
    value = question[key]
    # bool is an int subclass
    if not isinstance(value, types) or (isinstance(value, bool) and types is not bool):
        raise UpstreamSchemaMismatch(
            f"question[{index}].{key} has wrong type {type(value).__name__}"
        )
    return value


def _require_text(question: dict, key: str, index: int) -> str:
    value = _require(question, key, (str, int), index)
    text = str(value).strip()
    if not text:
        raise UpstreamSchemaMismatch(f"question[{index}].{key} is empty")
    return text


def _parse_tags(raw_tags: list, index: int) -> frozenset[str]:
    names = set()
    for tag in raw_tags:
        if not isinstance(tag, dict) or not isinstance(tag.get("name"), str):
            raise UpstreamSchemaMismatch(f"question[{index}].topicTags has a malformed tag")
        names.add(tag["name"])
    return frozenset(names)


def normalize_question(question: Any, index: int = 0) -> ProblemRecord | None:
    """
    Parse one upstream question. Returns None for paid-only questions.
    """
    if not isinstance(question, dict):
        raise UpstreamSchemaMismatch(f"question[{index}] is not an object")

    if _require(question, "paidOnly", bool, index):
        return None

    raw_difficulty = _require(question, "difficulty", str, index)
    try:
        difficulty = Difficulty.parse(raw_difficulty)
    except ValueError as e:
        raise UpstreamSchemaMismatch(f"question[{index}]: {e}") from e

    ac_rate = _require(question, "acRate", (int, float), index)
    if not 0 <= ac_rate <= 100:
        raise UpstreamSchemaMismatch(f"question[{index}].acRate {ac_rate} is outside [0, 100]")
    raw_tags = _require(question, "topicTags", list, index)

    return ProblemRecord(
        id=_require_text(question, "id", index),
        display_id=_require_text(question, "questionFrontendId", index),
        title=_require_text(question, "title", index),
        slug=_require_text(question, "titleSlug", index),
        difficulty=difficulty,
        acceptance_rate=round(float(ac_rate), 2),
        tags=_parse_tags(raw_tags, index),
    )


def normalize_questions(questions: Any) -> List[ProblemRecord]:
    """
    Turn the raw `questions` array into free ProblemRecords, preserving order.

    Raises UpstreamSchemaMismatch on the first malformed entry or repeated id.
    """
    if not isinstance(questions, list):
        raise UpstreamSchemaMismatch(
            f"'questions' must be a list, got {type(questions).__name__}"
        )
    records = []
    seen_ids = set()
    for i, question in enumerate(questions):
        record = normalize_question(question, i)
        if record is None:
            continue
        if record.id in seen_ids:
            raise UpstreamSchemaMismatch(f"question[{i}] repeats id {record.id!r}")
        seen_ids.add(record.id)
        records.append(record)
    return records


def extract_questions(body: Any) -> list:
    try:
        listing = body["data"]["problemsetQuestionListV2"]
        questions = listing["questions"]
    except (KeyError, TypeError) as e:
        raise UpstreamSchemaMismatch(f"Unexpected response envelope: missing {e}") from e
    if not isinstance(questions, list):
        raise UpstreamSchemaMismatch(
            f"'questions' must be a list, got {type(questions).__name__}"
        )
    return questions


# ── Fetcher ─────────────────────────────────────────────────────────────────

class CatalogueFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        endpoint: str = GRAPHQL_ENDPOINT,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """
        client    — shared AsyncClient; a short-lived one is opened per fetch if None
        timeout   — wall-clock bound on the whole request, body download included
        """
        self.client = client
        self.endpoint = endpoint
        self.timeout = timeout
        self.page_size = page_size

    async def _post(self, client: httpx.AsyncClient) -> httpx.Response:
        # httpx timeouts are per phase; a slow trickling body would never trip them
        return await asyncio.wait_for(
            client.post(
                self.endpoint,
                json=build_payload(self.page_size),
                headers={"Content-Type": "application/json", "User-Agent": "Mozilla/5.0"},
                timeout=self.timeout,
            ),
            self.timeout,
        )

    async def fetch(self) -> List[ProblemRecord]:
        logger.info("Fetching LeetCode catalogue from %s (limit=%d)", self.endpoint, self.page_size)
        try:
            if self.client is not None:
                response = await self._post(self.client)
            else:
                async with httpx.AsyncClient() as client:
                    response = await self._post(client)
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.error("LeetCode catalogue request timed out after %ss", self.timeout)
            raise UpstreamUnavailable(f"LeetCode API timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            logger.error("LeetCode catalogue request failed: %s", e)
            raise UpstreamUnavailable(f"LeetCode API request failed: {e}") from e

        if not response.is_success:
            logger.error("LeetCode catalogue request returned %s", response.status_code)
            raise UpstreamUnavailable(f"LeetCode API error: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise UpstreamSchemaMismatch("LeetCode API returned a non-JSON body") from e

        questions = extract_questions(body)
        records = normalize_questions(questions)
        logger.info(
            "Fetched %d LeetCode questions, %d free problems kept",
            len(questions),
            len(records),
        )
        return records
