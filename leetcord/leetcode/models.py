from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional


PROBLEM_URL_TEMPLATE = "https://leetcode.com/problems/{slug}/"


class Difficulty(Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Map any case variant of Easy/Medium/Hard to a member."""
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise ValueError(f"Unknown difficulty: {value!r}")


def problem_url(slug: str) -> str:
    return PROBLEM_URL_TEMPLATE.format(slug=slug)


@dataclass(frozen=True)
class ProblemRecord:
    id: str
    display_id: str
    title: str
    slug: str
    difficulty: Difficulty
    acceptance_rate: float  # percentage, two decimals
    tags: frozenset[str] = frozenset()

    @property
    def url(self) -> str:
        return problem_url(self.slug)

    def has_tag(self, tag: str) -> bool:
        wanted = tag.lower()
        return any(t.lower() == wanted for t in self.tags)


def sorted_categories(tags: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(set(tags), key=lambda t: (t.lower(), t)))


@dataclass(frozen=True)
class CatalogueSnapshot:
    """
    One immutable generation of the catalogue.

    `categories` is always derived from `records`; it is never passed in.
    """

    records: tuple[ProblemRecord, ...] = ()
    last_update: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    categories: tuple[str, ...] = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", tuple(self.records))
        object.__setattr__(
            self,
            "categories",
            sorted_categories(tag for record in self.records for tag in record.tags),
        )

    def __len__(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class ProblemFilter:
    difficulty: Optional[str] = None
    category: Optional[str] = None

    def matches(self, record: ProblemRecord) -> bool:
        if self.difficulty and record.difficulty.value.lower() != self.difficulty.strip().lower():
            return False
        if self.category and not record.has_tag(self.category.strip()):
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.difficulty:
            parts.append(f"difficulty={self.difficulty}")
        if self.category:
            parts.append(f'category="{self.category}"')
        return ", ".join(parts)
