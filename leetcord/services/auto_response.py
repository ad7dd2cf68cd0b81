from __future__ import annotations

import random
import re
import unicodedata
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Trigger:
    description: str
    pattern: re.Pattern
    responses: tuple[str, ...]


TRIGGERS: tuple[Trigger, ...] = (
    Trigger(
        description="Greeting",
        pattern=re.compile(r"\b(hello|hi|chao|yo)\b|xin chao", re.IGNORECASE),
        responses=("Chao ban 👋", "Hi hi 😄", "Toi nghe day!", "Hello hello!"),
    ),
)


def normalize(text: str) -> str:
    """Strip diacritics and lowercase, so 'Xin chào' matches 'xin chao'."""
    decomposed = unicodedata.normalize("NFD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.replace("đ", "d").replace("Đ", "D").lower()


def reply_message(content: str, rng: random.Random | None = None) -> Optional[str]:
    content = normalize(content)
    for trigger in TRIGGERS:
        if trigger.pattern.search(content):
            return (rng or random).choice(trigger.responses)
    return None
