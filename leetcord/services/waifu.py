from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx


logger = logging.getLogger(__name__)

# Only /sfw/ endpoints are ever requested.
BASE_URL = "https://api.waifu.pics/sfw"
SAFE_CATEGORIES = (
    "waifu",
    "neko",
    "shinobu",
    "megumin",
    "bully",
    "cry",
    "hug",
    "smile",
    "kiss",
    "happy",
    "handhold",
    "bite",
    "slap",
)
DEFAULT_CATEGORY = "waifu"


class WaifuError(Exception):
    pass


@dataclass
class WaifuImage:
    category: str
    image_url: str


def validate_category(category: str | None) -> str:
    """Return *category* if it is a safe one, the default otherwise."""
    if not category:
        return DEFAULT_CATEGORY
    normalized = category.strip().lower()
    return normalized if normalized in SAFE_CATEGORIES else DEFAULT_CATEGORY


class WaifuService:
    def __init__(self, client: httpx.AsyncClient, timeout: float = 10.0):
        self.client = client
        self.timeout = timeout

    async def fetch_image(self, category: str | None = None) -> WaifuImage:
        safe_category = validate_category(category)
        url = f"{BASE_URL}/{safe_category}"
        try:
            response = await self.client.get(url, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise WaifuError(f"Waifu API request failed: {e}") from e
        if not response.is_success:
            raise WaifuError(f"Waifu API error: {response.status_code}")

        try:
            image_url = response.json()["url"]
        except (ValueError, KeyError, TypeError) as e:
            raise WaifuError("Waifu API returned an unexpected body") from e
        if not isinstance(image_url, str):
            raise WaifuError("Waifu API returned an unexpected body")

        logger.debug("Fetched %s image: %s", safe_category, image_url)
        return WaifuImage(category=safe_category, image_url=image_url)
