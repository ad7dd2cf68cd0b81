"""
Loads config.yaml, validates it, and fills in the leetcode defaults.

Relative paths inside the file (leetcode.cache_path) are resolved against the
directory the config file lives in, not the process working directory.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml

from ..leetcode.fetcher import DEFAULT_TIMEOUT_SECONDS, GRAPHQL_ENDPOINT
from ..leetcode.refresh import DEFAULT_REFRESH_CRON
from ..leetcode.store import DEFAULT_CACHE_PATH
from .validator import validate_config, ConfigValidationError


DEFAULT_CONFIG_FILE = "config.yaml"
CONFIG_ENV_VAR = "CONFIG_PATH"

LEETCODE_DEFAULTS: dict[str, Any] = {
    "cache_path": str(DEFAULT_CACHE_PATH),
    "refresh_cron": DEFAULT_REFRESH_CRON,
    "request_timeout": DEFAULT_TIMEOUT_SECONDS,
    "endpoint": GRAPHQL_ENDPOINT,
}


def get_config_path() -> Path:
    """CONFIG_PATH wins over ./config.yaml."""
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE)


def _read_yaml(cfg_path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    except FileNotFoundError:
        logging.error("Config file not found: %s", cfg_path)
        sys.exit(1)
    except yaml.YAMLError as e:
        logging.error("YAML parsing error in %s: %s", cfg_path, e)
        sys.exit(1)

    if not isinstance(data, dict):
        logging.error("Config root must be a mapping, got %s", type(data).__name__)
        sys.exit(1)
    return data


def apply_defaults(cfg: dict[str, Any], cfg_path: Path) -> dict[str, Any]:
    """
    Merge LEETCODE_DEFAULTS under cfg["leetcode"] and anchor a relative
    cache_path at the config file's directory. Mutates and returns cfg.
    """
    leetcode = {**LEETCODE_DEFAULTS, **(cfg.get("leetcode") or {})}
    cache_path = Path(leetcode["cache_path"])
    if not cache_path.is_absolute():
        cache_path = cfg_path.resolve().parent / cache_path
    leetcode["cache_path"] = str(cache_path)
    cfg["leetcode"] = leetcode
    cfg.setdefault("auto_response", True)
    return cfg


def get_config(path: str | os.PathLike | None = None) -> dict[str, Any]:
    """
    Load and validate the bot config, exiting with status 1 if it is unusable.
    The returned dict always carries a complete `leetcode` section.
    """
    cfg_path = Path(path) if path else get_config_path()
    cfg = _read_yaml(cfg_path)

    try:
        validate_config(cfg, str(cfg_path))
    except ConfigValidationError:
        sys.exit(1)

    return apply_defaults(cfg, cfg_path)
