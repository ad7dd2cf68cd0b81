"""
YAML configuration validator for config.yaml.

Validates structure, required fields, and common misconfigurations.
"""

from __future__ import annotations

import logging
from typing import Any

from apscheduler.triggers.cron import CronTrigger

from ..leetcode.refresh import parse_cron

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Raised when config validation fails."""
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(cfg: dict[str, Any], config_path: str = "config.yaml") -> None:
    """
    Validate config.yaml structure and content.

    Every problem is collected first, then all are logged together so one
    restart fixes them all.

    Args:
        cfg: The loaded config dictionary
        config_path: Path to config file (for error messages)

    Raises:
        ConfigValidationError: If validation fails
    """
    errors = []
    warnings = []

    # ── Check root structure ────────────────────────────────────────────────
    if not isinstance(cfg, dict):
        errors.append(f"Config root must be a mapping, got {type(cfg).__name__}")
        cfg = {}

    # ── Check required top-level keys ───────────────────────────────────────
    token = cfg.get("bot_token")
    if "bot_token" not in cfg:
        errors.append("Missing required top-level key: 'bot_token'")
    elif not isinstance(token, str) or not token.strip():
        errors.append("'bot_token' must be a non-empty string")

    # ── Validate leetcode section ───────────────────────────────────────────
    if "leetcode" in cfg:
        lc = cfg["leetcode"]
        if not isinstance(lc, dict):
            errors.append(f"'leetcode' must be a mapping, got {type(lc).__name__}")
        else:
            if "cache_path" in lc and not isinstance(lc["cache_path"], str):
                errors.append(
                    f"'leetcode.cache_path' must be a string, got {type(lc['cache_path']).__name__}"
                )
            if "endpoint" in lc and not str(lc["endpoint"]).startswith(("http://", "https://")):
                errors.append("'leetcode.endpoint' must be an http(s) URL")
            if "request_timeout" in lc:
                timeout = lc["request_timeout"]
                if not _is_number(timeout) or timeout <= 0:
                    errors.append(
                        f"'leetcode.request_timeout' must be a positive number, got {timeout!r}"
                    )
            if "refresh_cron" in lc:
                cron = lc["refresh_cron"]
                if not isinstance(cron, str):
                    errors.append(
                        f"'leetcode.refresh_cron' must be a string, got {type(cron).__name__}. "
                        f"Use: refresh_cron: \"0 2 * * *\""
                    )
                else:
                    # same construction the scheduler does, so field ranges are checked too
                    try:
                        CronTrigger(timezone="UTC", **parse_cron(cron))
                    except ValueError as e:
                        errors.append(
                            f"'leetcode.refresh_cron' is not a valid cron expression ({cron!r}): {e}. "
                            f"Use: refresh_cron: \"0 2 * * *\""
                        )

    # ── Validate ollama section ─────────────────────────────────────────────
    if "ollama" in cfg:
        ollama = cfg["ollama"]
        if not isinstance(ollama, dict):
            errors.append(f"'ollama' must be a mapping, got {type(ollama).__name__}")
        elif "base_url" not in ollama:
            errors.append("'ollama' missing required 'base_url'")
        elif "model" in ollama and not isinstance(ollama["model"], str):
            errors.append(
                f"'ollama.model' must be a string, got {type(ollama['model']).__name__}"
            )
    else:
        warnings.append("No 'ollama' section, /chat will be unavailable")

    # ── Validate auto_response flag ─────────────────────────────────────────
    if "auto_response" in cfg and not isinstance(cfg["auto_response"], bool):
        errors.append(
            f"'auto_response' must be boolean, got {type(cfg['auto_response']).__name__}"
        )

    # ── Validate permissions section ───────────────────────────────────────
    if "permissions" in cfg:
        perms = cfg["permissions"]
        if not isinstance(perms, dict):
            errors.append(
                f"'permissions' must be a mapping, got {type(perms).__name__}"
            )
        elif "users" in perms:
            users = perms["users"]
            if not isinstance(users, dict):
                errors.append(
                    f"'permissions.users' must be a mapping, got {type(users).__name__}"
                )
            elif "admin_ids" in users and not isinstance(users["admin_ids"], list):
                errors.append(
                    f"'permissions.users.admin_ids' must be a list, "
                    f"got {type(users['admin_ids']).__name__}"
                )

    # ── Log warnings ────────────────────────────────────────────────────────
    for warning in warnings:
        logger.warning("Config warning: %s", warning)

    # ── Log errors and raise if any ────────────────────────────────────────
    if errors:
        logger.error("=" * 70)
        logger.error("CONFIG VALIDATION FAILED (%s)", config_path)
        logger.error("=" * 70)
        for i, error in enumerate(errors, 1):
            logger.error("[%d] %s", i, error)
        logger.error("=" * 70)
        logger.error("Please fix the errors above and restart the bot.")
        logger.error("=" * 70)
        raise ConfigValidationError(f"Config validation failed with {len(errors)} error(s)")
