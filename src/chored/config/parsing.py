"""Parsing and normalization helpers for configuration values."""

import logging
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)

_VALID_TRIGGERS = {"always", "commitMessage"}
_VALID_ACTIONS = {"print", "tag", "push"}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _parse_list(value: Any) -> List[str]:
    """Accept a TOML array or a comma-separated string."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return [str(item) for item in value]


def _normalize_choice(value: Any, valid: Sequence[str], default: str, what: str) -> str:
    normalized = str(value).strip()
    if normalized not in valid:
        logger.warning(
            "Invalid %s '%s'. Falling back to '%s'. Valid options: %s",
            what,
            value,
            default,
            ", ".join(sorted(valid)),
        )
        return default
    return normalized


def _normalize_trigger(value: Any) -> str:
    return _normalize_choice(value, sorted(_VALID_TRIGGERS), "always", "bump trigger")


def _normalize_action(value: Any) -> str:
    return _normalize_choice(value, sorted(_VALID_ACTIONS), "tag", "bump action")


def _normalize_log_level(value: Any) -> str:
    return _normalize_choice(str(value).upper(), sorted(_VALID_LOG_LEVELS), "INFO", "log level")
