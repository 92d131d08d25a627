"""Argument parsing shared by the tool handlers."""

from __future__ import annotations

from typing import Any

from n8n_mcp.core.errors import ValidationError


def required_string(arguments: dict[str, Any], key: str) -> str:
    value = arguments.get(key)
    if isinstance(value, int | float) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    msg = f"{key} is required"
    raise ValidationError(msg)


def optional_string(arguments: dict[str, Any], key: str) -> str | None:
    value = arguments.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    msg = f"{key} must be a string"
    raise ValidationError(msg)


def optional_object(arguments: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = arguments.get(key)
    if value is None:
        return None
    if isinstance(value, dict):
        return value
    msg = f"{key} must be an object"
    raise ValidationError(msg)


def parse_limit(value: Any, *, default: int, maximum: int | None = None) -> int:
    """Coerce a `limit` argument; falls back to `default` when unusable."""
    limit = default
    if isinstance(value, bool):
        limit = default
    elif isinstance(value, int):
        limit = value
    elif isinstance(value, float) and value.is_integer():
        limit = int(value)
    elif isinstance(value, str):
        try:
            limit = int(value.strip())
        except ValueError:
            limit = default
    if limit < 1:
        limit = default
    if maximum is not None:
        limit = min(limit, maximum)
    return limit
