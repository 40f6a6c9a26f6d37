"""Shared configuration validation helpers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any


def require_string(section: Mapping[str, Any], key: str, path: str, errors: list[str]) -> str:
    """Return a non-empty string value or record an error for it."""
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        errors.append(f"`{path}.{key}` is not defined")
        return ""
    return value.strip()


def optional_bool(
    section: Mapping[str, Any],
    key: str,
    path: str,
    errors: list[str],
    *,
    default: bool,
) -> bool:
    """Return a boolean value, its default when absent, or record a type error."""
    value = section.get(key, default)
    if not isinstance(value, bool):
        errors.append(f"`{path}.{key}` must be a boolean")
        return default
    return value


def string_list(section: Mapping[str, Any], key: str, path: str, errors: list[str]) -> list[str]:
    """Return a list of strings, an empty list when absent, or record a type error."""
    value = section.get(key)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        errors.append(f"`{path}.{key}` must be a list of strings")
        return []
    return list(value)
