"""Redaction helpers that keep access tokens out of console output and logs."""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Final

TOKEN_PLACEHOLDER: Final[str] = "<TOKEN>"

Sanitizer = Callable[[str], str]

POTENTIAL_SECRET_PATTERNS: tuple[tuple[str, str], ...] = (
    ("github_token", r"gh[pousr]_[A-Za-z0-9]{20,}"),
    ("github_fine_grained_token", r"github_pat_[A-Za-z0-9_]{22,}"),
    ("bearer_token", r"(?i)bearer\s+[A-Za-z0-9._-]{16,}"),
)

_URL_CREDENTIAL_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?i)(https?://[^:@\s/]+:)[^@\s/]+@")
_AUTHORIZATION_HEADER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"(?i)(authorization\s*:\s*(?:basic|token)\s+)[A-Za-z0-9+/=._-]+"
)


def identity_sanitizer(value: str) -> str:
    """Return the value unchanged."""
    return value


class TokenRedactor:
    """Sanitizer replacing every occurrence of a known token with a placeholder."""

    def __init__(self, token: str, *, placeholder: str = TOKEN_PLACEHOLDER) -> None:
        if not token:
            raise ValueError("token must be a non-empty string.")
        self._pattern = re.compile(re.escape(token))
        self._placeholder = placeholder

    def __call__(self, value: str) -> str:
        return self._pattern.sub(self._placeholder, value)


def redact_sensitive_text(text: str) -> str:
    """Replace token-like values and URL credentials with redaction placeholders."""
    redacted = text
    for label, pattern in POTENTIAL_SECRET_PATTERNS:
        redacted = re.sub(pattern, f"[REDACTED:{label}]", redacted)
    redacted = _AUTHORIZATION_HEADER_PATTERN.sub(r"\1[REDACTED:value]", redacted)
    redacted = _URL_CREDENTIAL_PATTERN.sub(r"\1[REDACTED:value]@", redacted)
    return redacted


def chain_sanitizers(*sanitizers: Sanitizer) -> Sanitizer:
    """Compose sanitizers, applying them left to right."""

    def _sanitize(value: str) -> str:
        for sanitizer in sanitizers:
            value = sanitizer(value)
        return value

    return _sanitize
