"""Shared error types for ng-dev tooling."""

from __future__ import annotations

from enum import StrEnum


class GitErrorKind(StrEnum):
    """Failure kinds raised by the Git command runner."""

    COMMAND_FAILURE = "command_failure"
    DRY_RUN_REFUSAL = "dry_run_refusal"


class NgDevError(RuntimeError):
    """Base class for errors raised by ng-dev tooling."""
