"""Process-wide dry-run mode used to rehearse mutating operations safely."""

from __future__ import annotations

import os

from ng_dev.errors import GitErrorKind, NgDevError

DRY_RUN_ENV_VAR = "DRY_RUN"


class DryRunError(NgDevError):
    """Raised when a mutating operation is attempted while dry-run mode is active."""

    kind = GitErrorKind.DRY_RUN_REFUSAL

    def __init__(self) -> None:
        super().__init__("Cannot call this function in dryRun mode.")


def is_dry_run() -> bool:
    """Return whether the current process runs in dry-run mode."""
    return DRY_RUN_ENV_VAR in os.environ


def set_dry_run(enabled: bool) -> None:
    """Enable or disable dry-run mode for this process and its children."""
    if enabled:
        os.environ[DRY_RUN_ENV_VAR] = "true"
    else:
        os.environ.pop(DRY_RUN_ENV_VAR, None)
