"""Labels applied to pull requests to steer merging."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

from ng_dev.errors import NgDevError


class InvalidTargetLabelError(NgDevError):
    """Raised when the target labels on a pull request are ambiguous."""


class TargetLabelName(StrEnum):
    """Branch classes a pull request can be targeted at."""

    MAJOR = "target: major"
    MINOR = "target: minor"
    RELEASE_CANDIDATE = "target: rc"
    LONG_TERM_SUPPORT = "target: lts"
    PATCH = "target: patch"
    AUTOMATION = "target: automation"


@dataclass(frozen=True)
class MergeLabel:
    """Label influencing how a pull request is merged."""

    name: str
    description: str


MERGE_FIX_COMMIT_MESSAGE = MergeLabel(
    name="merge: fix commit message",
    description="When the PR is merged, rewrites/fixups of the commit messages are needed.",
)
MERGE_CARETAKER_NOTE = MergeLabel(
    name="merge: caretaker note",
    description=(
        "Alert the caretaker performing the merge to check the PR for an out of normal "
        "action needed or note."
    ),
)
MERGE_PRESERVE_COMMITS = MergeLabel(
    name="merge: preserve commits",
    description="When the PR is merged, a rebase and merge should be performed.",
)

MERGE_LABELS: dict[str, MergeLabel] = {
    label.name: label
    for label in (MERGE_FIX_COMMIT_MESSAGE, MERGE_CARETAKER_NOTE, MERGE_PRESERVE_COMMITS)
}


def get_target_label_name(labels: Iterable[str]) -> TargetLabelName | None:
    """Return the target label applied to a pull request, if any."""
    known = {label.value: label for label in TargetLabelName}
    matches = sorted({known[label] for label in labels if label in known})
    if len(matches) > 1:
        names = ", ".join(match.value for match in matches)
        raise InvalidTargetLabelError(f"Pull request has multiple target labels: {names}")
    return matches[0] if matches else None
