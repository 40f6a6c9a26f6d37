"""Check that the commits of a pull request may land on the branches of its target label."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Protocol

from ng_dev.commit_message.parse import Commit
from ng_dev.config import PullRequestConfig
from ng_dev.logging_utils import get_logger
from ng_dev.pr.labels import MERGE_FIX_COMMIT_MESSAGE, TargetLabelName
from ng_dev.pr.validation.config import (
    PullRequestValidation,
    PullRequestValidationError,
    TargetLabelViolation,
    create_pull_request_validation,
)

LOGGER = get_logger()

FEATURE_COMMIT_TYPE = "feat"


class ReleaseTrainState(Protocol):
    """Release train information consulted by the validation."""

    def is_feature_freeze(self) -> bool: ...


class BreakingChangesNotAllowedError(PullRequestValidationError):
    """Breaking changes targeted at a branch that only accepts minor or patch changes."""

    def __init__(self, label_name: str) -> None:
        super().__init__(
            f'Cannot merge into branch for "{label_name}" as the pull request has '
            'breaking changes. Breaking changes can only be merged with the "target: major" label.',
            kind=TargetLabelViolation.BREAKING_CHANGES,
            label_name=label_name,
        )


class FeatureCommitsNotAllowedError(PullRequestValidationError):
    """Feature commits targeted at a patch-only branch."""

    def __init__(self, label_name: str) -> None:
        super().__init__(
            f'Cannot merge into branch for "{label_name}" as the pull request has '
            'commits with the "feat" type. New features can only be merged with the '
            '"target: minor" or "target: major" label.',
            kind=TargetLabelViolation.FEATURE_COMMITS,
            label_name=label_name,
        )


class DeprecationsNotAllowedError(PullRequestValidationError):
    """Deprecations targeted at a patch-only branch outside of feature-freeze."""

    def __init__(self, label_name: str) -> None:
        super().__init__(
            f'Cannot merge into branch for "{label_name}" as the pull request '
            'contains deprecations. Deprecations can only be merged with the "target: minor" '
            'or "target: major" label.',
            kind=TargetLabelViolation.DEPRECATIONS,
            label_name=label_name,
        )


_PATCH_ONLY_LABELS = frozenset(
    {
        TargetLabelName.RELEASE_CANDIDATE,
        TargetLabelName.LONG_TERM_SUPPORT,
        TargetLabelName.PATCH,
    }
)


class TargetLabelValidation(PullRequestValidation):
    """Rejects commits whose semver impact exceeds what the target label allows."""

    def validate(
        self,
        commits: Sequence[Commit],
        label_name: str,
        config: PullRequestConfig,
        release_trains: ReleaseTrainState,
        applied_label_names: Iterable[str],
    ) -> None:
        if MERGE_FIX_COMMIT_MESSAGE.name in set(applied_label_names):
            LOGGER.debug(
                "Skipping commit message target label validation because the commit message "
                "fixup label is applied."
            )
            return

        # Commits with exempted scopes are not subject to target label content requirements.
        exempt_scopes = config.target_label_exempt_scopes
        relevant = [commit for commit in commits if commit.scope not in exempt_scopes]
        has_breaking_changes = any(commit.breaking_changes for commit in relevant)
        has_deprecations = any(commit.deprecations for commit in relevant)
        has_feature_commits = any(commit.type == FEATURE_COMMIT_TYPE for commit in relevant)

        if label_name == TargetLabelName.MAJOR:
            return
        if label_name == TargetLabelName.MINOR:
            if has_breaking_changes:
                raise BreakingChangesNotAllowedError(label_name)
            return
        if label_name in _PATCH_ONLY_LABELS:
            if has_breaking_changes:
                raise BreakingChangesNotAllowedError(label_name)
            if has_feature_commits:
                raise FeatureCommitsNotAllowedError(label_name)
            # Semver puts deprecations in minor or major releases. They are tolerated
            # on release branches only while the release-candidate train is frozen.
            if has_deprecations and not release_trains.is_feature_freeze():
                raise DeprecationsNotAllowedError(label_name)
            return

        LOGGER.warning("WARNING: Unable to confirm all commits in the pull request are")
        LOGGER.warning("eligible to be merged into the target branches for: %s", label_name)


changes_allow_for_target_label_validation = create_pull_request_validation(
    name="assert_changes_allow_for_target_label",
    can_be_force_ignored=True,
    factory=TargetLabelValidation,
)
