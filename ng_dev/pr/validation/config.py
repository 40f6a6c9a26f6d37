"""Registration and execution of pull request validations."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar


class TargetLabelViolation(StrEnum):
    """Policy clauses a pull request can violate for its target label."""

    BREAKING_CHANGES = "breaking_changes"
    FEATURE_COMMITS = "feature_commits"
    DEPRECATIONS = "deprecations"


class PullRequestValidationError(Exception):
    """Raised by a validation when a pull request does not satisfy it."""

    def __init__(
        self,
        message: str,
        *,
        kind: TargetLabelViolation | None = None,
        label_name: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.label_name = label_name


@dataclass(frozen=True)
class PullRequestValidationFailure:
    """A failed validation as reported to the merge tooling."""

    message: str
    validation_name: str
    can_be_force_ignored: bool
    kind: TargetLabelViolation | None = None


class PullRequestValidation:
    """Base class for validations run against a pull request."""

    def __init__(self, name: str, can_be_force_ignored: bool) -> None:
        self.name = name
        self.can_be_force_ignored = can_be_force_ignored

    def validate(self, *args: Any, **kwargs: Any) -> None:
        """Raise `PullRequestValidationError` when the pull request is not valid."""
        raise NotImplementedError


ValidationT = TypeVar("ValidationT", bound=PullRequestValidation)


@dataclass(frozen=True)
class PullRequestValidationConfig:
    """Which validations are enabled; validations not listed are enabled."""

    toggles: Mapping[str, bool]

    @classmethod
    def from_mapping(cls, toggles: Mapping[str, bool] | None = None) -> PullRequestValidationConfig:
        """Build a validation config from name to enabled toggles."""
        return cls(toggles=dict(toggles or {}))

    def is_enabled(self, name: str) -> bool:
        """Return whether the named validation should run."""
        return self.toggles.get(name, True)


@dataclass(frozen=True)
class PullRequestValidationRegistration(Generic[ValidationT]):
    """A named validation and whether operators may force-bypass its failures."""

    name: str
    can_be_force_ignored: bool
    factory: Callable[[str, bool], ValidationT]

    def run(
        self,
        validation_config: PullRequestValidationConfig,
        *args: Any,
        **kwargs: Any,
    ) -> PullRequestValidationFailure | None:
        """Run the validation and convert a policy violation into a failure."""
        if not validation_config.is_enabled(self.name):
            return None
        validation = self.factory(self.name, self.can_be_force_ignored)
        try:
            validation.validate(*args, **kwargs)
        except PullRequestValidationError as error:
            return PullRequestValidationFailure(
                message=error.message,
                validation_name=self.name,
                can_be_force_ignored=self.can_be_force_ignored,
                kind=error.kind,
            )
        return None


def create_pull_request_validation(
    *,
    name: str,
    can_be_force_ignored: bool,
    factory: Callable[[str, bool], ValidationT],
) -> PullRequestValidationRegistration[ValidationT]:
    """Register a validation under a stable name."""
    return PullRequestValidationRegistration(
        name=name,
        can_be_force_ignored=can_be_force_ignored,
        factory=factory,
    )
