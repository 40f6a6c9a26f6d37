"""Semantic versions and the release trains active for a project."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

SEMVER_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^v?(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)


@dataclass(frozen=True)
class Version:
    """Parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: tuple[str, ...] = ()

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            return f"{base}-{'.'.join(self.prerelease)}"
        return base


def parse_version(value: str) -> Version:
    """Parse a semantic version string such as `17.1.0-next.2`."""
    match = SEMVER_PATTERN.match(value.strip())
    if match is None:
        raise ValueError(f"Invalid semantic version: {value!r}")
    major, minor, patch, prerelease = match.groups()
    return Version(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
    )


@dataclass(frozen=True)
class ReleaseTrain:
    """A release-track branch and the version it currently publishes."""

    branch_name: str
    version: Version


@dataclass(frozen=True)
class ActiveReleaseTrains:
    """Release trains currently active for the project."""

    release_candidate: ReleaseTrain | None
    next: ReleaseTrain
    latest: ReleaseTrain

    def is_feature_freeze(self) -> bool:
        """Return whether the release-candidate train is in feature-freeze.

        A train that still publishes `next` pre-releases no longer accepts
        features but has not reached the release-candidate phase yet.
        """
        if self.release_candidate is None:
            return False
        prerelease = self.release_candidate.version.prerelease
        return bool(prerelease) and prerelease[0] == "next"


def version_branch_name(version: Version) -> str:
    """Return the patch branch name for a version, e.g. `17.1.x`."""
    return f"{version.major}.{version.minor}.x"


def build_active_release_trains(
    *,
    latest: str,
    next_version: str,
    release_candidate: str | None = None,
    main_branch_name: str = "main",
) -> ActiveReleaseTrains:
    """Assemble release trains from known version strings."""
    latest_parsed = parse_version(latest)
    candidate = None
    if release_candidate is not None:
        candidate_version = parse_version(release_candidate)
        candidate = ReleaseTrain(version_branch_name(candidate_version), candidate_version)
    return ActiveReleaseTrains(
        release_candidate=candidate,
        next=ReleaseTrain(main_branch_name, parse_version(next_version)),
        latest=ReleaseTrain(version_branch_name(latest_parsed), latest_parsed),
    )
