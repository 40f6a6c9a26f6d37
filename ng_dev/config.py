"""Loading and validation of the repository-level `.ng-dev/config.yml` file."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ng_dev.config_validation import optional_bool, require_string, string_list
from ng_dev.errors import NgDevError

CONFIG_FILE_PATH = Path(".ng-dev") / "config.yml"


class ConfigValidationError(NgDevError):
    """Raised when the loaded configuration is missing values or malformed."""

    def __init__(self, message: str, errors: Iterable[str] = ()) -> None:
        self.errors = tuple(errors)
        details = "".join(f"\n  - {error}" for error in self.errors)
        super().__init__(f"{message}{details}")


@dataclass(frozen=True)
class GithubConfig:
    """Coordinates of the upstream GitHub repository."""

    owner: str
    name: str
    main_branch_name: str = "main"
    use_ssh: bool = False


@dataclass(frozen=True)
class PullRequestConfig:
    """Pull request tooling options."""

    target_label_exempt_scopes: frozenset[str] = frozenset()
    validators: Mapping[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class NgDevConfig:
    """Parsed ng-dev configuration."""

    github: GithubConfig | None = None
    pull_request: PullRequestConfig = field(default_factory=PullRequestConfig)


ConfigValidator = Callable[[NgDevConfig, list[str]], None]


def assert_valid_github_config(config: NgDevConfig, errors: list[str]) -> None:
    """Record an error when the `github` section is absent."""
    if config.github is None:
        errors.append("`github` is not defined")


def load_config(
    base_dir: Path | None = None,
    validators: Iterable[ConfigValidator] = (),
) -> NgDevConfig:
    """Read, parse and validate the configuration of the repository at base_dir."""
    root = base_dir or Path.cwd()
    config_path = root / CONFIG_FILE_PATH
    raw: Any = {}
    if config_path.exists():
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"Unable to parse {config_path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigValidationError(f"Configuration root in {config_path} must be a mapping.")

    errors: list[str] = []
    config = parse_config(raw, errors)
    for validator in validators:
        validator(config, errors)
    if errors:
        raise ConfigValidationError("Invalid ng-dev configuration found:", errors)
    return config


def parse_config(raw: Mapping[str, Any], errors: list[str]) -> NgDevConfig:
    """Build a config object from raw YAML data, collecting schema errors."""
    github: GithubConfig | None = None
    raw_github = raw.get("github")
    if raw_github is not None:
        if isinstance(raw_github, dict):
            github = GithubConfig(
                owner=require_string(raw_github, "owner", "github", errors),
                name=require_string(raw_github, "name", "github", errors),
                main_branch_name=str(raw_github.get("main_branch_name") or "main"),
                use_ssh=optional_bool(raw_github, "use_ssh", "github", errors, default=False),
            )
        else:
            errors.append("`github` must be a mapping")

    pull_request = PullRequestConfig()
    raw_pull_request = raw.get("pull_request")
    if raw_pull_request is not None:
        if isinstance(raw_pull_request, dict):
            pull_request = PullRequestConfig(
                target_label_exempt_scopes=frozenset(
                    string_list(
                        raw_pull_request,
                        "target_label_exempt_scopes",
                        "pull_request",
                        errors,
                    )
                ),
                validators=_parse_validator_toggles(raw_pull_request.get("validators"), errors),
            )
        else:
            errors.append("`pull_request` must be a mapping")
    return NgDevConfig(github=github, pull_request=pull_request)


def _parse_validator_toggles(value: Any, errors: list[str]) -> dict[str, bool]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        errors.append("`pull_request.validators` must be a mapping")
        return {}
    toggles: dict[str, bool] = {}
    for name, enabled in value.items():
        if not isinstance(enabled, bool):
            errors.append(f"`pull_request.validators.{name}` must be a boolean")
            continue
        toggles[str(name)] = enabled
    return toggles
