"""URL helpers for the configured GitHub repository."""

from __future__ import annotations

from ng_dev.config import GithubConfig

GITHUB_HOST = "github.com"


def get_repository_url(config: GithubConfig) -> str:
    """Return the browsable HTTPS URL of the repository."""
    return f"https://{GITHUB_HOST}/{config.owner}/{config.name}"


def get_repository_git_url(config: GithubConfig, github_token: str | None = None) -> str:
    """Return the Git remote URL, embedding the token when one is given."""
    if config.use_ssh:
        return f"git@{GITHUB_HOST}:{config.owner}/{config.name}.git"
    credentials = f"x-access-token:{github_token}@" if github_token else ""
    return f"https://{credentials}{GITHUB_HOST}/{config.owner}/{config.name}.git"
