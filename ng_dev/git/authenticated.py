"""Git client that authenticates against GitHub with an access token."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import ClassVar

from ng_dev.config import NgDevConfig
from ng_dev.dry_run import is_dry_run
from ng_dev.errors import NgDevError
from ng_dev.git.client import GitClient
from ng_dev.git.urls import get_repository_git_url
from ng_dev.security import Sanitizer, TokenRedactor, chain_sanitizers, identity_sanitizer


class AuthenticatedGitClient(GitClient):
    """Git client whose remote URL embeds a GitHub token.

    The token is redacted from every command line, error and stderr stream
    the client emits.
    """

    _instance: ClassVar[AuthenticatedGitClient | None] = None

    def __init__(
        self,
        github_token: str,
        config: NgDevConfig,
        *,
        base_dir: Path | None = None,
        git_bin_path: str = "git",
        sanitizer: Sanitizer | None = None,
        dry_run: Callable[[], bool] = is_dry_run,
    ) -> None:
        super().__init__(
            config,
            base_dir=base_dir,
            git_bin_path=git_bin_path,
            sanitizer=chain_sanitizers(
                TokenRedactor(github_token),
                sanitizer or identity_sanitizer,
            ),
            dry_run=dry_run,
        )
        self.github_token = github_token

    def get_repo_git_url(self) -> str:
        """Return the Git URL of the configured repository including the token."""
        return get_repository_git_url(self.remote_config, self.github_token)

    @classmethod
    def configure(
        cls,
        github_token: str,
        config: NgDevConfig,
        *,
        base_dir: Path | None = None,
    ) -> AuthenticatedGitClient:
        """Create the process-wide authenticated client."""
        if cls._instance is not None:
            raise NgDevError(
                "Unable to configure `AuthenticatedGitClient` as it has been configured already."
            )
        cls._instance = cls(github_token, config, base_dir=base_dir)
        return cls._instance

    @classmethod
    def get(cls) -> AuthenticatedGitClient:
        """Return the process-wide authenticated client."""
        if cls._instance is None:
            raise NgDevError("No instance of `AuthenticatedGitClient` has been configured.")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Forget the configured authenticated client."""
        cls._instance = None
