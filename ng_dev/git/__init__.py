"""Git command execution helpers."""

from ng_dev.git.authenticated import AuthenticatedGitClient
from ng_dev.git.client import (
    GitClient,
    GitCommandError,
    GitCommandResult,
    git_output_as_list,
)

__all__ = [
    "AuthenticatedGitClient",
    "GitClient",
    "GitCommandError",
    "GitCommandResult",
    "git_output_as_list",
]
