"""Controlled interface for running `git` against a repository checkout."""

from __future__ import annotations

import logging
import subprocess  # nosec B404
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

from ng_dev.config import (
    ConfigValidationError,
    GithubConfig,
    NgDevConfig,
    assert_valid_github_config,
    load_config,
)
from ng_dev.dry_run import DryRunError, is_dry_run
from ng_dev.errors import GitErrorKind, NgDevError
from ng_dev.git.urls import get_repository_git_url
from ng_dev.security import Sanitizer, identity_sanitizer
from ng_dev.shared_instance import SharedInstance

logger = logging.getLogger(__name__)

# Clears the credential helper so temporary tokens are never stored for later use.
CREDENTIAL_HELPER_OVERRIDE: tuple[str, ...] = ("-c", "credential.helper=")

PROCESS_ERROR_RETURNCODE = -1


@dataclass(frozen=True)
class GitCommandResult:
    """Outcome of one git invocation."""

    returncode: int
    stdout: str
    stderr: str
    error: OSError | None = None

    @property
    def succeeded(self) -> bool:
        """Return whether git exited with status zero."""
        return self.returncode == 0


class GitCommandError(NgDevError):
    """Raised when a git command exits with a non-zero status.

    Only the sanitized command line is kept on the instance. The raw arguments
    may contain an access token and errors are routinely printed or shared.
    """

    kind = GitErrorKind.COMMAND_FAILURE

    def __init__(self, client: GitClient, unsanitized_args: Sequence[str]) -> None:
        self.command = f"git {client.sanitize_console_output(' '.join(unsanitized_args))}"
        super().__init__(f"Command failed: {self.command}")


def determine_repo_base_dir_from_cwd() -> Path:
    """Return the top-level directory of the repository containing the cwd."""
    completed = subprocess.run(  # nosec B603 B607
        ["git", "rev-parse", "--show-toplevel"],
        check=False,
        capture_output=True,
        encoding="utf-8",
        errors="replace",
    )
    if completed.returncode != 0:
        raise NgDevError(
            "Unable to find the path to the base directory of the repository.\n"
            "Was the command run from inside of the repo?\n\n"
            f"{completed.stderr.strip()}"
        )
    return Path(completed.stdout.strip())


def git_output_as_list(result: GitCommandResult) -> list[str]:
    """Split newline-separated git output into trimmed, non-empty entries."""
    return [line.strip() for line in result.stdout.split("\n") if line.strip()]


class GitClient:
    """Runs git commands against a checkout of the configured GitHub repository."""

    def __init__(
        self,
        config: NgDevConfig,
        *,
        base_dir: Path | None = None,
        git_bin_path: str = "git",
        sanitizer: Sanitizer | None = None,
        dry_run: Callable[[], bool] = is_dry_run,
    ) -> None:
        if config.github is None:
            raise ConfigValidationError(
                "Invalid ng-dev configuration found:",
                ["`github` is not defined"],
            )
        self.config = config
        self.remote_config: GithubConfig = config.github
        self.remote_params = {"owner": config.github.owner, "repo": config.github.name}
        self.main_branch_name = config.github.main_branch_name
        self.base_dir = base_dir or determine_repo_base_dir_from_cwd()
        self.git_bin_path = git_bin_path
        self._sanitizer = sanitizer or identity_sanitizer
        self._dry_run = dry_run

    @classmethod
    def get(cls) -> GitClient:
        """Return the process-wide unauthenticated client."""
        return unauthenticated_client.get()

    def run(
        self,
        args: Sequence[str],
        *,
        quiet: bool = False,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
    ) -> GitCommandResult:
        """Run a git command and raise `GitCommandError` if it fails.

        A returned result always has a zero return code.
        """
        result = self.run_graceful(args, quiet=quiet, env=env, input=input)
        if result.returncode != 0:
            raise GitCommandError(self, args)
        return result

    def run_graceful(
        self,
        args: Sequence[str],
        *,
        quiet: bool = False,
        env: Mapping[str, str] | None = None,
        input: str | None = None,
    ) -> GitCommandResult:
        """Run a git command and return its result without raising on failure.

        Sanitized stderr output of failed commands is written to the process
        stderr so failures are visible. Pushing is refused in dry-run mode.
        """
        if args and args[0] == "push" and self._dry_run():
            logger.debug('"git push" is not able to be run in dryRun mode.')
            raise DryRunError()

        command = [*CREDENTIAL_HELPER_OVERRIDE, *args]
        logger.debug("Executing: git %s", self.sanitize_console_output(" ".join(command)))

        stream = subprocess.DEVNULL if quiet else subprocess.PIPE
        error: OSError | None = None
        try:
            completed = subprocess.run(  # nosec B603
                [self.git_bin_path, *command],
                cwd=str(self.base_dir),
                check=False,
                stdout=stream,
                stderr=stream,
                input=input if input is not None else "",
                env=dict(env) if env is not None else None,
                encoding="utf-8",
                errors="replace",
            )
            returncode = completed.returncode
            stdout = completed.stdout or ""
            stderr = completed.stderr or ""
        except OSError as exc:
            error = exc
            returncode = PROCESS_ERROR_RETURNCODE
            stdout = ""
            stderr = ""

        signal = -returncode if returncode < 0 and error is None else None
        logger.debug("Status: %s, Error: %s, Signal: %s", returncode, error is not None, signal)

        if returncode != 0 and stderr:
            # Git may echo the failing command, including a remote URL carrying a token.
            sys.stderr.write(self.sanitize_console_output(stderr))

        logger.debug("Stdout: %s", self.sanitize_console_output(stdout))
        logger.debug("Stderr: %s", self.sanitize_console_output(stderr))
        logger.debug(
            "Process Error: %s",
            self.sanitize_console_output(str(error)) if error is not None else None,
        )

        if error is not None:
            sys.stderr.write(self.sanitize_console_output(str(error)) + "\n")

        return GitCommandResult(
            returncode=returncode,
            stdout=stdout.rstrip(),
            stderr=stderr,
            error=error,
        )

    def get_repo_git_url(self) -> str:
        """Return the Git URL that resolves to the configured repository."""
        return get_repository_git_url(self.remote_config)

    def has_commit(self, branch_name: str, sha: str) -> bool:
        """Return whether the given branch contains the specified SHA."""
        return self.run(["branch", branch_name, "--contains", sha]).stdout != ""

    def is_shallow_repo(self) -> bool:
        """Return whether the local repository is configured as shallow."""
        return self.run(["rev-parse", "--is-shallow-repository"]).stdout.strip() == "true"

    def get_current_branch_or_revision(self) -> str:
        """Return the checked out branch, or the revision when HEAD is detached."""
        branch_name = self.run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout.strip()
        if branch_name == "HEAD":
            return self.run(["rev-parse", "HEAD"]).stdout.strip()
        return branch_name

    def has_uncommitted_changes(self) -> bool:
        """Return whether the working tree differs from the checked out revision."""
        # diff-index does not compare contents, so stale stat info of touched
        # files has to be refreshed first.
        self.run_graceful(["update-index", "-q", "--refresh"])
        return self.run_graceful(["diff-index", "--quiet", "HEAD"]).returncode != 0

    def checkout(self, branch_or_revision: str, clean_state: bool) -> bool:
        """Check out a branch or revision and return whether it succeeded.

        With `clean_state`, pending am, cherry-pick and rebase operations are
        aborted and the working tree is reset first. Those steps are no-ops
        most of the time, so their outcome is ignored.
        """
        if clean_state:
            for cleanup_args in (
                ["am", "--abort"],
                ["cherry-pick", "--abort"],
                ["rebase", "--abort"],
                ["reset", "--hard"],
            ):
                self.run_graceful(cleanup_args, quiet=True)
        return self.run_graceful(["checkout", branch_or_revision], quiet=True).returncode == 0

    def all_changes_files_since(self, sha_or_ref: str = "HEAD") -> list[str]:
        """Return files changed since the given ref, including untracked files."""
        changed = git_output_as_list(
            self.run_graceful(["diff", "--name-only", "--diff-filter=d", sha_or_ref])
        )
        untracked = git_output_as_list(
            self.run_graceful(["ls-files", "--others", "--exclude-standard"])
        )
        return list(dict.fromkeys([*changed, *untracked]))

    def all_staged_files(self) -> list[str]:
        """Return files currently staged for commit."""
        return git_output_as_list(
            self.run_graceful(["diff", "--name-only", "--diff-filter=ACM", "--staged"])
        )

    def all_files(self) -> list[str]:
        """Return all files tracked in the repository."""
        return git_output_as_list(self.run_graceful(["ls-files"]))

    def sanitize_console_output(self, value: str) -> str:
        """Apply the configured sanitizer to text headed for logs or errors."""
        return self._sanitizer(value)


def _create_unauthenticated_client() -> GitClient:
    base_dir = determine_repo_base_dir_from_cwd()
    config = load_config(base_dir, [assert_valid_github_config])
    return GitClient(config, base_dir=base_dir)


unauthenticated_client: SharedInstance[GitClient] = SharedInstance(_create_unauthenticated_client)
