"""Command-line interface for ng-dev repository tooling."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from ng_dev import __version__
from ng_dev.commit_message.parse import GIT_LOG_FORMAT, parse_commits_from_git_log
from ng_dev.dry_run import set_dry_run
from ng_dev.errors import NgDevError
from ng_dev.git.client import GitClient
from ng_dev.logging_utils import configure_logging
from ng_dev.pr.labels import get_target_label_name
from ng_dev.pr.validation.config import PullRequestValidationConfig
from ng_dev.pr.validation.target_label import changes_allow_for_target_label_validation
from ng_dev.release.versioning import build_active_release_trains
from ng_dev.security import redact_sensitive_text

app = typer.Typer(add_completion=False, no_args_is_help=True)
git_app = typer.Typer(no_args_is_help=True)
pr_app = typer.Typer(no_args_is_help=True)
console = Console()
error_console = Console(stderr=True)

app.add_typer(git_app, name="git", help="Inspect the local repository checkout.")
app.add_typer(pr_app, name="pr", help="Validate pull requests before merging.")


def _version_callback(value: bool) -> None:
    """Print package version and exit when requested."""
    if value:
        console.print(__version__)
        raise typer.Exit()


def _fail(error: Exception) -> NoReturn:
    """Print a redacted error message and exit with a failure code."""
    error_console.print(
        redact_sensitive_text(str(error)),
        style="red",
        markup=False,
        soft_wrap=True,
    )
    raise typer.Exit(code=1)


def _git_client() -> GitClient:
    """Return the shared client or exit when the repository is not usable."""
    try:
        return GitClient.get()
    except NgDevError as error:
        _fail(error)


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Print debug output, including git invocations."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Refuse pushes and other mutating operations."),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(help="Write a debug log of this run to the given file."),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Release and pull request tooling."""
    configure_logging(log_file=log_file, verbose=verbose)
    if dry_run:
        set_dry_run(True)


@git_app.command("current-branch")
def git_current_branch() -> None:
    """Print the checked out branch, or the revision when HEAD is detached."""
    client = _git_client()
    try:
        console.print(client.get_current_branch_or_revision(), markup=False)
    except NgDevError as error:
        _fail(error)


@git_app.command("changed-files")
def git_changed_files(
    since: Annotated[
        str,
        typer.Option(help="Revision to compare the working tree against."),
    ] = "HEAD",
) -> None:
    """List files changed since a revision, including untracked files."""
    for path in _git_client().all_changes_files_since(since):
        console.print(path, markup=False, highlight=False)


@git_app.command("staged-files")
def git_staged_files() -> None:
    """List files staged for commit."""
    for path in _git_client().all_staged_files():
        console.print(path, markup=False, highlight=False)


@git_app.command("status")
def git_status() -> None:
    """Summarize the state of the repository checkout."""
    client = _git_client()
    try:
        current = client.get_current_branch_or_revision()
        shallow = client.is_shallow_repo()
    except NgDevError as error:
        _fail(error)
    table = Table(title="Repository Status")
    table.add_column("Check")
    table.add_column("Value")
    table.add_row("Branch or revision", current)
    table.add_row("Shallow clone", "yes" if shallow else "no")
    table.add_row("Uncommitted changes", "yes" if client.has_uncommitted_changes() else "no")
    console.print(table)


@pr_app.command("check-target-label")
def pr_check_target_label(
    latest: Annotated[
        str,
        typer.Option("--latest", help="Version published by the latest release train."),
    ],
    next_version: Annotated[
        str,
        typer.Option("--next", help="Version published by the next release train."),
    ],
    label: Annotated[
        str | None,
        typer.Argument(help="Target label, e.g. 'target: patch'. Defaults to the applied one."),
    ] = None,
    base: Annotated[
        str | None,
        typer.Option(help="Base revision of the pull request. Defaults to the main branch."),
    ] = None,
    applied_labels: Annotated[
        list[str] | None,
        typer.Option("--applied-label", help="Label applied to the pull request (repeatable)."),
    ] = None,
    release_candidate: Annotated[
        str | None,
        typer.Option(help="Version published by the release-candidate train, if any."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Ignore failures that can be force-ignored."),
    ] = False,
) -> None:
    """Check that the commits since the base revision may land for a target label."""
    client = _git_client()
    applied = applied_labels or []
    try:
        label_name = label or get_target_label_name(applied)
    except NgDevError as error:
        _fail(error)
    if label_name is None:
        raise typer.BadParameter("Provide a target label or apply one with --applied-label.")

    try:
        release_trains = build_active_release_trains(
            latest=latest,
            next_version=next_version,
            release_candidate=release_candidate,
            main_branch_name=client.main_branch_name,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    base_ref = base or client.main_branch_name
    try:
        log_output = client.run(["log", f"--format={GIT_LOG_FORMAT}", f"{base_ref}..HEAD"]).stdout
    except NgDevError as error:
        _fail(error)
    commits = parse_commits_from_git_log(log_output)

    pull_request_config = client.config.pull_request
    failure = changes_allow_for_target_label_validation.run(
        PullRequestValidationConfig.from_mapping(pull_request_config.validators),
        commits,
        label_name,
        pull_request_config,
        release_trains,
        applied,
    )
    if failure is None:
        console.print(
            f"[green]{len(commits)} commit(s) may be merged for[/green] {label_name}",
            highlight=False,
        )
        return

    error_console.print(failure.message, style="red", markup=False, soft_wrap=True)
    if force and failure.can_be_force_ignored:
        error_console.print(
            f"Ignoring failed validation '{failure.validation_name}' as requested.",
            style="yellow",
            markup=False,
            soft_wrap=True,
        )
        return
    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
