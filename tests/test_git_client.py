"""Tests for the git command runner."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from pathlib import Path
from typing import Any

import pytest

from ng_dev.config import ConfigValidationError, NgDevConfig
from ng_dev.dry_run import DryRunError, set_dry_run
from ng_dev.errors import GitErrorKind
from ng_dev.git import client as client_module
from ng_dev.git.client import (
    GitClient,
    GitCommandError,
    GitCommandResult,
    git_output_as_list,
)
from ng_dev.security import TokenRedactor

SECRET = "ghs_s3cr3tT0kenValue"


def test_run_returns_output_of_successful_command(client: GitClient) -> None:
    result = client.run(["rev-parse", "--abbrev-ref", "HEAD"])
    assert result.returncode == 0
    assert result.stdout == "main"


def test_run_raises_command_error_for_non_zero_exit(client: GitClient) -> None:
    with pytest.raises(GitCommandError) as excinfo:
        client.run(["checkout", "does-not-exist"])
    assert excinfo.value.kind is GitErrorKind.COMMAND_FAILURE
    assert str(excinfo.value) == "Command failed: git checkout does-not-exist"


def test_run_graceful_returns_failed_result_without_raising(
    client: GitClient,
    capsys: pytest.CaptureFixture[str],
) -> None:
    result = client.run_graceful(["checkout", "does-not-exist"])
    assert result.returncode != 0
    assert not result.succeeded
    assert "does-not-exist" in result.stderr
    assert "does-not-exist" in capsys.readouterr().err


def test_failed_command_output_never_contains_token(
    repo: Path,
    ng_dev_config: NgDevConfig,
    capsys: pytest.CaptureFixture[str],
) -> None:
    client = GitClient(
        ng_dev_config,
        base_dir=repo,
        sanitizer=TokenRedactor(SECRET),
        dry_run=lambda: False,
    )
    with pytest.raises(GitCommandError) as excinfo:
        client.run(["checkout", f"branch-{SECRET}"])
    assert SECRET not in str(excinfo.value)
    assert SECRET not in excinfo.value.command
    assert "branch-<TOKEN>" in str(excinfo.value)
    assert SECRET not in capsys.readouterr().err


def test_debug_log_of_invocation_is_sanitized(
    repo: Path,
    ng_dev_config: NgDevConfig,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.DEBUG, logger="ng_dev")
    client = GitClient(
        ng_dev_config,
        base_dir=repo,
        sanitizer=TokenRedactor(SECRET),
        dry_run=lambda: False,
    )
    client.run_graceful(["config", "--get", f"remote.{SECRET}.url"])
    assert "Executing: git -c credential.helper= config --get remote.<TOKEN>.url" in caplog.text
    assert SECRET not in caplog.text


def test_every_invocation_disables_credential_helper(
    client: GitClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[list[str]] = []

    def fake_run(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append(args)
        return subprocess.CompletedProcess(args, 0, stdout="output\n", stderr="")

    monkeypatch.setattr(client_module.subprocess, "run", fake_run)
    result = client.run(["status"])
    assert calls == [["git", "-c", "credential.helper=", "status"]]
    assert result.stdout == "output"


@pytest.mark.parametrize(
    "args",
    [
        ["push"],
        ["push", "origin", "main"],
        ["push", "--force-with-lease", "upstream", "HEAD:refs/heads/main"],
    ],
)
def test_push_is_refused_in_dry_run_mode_without_spawning(
    repo: Path,
    ng_dev_config: NgDevConfig,
    monkeypatch: pytest.MonkeyPatch,
    args: list[str],
) -> None:
    def fail_run(*_: Any, **__: Any) -> None:
        raise AssertionError("git must not be spawned in dry-run mode")

    monkeypatch.setattr(client_module.subprocess, "run", fail_run)
    client = GitClient(ng_dev_config, base_dir=repo, dry_run=lambda: True)
    with pytest.raises(DryRunError) as excinfo:
        client.run_graceful(args)
    assert excinfo.value.kind is GitErrorKind.DRY_RUN_REFUSAL
    with pytest.raises(DryRunError):
        client.run(args)


def test_process_wide_dry_run_flag_is_honored_by_default(
    repo: Path,
    ng_dev_config: NgDevConfig,
) -> None:
    client = GitClient(ng_dev_config, base_dir=repo)
    set_dry_run(True)
    with pytest.raises(DryRunError):
        client.run_graceful(["push", "origin", "main"])
    # Non-push commands still run in dry-run mode.
    assert client.run(["rev-parse", "--abbrev-ref", "HEAD"]).stdout == "main"


def test_missing_git_binary_is_reported_as_result(
    repo: Path,
    ng_dev_config: NgDevConfig,
    capsys: pytest.CaptureFixture[str],
) -> None:
    client = GitClient(
        ng_dev_config,
        base_dir=repo,
        git_bin_path=str(repo / "no-such-git"),
        dry_run=lambda: False,
    )
    result = client.run_graceful(["status"])
    assert result.returncode == client_module.PROCESS_ERROR_RETURNCODE
    assert isinstance(result.error, FileNotFoundError)
    assert capsys.readouterr().err
    with pytest.raises(GitCommandError):
        client.run(["status"])


def test_client_requires_github_configuration(repo: Path) -> None:
    with pytest.raises(ConfigValidationError):
        GitClient(NgDevConfig(), base_dir=repo)


def test_remote_details_come_from_configuration(client: GitClient) -> None:
    assert client.remote_params == {"owner": "angular", "repo": "dev-infra"}
    assert client.main_branch_name == "main"
    assert client.get_repo_git_url() == "https://github.com/angular/dev-infra.git"


def test_current_branch_is_returned_when_attached(client: GitClient, run_git: Any) -> None:
    run_git(client.base_dir, "checkout", "--quiet", "-b", "feature")
    assert client.get_current_branch_or_revision() == "feature"


def test_current_revision_is_returned_when_detached(client: GitClient, run_git: Any) -> None:
    run_git(client.base_dir, "checkout", "--quiet", "--detach")
    revision = client.get_current_branch_or_revision()
    assert re.fullmatch(r"[0-9a-f]{40}", revision)
    assert revision == run_git(client.base_dir, "rev-parse", "HEAD")


def test_has_commit_checks_branch_history(client: GitClient, run_git: Any) -> None:
    repo = client.base_dir
    run_git(repo, "branch", "old")
    (repo / "new.txt").write_text("new\n", encoding="utf-8")
    run_git(repo, "add", "new.txt")
    run_git(repo, "commit", "--quiet", "-m", "feat: new")
    sha = run_git(repo, "rev-parse", "HEAD")
    assert client.has_commit("main", sha) is True
    assert client.has_commit("old", sha) is False


def test_regular_clone_is_not_shallow(client: GitClient) -> None:
    assert client.is_shallow_repo() is False


def test_uncommitted_changes_ignore_touched_files(client: GitClient) -> None:
    readme = client.base_dir / "README.md"
    assert client.has_uncommitted_changes() is False
    os.utime(readme, None)
    assert client.has_uncommitted_changes() is False
    readme.write_text("# Changed\n", encoding="utf-8")
    assert client.has_uncommitted_changes() is True


def test_checkout_with_clean_state_discards_changes(client: GitClient, run_git: Any) -> None:
    repo = client.base_dir
    run_git(repo, "branch", "other")
    (repo / "README.md").write_text("# Dirty\n", encoding="utf-8")
    assert client.checkout("other", clean_state=True) is True
    assert client.get_current_branch_or_revision() == "other"
    assert (repo / "README.md").read_text(encoding="utf-8") == "# Repo\n"


def test_checkout_reports_failure_of_final_step_only(client: GitClient) -> None:
    # Nothing is in progress, so every abort fails and is ignored.
    assert client.checkout("main", clean_state=True) is True
    assert client.checkout("missing-branch", clean_state=True) is False
    assert client.checkout("missing-branch", clean_state=False) is False


def test_checkout_clean_state_runs_cleanup_before_checkout(
    client: GitClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    calls: list[list[str]] = []

    def fake_run_graceful(args: list[str], **kwargs: Any) -> GitCommandResult:
        calls.append(list(args))
        returncode = 0 if args[0] == "checkout" else 128
        return GitCommandResult(returncode=returncode, stdout="", stderr="")

    monkeypatch.setattr(client, "run_graceful", fake_run_graceful)
    assert client.checkout("v1.0.0", clean_state=True) is True
    assert calls == [
        ["am", "--abort"],
        ["cherry-pick", "--abort"],
        ["rebase", "--abort"],
        ["reset", "--hard"],
        ["checkout", "v1.0.0"],
    ]


def test_changed_files_include_untracked_and_skip_deleted(client: GitClient, run_git: Any) -> None:
    repo = client.base_dir
    (repo / "gone.txt").write_text("bye\n", encoding="utf-8")
    run_git(repo, "add", "gone.txt")
    run_git(repo, "commit", "--quiet", "-m", "chore: add gone")
    (repo / "gone.txt").unlink()
    (repo / "README.md").write_text("# Changed\n", encoding="utf-8")
    (repo / "untracked.txt").write_text("new\n", encoding="utf-8")
    (repo / ".gitignore").write_text("ignored.log\n", encoding="utf-8")
    (repo / "ignored.log").write_text("noise\n", encoding="utf-8")

    files = client.all_changes_files_since("HEAD")
    assert sorted(files) == [".gitignore", "README.md", "untracked.txt"]


def test_changed_files_are_deduplicated(
    client: GitClient,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    outputs = {
        "diff": "a.txt\nshared.txt\n",
        "ls-files": "shared.txt\nb.txt\n",
    }

    def fake_run_graceful(args: list[str], **kwargs: Any) -> GitCommandResult:
        return GitCommandResult(returncode=0, stdout=outputs[args[0]], stderr="")

    monkeypatch.setattr(client, "run_graceful", fake_run_graceful)
    assert client.all_changes_files_since("main") == ["a.txt", "shared.txt", "b.txt"]


def test_staged_and_tracked_files(client: GitClient, run_git: Any) -> None:
    repo = client.base_dir
    (repo / "src").mkdir()
    (repo / "src" / "staged.py").write_text("x = 1\n", encoding="utf-8")
    run_git(repo, "add", "src/staged.py")
    assert client.all_staged_files() == ["src/staged.py"]
    assert sorted(client.all_files()) == ["README.md", "src/staged.py"]


def test_git_output_as_list_drops_blank_lines() -> None:
    result = GitCommandResult(returncode=0, stdout="  a.txt \n\n b.txt\n   \n", stderr="")
    assert git_output_as_list(result) == ["a.txt", "b.txt"]


def test_graceful_run_replaces_undecodable_output(client: GitClient, run_git: Any) -> None:
    repo = client.base_dir
    (repo / "bin.txt").write_bytes(b"\xff\xfe bad\n")
    run_git(repo, "add", "bin.txt")
    run_git(repo, "commit", "--quiet", "-m", "chore: add binary")

    result = client.run_graceful(["show", "HEAD:bin.txt"])
    assert result.returncode == 0
    assert result.stdout == "\ufffd\ufffd bad"
    assert client.run(["show", "HEAD:bin.txt"]).stdout == result.stdout
