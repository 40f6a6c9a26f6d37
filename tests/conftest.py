"""Shared fixtures for ng-dev tests."""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from ng_dev.config import GithubConfig, NgDevConfig, PullRequestConfig
from ng_dev.dry_run import DRY_RUN_ENV_VAR
from ng_dev.git.authenticated import AuthenticatedGitClient
from ng_dev.git.client import GitClient, unauthenticated_client

RunGit = Callable[..., str]


def _run_git(repo: Path, *args: str) -> str:
    completed = subprocess.run(
        ["git", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout.strip()


@pytest.fixture(autouse=True)
def _isolate_process_state() -> Iterator[None]:
    os.environ.pop(DRY_RUN_ENV_VAR, None)
    yield
    os.environ.pop(DRY_RUN_ENV_VAR, None)
    unauthenticated_client.reset()
    AuthenticatedGitClient.reset()
    logger = logging.getLogger("ng_dev")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def run_git() -> RunGit:
    return _run_git


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    _run_git(path, "init", "--quiet")
    _run_git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    _run_git(path, "config", "user.email", "dev@example.com")
    _run_git(path, "config", "user.name", "Dev")
    _run_git(path, "config", "commit.gpgsign", "false")
    (path / "README.md").write_text("# Repo\n", encoding="utf-8")
    _run_git(path, "add", "README.md")
    _run_git(path, "commit", "--quiet", "-m", "chore: init")
    return path


@pytest.fixture
def ng_dev_config() -> NgDevConfig:
    return NgDevConfig(
        github=GithubConfig(owner="angular", name="dev-infra"),
        pull_request=PullRequestConfig(),
    )


@pytest.fixture
def client(repo: Path, ng_dev_config: NgDevConfig) -> GitClient:
    return GitClient(ng_dev_config, base_dir=repo, dry_run=lambda: False)
