"""Shared fixtures: in-memory git/tmux clients and temporary monitor paths."""

from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from agent_monitor.config import PathsConfig


class FakeGitClient:
    """Answers git queries from a table keyed by the argument tuple."""

    def __init__(self, responses: dict | None = None, successes: set | None = None) -> None:
        self.responses = {tuple(k): v for k, v in (responses or {}).items()}
        self.successes = {tuple(s) for s in (successes or set())}
        self.calls: list[tuple[tuple[str, ...], str]] = []

    def run(self, args, cwd, timeout=None) -> str:
        self.calls.append((tuple(args), str(cwd)))
        return self.responses.get(tuple(args), "")

    def succeeds(self, args, cwd, timeout=None) -> bool:
        self.calls.append((tuple(args), str(cwd)))
        return tuple(args) in self.successes

    def called(self, *args: str) -> bool:
        return any(call_args == args for call_args, _ in self.calls)


class ExplodingGitClient:
    def run(self, args, cwd, timeout=None) -> str:
        raise RuntimeError("git exploded")

    def succeeds(self, args, cwd, timeout=None) -> bool:
        raise RuntimeError("git exploded")


class FakeTmuxClient:
    def __init__(self, alive: set[str] | None = None) -> None:
        self.alive = alive or set()
        self.queried: list[str] = []

    def is_session_alive(self, name: str) -> bool:
        self.queried.append(name)
        return name in self.alive


@pytest.fixture
def monitor_paths(tmp_path) -> PathsConfig:
    repo = tmp_path / "repo"
    worktrees = tmp_path / "worktrees"
    prompts = tmp_path / "prompts"
    for d in (repo, worktrees, prompts):
        d.mkdir()
    return PathsConfig(
        task_store_path=tmp_path / "active-tasks.json",
        worktree_base_dir=worktrees,
        repo_dir=repo,
        prompts_dir=prompts,
    )


# ── Real git repositories ────────────────────────────────────────────────

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

_GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test Agent",
    "GIT_AUTHOR_EMAIL": "agent@example.com",
    "GIT_COMMITTER_NAME": "Test Agent",
    "GIT_COMMITTER_EMAIL": "agent@example.com",
}


def git(cwd: Path, *args: str) -> str:
    """Run a mutating git command for test setup."""
    result = subprocess.run(
        ["git", "-c", "commit.gpgsign=false", "-c", "core.hooksPath=/dev/null", *args],
        cwd=str(cwd),
        capture_output=True,
        text=True,
        check=True,
        env={**os.environ, **_GIT_IDENTITY},
    )
    return result.stdout.strip()


def commit_file(repo: Path, relpath: str, content: str | bytes, message: str) -> None:
    path = repo / relpath
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content)
    git(repo, "add", relpath)
    git(repo, "commit", "-q", "-m", message)


def init_repo(path: Path) -> Path:
    """A repository on ``main`` with one commit."""
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    commit_file(path, "README.md", "# project\n", "initial commit")
    return path
