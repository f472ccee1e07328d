"""Effective task status from declared status, tmux liveness and git ancestry.

Nothing is stored between polls. A task declared ``running`` whose tmux
session has died is resolved from git: committed work (landed or not) means
``completed``; no divergence from main means ``dead``. tmux dying by itself
says nothing, since it happens both on clean exit and on crash.

Known limitation: a worktree whose HEAD equals main with no exclusive
commits is ``dead``, even when a fast-forward merge erased every sign that
the branch ever diverged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import PathsConfig
from ..models.tasks import TaskStatus
from .git_probe import GitClient

logger = logging.getLogger(__name__)


@dataclass
class GitSignals:
    """Ancestry facts gathered for a task whose session is gone.

    Fields past the one that decided the outcome are left at their defaults.
    """

    worktree_exists: bool
    exclusive_commits: int = 0
    head_sha: str = ""
    main_sha: str = ""
    head_is_ancestor_of_main: bool = False
    branch: str | None = None
    branch_merged: bool = False
    branch_exists: bool = False


def infer_status(declared: str, tmux_alive: bool, signals: GitSignals | None) -> str:
    """Pure decision step. Only a declared ``running`` status is ever replaced."""
    if declared != TaskStatus.RUNNING.value:
        return declared
    if tmux_alive:
        return TaskStatus.RUNNING.value
    if signals is None:
        return TaskStatus.DEAD.value

    if signals.worktree_exists:
        if signals.exclusive_commits > 0:
            return TaskStatus.COMPLETED.value
        diverged = bool(signals.head_sha) and signals.head_sha != signals.main_sha
        if diverged and signals.head_is_ancestor_of_main:
            return TaskStatus.COMPLETED.value
        return TaskStatus.DEAD.value

    if signals.branch and (signals.branch_merged or signals.branch_exists):
        return TaskStatus.COMPLETED.value
    return TaskStatus.DEAD.value


def _merged_branches(git: GitClient, repo_dir: Path, main_branch: str) -> set[str]:
    output = git.run(["branch", "-a", "--merged", main_branch], repo_dir)
    names = set()
    for line in output.splitlines():
        # "* " marks the current branch, "+ " a branch checked out in a worktree
        name = line.strip().lstrip("*+").strip()
        if name:
            names.add(name)
    return names


def collect_git_signals(
    worktree_path: Path,
    branch: str | None,
    git: GitClient,
    paths: PathsConfig,
) -> GitSignals:
    """Query git cheapest-first, stopping once the outcome is settled."""
    main = paths.main_branch

    if worktree_path.is_dir():
        signals = GitSignals(worktree_exists=True, branch=branch)
        exclusive = git.run(["log", "--format=%H", "HEAD", "--not", main], worktree_path)
        signals.exclusive_commits = len([line for line in exclusive.splitlines() if line.strip()])
        if signals.exclusive_commits:
            return signals

        signals.head_sha = git.run(["rev-parse", "HEAD"], worktree_path)
        signals.main_sha = git.run(["rev-parse", main], worktree_path)
        if signals.head_sha and signals.head_sha != signals.main_sha:
            signals.head_is_ancestor_of_main = git.succeeds(
                ["merge-base", "--is-ancestor", "HEAD", main], worktree_path
            )
        return signals

    # Worktree removed, e.g. cleaned up after merge: ask the main checkout
    signals = GitSignals(worktree_exists=False, branch=branch)
    if not branch:
        return signals
    merged = _merged_branches(git, paths.repo_dir, main)
    signals.branch_merged = branch in merged or f"remotes/origin/{branch}" in merged
    if signals.branch_merged:
        return signals
    signals.branch_exists = bool(git.run(["rev-parse", "--verify", "--quiet", branch], paths.repo_dir))
    return signals


def resolve_status(
    declared: str,
    tmux_alive: bool,
    worktree_path: Path,
    branch: str | None,
    git: GitClient,
    paths: PathsConfig,
) -> str:
    """Effective status for one task. Any failure while probing gives ``dead``."""
    if declared != TaskStatus.RUNNING.value or tmux_alive:
        return infer_status(declared, tmux_alive, None)
    try:
        signals = collect_git_signals(worktree_path, branch, git, paths)
    except Exception:
        logger.exception("Status resolution failed for %s", worktree_path)
        return TaskStatus.DEAD.value
    return infer_status(declared, tmux_alive, signals)
