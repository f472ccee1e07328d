"""Single-directory git status snapshot and single-commit diff."""

from __future__ import annotations

import os
import re
from pathlib import Path

from ..models.git import BranchInfo, CommitDiff, DiffStats, GitCommit, GitStatusSnapshot
from ..models.tasks import FileChange
from .file_changes import parse_numstat
from .git_probe import GitClient, SubprocessGitClient

# SHA-1 empty tree, used when the repository cannot hash one itself
EMPTY_TREE = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"

COMMIT_HASH_RE = re.compile(r"^[0-9a-fA-F]{7,40}$")

# Unit separator keeps "|" and friends in commit subjects intact
_SEP = "\x1f"
_LOG_FORMAT = _SEP.join(["%H", "%P", "%s", "%an", "%ar", "%D"])
_BRANCH_FORMAT = _SEP.join(["%(refname:short)", "%(objectname:short)", "%(upstream:track)"])


class NotAGitRepositoryError(RuntimeError):
    """The directory exists but is not inside a git work tree."""


def _check_repository(git: GitClient, cwd: Path) -> None:
    if not cwd.is_dir():
        raise FileNotFoundError(f"Directory not found: {cwd}")
    if git.run(["rev-parse", "--is-inside-work-tree"], cwd) != "true":
        raise NotAGitRepositoryError(f"Not a git repository: {cwd}")


def _parse_commits(output: str) -> list[GitCommit]:
    commits = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(_SEP)
        parts += [""] * (6 - len(parts))
        commits.append(
            GitCommit(
                hash=parts[0],
                parents=parts[1].split(),
                message=parts[2],
                author=parts[3],
                time=parts[4],
                refs=[ref.strip() for ref in parts[5].split(",") if ref.strip()],
            )
        )
    return commits


def _parse_branches(output: str, current: str) -> list[BranchInfo]:
    branches = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split(_SEP)
        parts += [""] * (3 - len(parts))
        name = parts[0]
        if not name or name.startswith("origin/"):
            continue
        branches.append(BranchInfo(name=name, commit=parts[1], tracking=parts[2], isHead=name == current))
    return branches


def get_git_status(
    directory: str | Path,
    git: GitClient | None = None,
    commit_limit: int = 20,
    main_branch: str = "main",
) -> GitStatusSnapshot:
    """Describe the branch, working tree and recent history of ``directory``.

    Raises FileNotFoundError or NotAGitRepositoryError; individual git
    queries that fail just leave their part of the snapshot empty.
    """
    cwd = Path(directory)
    git = git or SubprocessGitClient()
    _check_repository(git, cwd)

    branch = git.run(["rev-parse", "--abbrev-ref", "HEAD"], cwd)
    status = git.run(["status", "--short"], cwd)
    log = git.run(["log", "--all", f"--format={_LOG_FORMAT}", f"-{commit_limit}"], cwd)
    diff_stat = git.run(["diff", "--stat"], cwd)
    branches = _parse_branches(git.run(["branch", "-a", f"--format={_BRANCH_FORMAT}"], cwd), branch)

    names = {b.name for b in branches}
    if main_branch in names:
        trunk = main_branch
    elif "master" in names:
        trunk = "master"
    else:
        trunk = branch

    merged = set()
    if trunk:
        for line in git.run(["branch", "--merged", trunk], cwd).splitlines():
            name = line.strip().lstrip("*+").strip()
            if name:
                merged.add(name)
    for b in branches:
        b.merged = b.name in merged

    changed = [line for line in status.splitlines() if line.strip()]
    return GitStatusSnapshot(
        directory=str(directory),
        branch=branch,
        clean=not changed,
        changedFiles=len(changed),
        status=status or "(clean)",
        recentCommits=_parse_commits(log),
        branches=branches,
        mainBranch=trunk,
        diffStat=diff_stat or "(no changes)",
    )


def _empty_tree(git: GitClient, cwd: Path) -> str:
    # Hashing /dev/null also works for SHA-256 repositories
    return git.run(["hash-object", "-t", "tree", os.devnull], cwd) or EMPTY_TREE


def get_commit_diff(directory: str | Path, commit: str, git: GitClient | None = None) -> CommitDiff:
    """Unified diff and numstat for one commit against its first parent.

    Root commits are compared with the empty tree.
    """
    if not COMMIT_HASH_RE.match(commit):
        raise ValueError("Invalid commit hash format")
    cwd = Path(directory)
    if not cwd.is_dir():
        raise FileNotFoundError(f"Directory not found: {cwd}")

    git = git or SubprocessGitClient()
    if not git.run(["rev-parse", "--verify", "--quiet", f"{commit}^{{commit}}"], cwd):
        raise LookupError(f"Commit not found: {commit}")

    is_root = not git.run(["rev-parse", "--verify", "--quiet", f"{commit}^"], cwd)
    base = _empty_tree(git, cwd) if is_root else f"{commit}^"

    diff = git.run(["diff", f"{base}..{commit}"], cwd)
    changes: dict[str, FileChange] = {}
    parse_numstat(git.run(["diff", "--numstat", f"{base}..{commit}"], cwd), changes)
    files = list(changes.values())

    return CommitDiff(
        diff=diff,
        files=files,
        stats=DiffStats(
            filesChanged=len(files),
            additions=sum(f.additions for f in files),
            deletions=sum(f.deletions for f in files),
        ),
    )
