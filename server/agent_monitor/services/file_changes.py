"""Detect all file changes in an agent worktree.

Changes are collected in four layers and merged into one map keyed by path:

  1. Committed: ``diff --numstat <base>..HEAD`` for the first base in the
     cascade merge-base(main), merge-base(origin/main), parent of the fork
     commit, root commit whose diff is non-empty.
  2. Staged: ``diff --cached --numstat``
  3. Unstaged: ``diff --numstat``
  4. Untracked: ``ls-files --others --exclude-standard`` (recorded as 0/0)

Counts for a path seen in several layers are summed. The result answers
"how much has this worktree touched each file", not "what is the current diff".
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

from ..models.tasks import FileChange, FileChangesResult
from .git_probe import GitClient, SubprocessGitClient

logger = logging.getLogger(__name__)


def _count(value: str) -> int:
    # Binary files report "-" for both columns
    if value == "-":
        return 0
    try:
        return max(int(value), 0)
    except ValueError:
        return 0


def parse_numstat(output: str, changes: dict[str, FileChange]) -> None:
    """Merge ``git diff --numstat`` output into ``changes``, summing per path.

    Everything after the second tab is one opaque path, so rename notation
    like ``src/{a.py => b.py}`` is kept as-is.
    """
    if not output:
        return
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 2)
        if len(parts) < 3 or not parts[2]:
            continue
        additions, deletions, path = _count(parts[0]), _count(parts[1]), parts[2]

        existing = changes.get(path)
        if existing:
            existing.additions += additions
            existing.deletions += deletions
        else:
            changes[path] = FileChange(path=path, additions=additions, deletions=deletions)


def _first_line(output: str) -> str:
    return output.splitlines()[0].strip() if output else ""


def _fork_point_base(git: GitClient, cwd: Path, main_branch: str) -> str:
    """Parent of the first commit on HEAD that neither main nor origin/main reaches."""
    exclude = [
        ref
        for ref in (main_branch, f"origin/{main_branch}")
        if git.run(["rev-parse", "--verify", "--quiet", ref], cwd)
    ]
    first = _first_line(git.run(["rev-list", "--reverse", "HEAD", "--not", *exclude], cwd))
    if not first:
        return ""
    return git.run(["rev-parse", "--verify", "--quiet", f"{first}^"], cwd)


def _base_candidates(git: GitClient, cwd: Path, main_branch: str) -> Iterator[str]:
    """Candidate bases for the committed diff, most specific first."""
    yield git.run(["merge-base", main_branch, "HEAD"], cwd)
    yield git.run(["merge-base", f"origin/{main_branch}", "HEAD"], cwd)
    yield _fork_point_base(git, cwd, main_branch)
    # Last resort when no trunk relationship exists: everything since the root
    yield git.run(["rev-list", "--max-parents=0", "HEAD"], cwd)


def committed_numstat(git: GitClient, cwd: Path, main_branch: str = "main") -> str:
    """Numstat of the branch's committed work.

    Each candidate base is diffed against HEAD in turn and the first
    non-empty output wins. Later candidates are only resolved when needed.
    Returns "" when no candidate yields any changes.
    """
    for candidate in _base_candidates(git, cwd, main_branch):
        base = _first_line(candidate)
        if not base:
            continue
        output = git.run(["diff", "--numstat", f"{base}..HEAD"], cwd)
        if output.strip():
            return output
    return ""


def get_file_changes(
    directory: str | Path,
    git: GitClient | None = None,
    main_branch: str = "main",
) -> FileChangesResult | None:
    """Aggregate changed files in ``directory``.

    Returns None if the directory does not exist or anything unexpected
    goes wrong; never a partial result.
    """
    cwd = Path(directory)
    if not cwd.exists():
        return None

    git = git or SubprocessGitClient()
    try:
        changes: dict[str, FileChange] = {}

        # 1. Committed changes vs trunk
        parse_numstat(committed_numstat(git, cwd, main_branch), changes)

        # 2. Staged, 3. unstaged
        parse_numstat(git.run(["diff", "--cached", "--numstat"], cwd), changes)
        parse_numstat(git.run(["diff", "--numstat"], cwd), changes)

        # 4. Untracked files: existence only, no line counts
        for path in git.run(["ls-files", "--others", "--exclude-standard"], cwd).splitlines():
            if path.strip() and path not in changes:
                changes[path] = FileChange(path=path, additions=0, deletions=0)

        # Stable sort keeps discovery order for ties
        files = sorted(changes.values(), key=lambda f: f.total, reverse=True)
        return FileChangesResult.from_files(str(directory), files)
    except Exception:
        logger.exception("File change detection failed for %s", directory)
        return None
