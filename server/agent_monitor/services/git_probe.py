"""Read-only git subprocess wrapper.

Every call collapses failure (non-zero exit, timeout, missing directory, git
not installed, not a repository) into an empty string or ``False``. Callers
compose many of these calls and treat "empty" as "signal absent".
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 10.0

# Queries must never take index locks or wait on a credential prompt
_GIT_ENV = {
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
}


class GitClient(Protocol):
    def run(self, args: Sequence[str], cwd: str | Path, timeout: float | None = None) -> str: ...

    def succeeds(self, args: Sequence[str], cwd: str | Path, timeout: float | None = None) -> bool: ...


def _invoke(args: Sequence[str], cwd: str | Path, timeout: float) -> subprocess.CompletedProcess | None:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
            env={**os.environ, **_GIT_ENV},
        )
    except subprocess.TimeoutExpired:
        logger.debug("git %s timed out after %.1fs in %s", " ".join(args), timeout, cwd)
    except (OSError, subprocess.SubprocessError, ValueError) as exc:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, exc)
    return None


def run_git(args: Sequence[str], cwd: str | Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> str:
    """Run ``git <args>`` in ``cwd`` and return stripped stdout, or "" on any failure."""
    result = _invoke(args, cwd, timeout)
    if result is None:
        return ""
    if result.returncode != 0:
        logger.debug("git %s exited %d in %s: %s", " ".join(args), result.returncode, cwd, result.stderr.strip())
        return ""
    return result.stdout.strip()


def git_succeeds(args: Sequence[str], cwd: str | Path, timeout: float = DEFAULT_GIT_TIMEOUT) -> bool:
    """True only when ``git <args>`` exits zero. For checks that print nothing."""
    result = _invoke(args, cwd, timeout)
    return result is not None and result.returncode == 0


class SubprocessGitClient:
    """GitClient backed by the real git binary."""

    def __init__(self, timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        self.timeout = timeout

    def run(self, args: Sequence[str], cwd: str | Path, timeout: float | None = None) -> str:
        return run_git(args, cwd, timeout or self.timeout)

    def succeeds(self, args: Sequence[str], cwd: str | Path, timeout: float | None = None) -> bool:
        return git_succeeds(args, cwd, timeout or self.timeout)
