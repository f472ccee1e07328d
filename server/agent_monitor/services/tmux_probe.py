"""tmux session liveness probe."""

from __future__ import annotations

import logging
import subprocess
from typing import Protocol

logger = logging.getLogger(__name__)

DEFAULT_TMUX_TIMEOUT = 3.0


class TmuxClient(Protocol):
    def is_session_alive(self, name: str) -> bool: ...


def is_session_alive(name: str, timeout: float = DEFAULT_TMUX_TIMEOUT) -> bool:
    """Return True only if ``tmux has-session`` exits cleanly for ``name``.

    "No such session", a missing tmux binary and a timeout are all False.
    The ``=`` prefix asks tmux for an exact name match instead of a prefix.
    """
    if not name:
        return False
    try:
        result = subprocess.run(
            ["tmux", "has-session", "-t", f"={name}"],
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.debug("tmux has-session timed out for %r", name)
        return False
    except (OSError, subprocess.SubprocessError, ValueError) as exc:
        logger.debug("tmux has-session failed for %r: %s", name, exc)
        return False
    return result.returncode == 0


class SubprocessTmuxClient:
    """TmuxClient backed by the real tmux binary."""

    def __init__(self, timeout: float = DEFAULT_TMUX_TIMEOUT) -> None:
        self.timeout = timeout

    def is_session_alive(self, name: str) -> bool:
        return is_session_alive(name, self.timeout)
