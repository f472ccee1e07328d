"""Health check endpoint."""

from __future__ import annotations

import shutil

from fastapi import APIRouter, Depends

from .. import __version__
from ..app_state import MonitorState
from ..deps import get_monitor_state

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check(state: MonitorState = Depends(get_monitor_state)) -> dict:
    """Report whether the probes' binaries and the task store are available."""
    git_path = shutil.which("git")
    tmux_path = shutil.which("tmux")
    store = state.paths.task_store_path
    return {
        "status": "ok" if git_path else "degraded",
        "version": __version__,
        "git": git_path is not None,
        "tmux": tmux_path is not None,
        "taskStore": {
            "path": str(store),
            "exists": store.exists(),
        },
    }
