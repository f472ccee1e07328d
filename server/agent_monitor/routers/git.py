"""Per-directory git endpoints: status, single-commit diff, file changes."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from ..app_state import MonitorState
from ..deps import get_monitor_state
from ..services.file_changes import get_file_changes
from ..services.git_status import NotAGitRepositoryError, get_commit_diff, get_git_status

router = APIRouter(prefix="/api", tags=["git"])


@router.get("/git")
async def git_status(
    directory: str | None = Query(None, alias="dir", description="Repository or worktree directory"),
    state: MonitorState = Depends(get_monitor_state),
) -> dict:
    """Branch, clean flag, short status, recent commits and diff stat."""
    if not directory:
        raise HTTPException(status_code=400, detail="Missing 'dir' query parameter")

    loop = asyncio.get_running_loop()
    try:
        snapshot = await loop.run_in_executor(
            None, get_git_status, directory, state.git, state.commit_limit, state.paths.main_branch
        )
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except NotAGitRepositoryError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return snapshot.model_dump()


@router.get("/git-diff")
async def git_diff(
    directory: str | None = Query(None, alias="dir"),
    commit: str | None = Query(None, alias="hash", description="Commit hash, 7-40 hex characters"),
    state: MonitorState = Depends(get_monitor_state),
) -> dict:
    """Unified diff, per-file numstat and totals for one commit."""
    if not directory or not commit:
        raise HTTPException(status_code=400, detail="Missing 'dir' or 'hash' query parameter")

    loop = asyncio.get_running_loop()
    try:
        result = await loop.run_in_executor(None, get_commit_diff, directory, commit, state.git)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except (FileNotFoundError, LookupError) as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return result.model_dump()


@router.get("/file-changes")
async def file_changes(
    directory: str | None = Query(None, alias="dir"),
    state: MonitorState = Depends(get_monitor_state),
) -> dict:
    """Aggregated committed, staged, unstaged and untracked changes."""
    if not directory:
        raise HTTPException(status_code=400, detail="Missing 'dir' query parameter")

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, get_file_changes, directory, state.git, state.paths.main_branch)
    if result is None:
        raise HTTPException(status_code=404, detail=f"Could not read file changes for {directory}")

    data = result.model_dump()
    data["timestamp"] = datetime.now(timezone.utc).isoformat()
    return data
