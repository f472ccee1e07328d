"""Update events pushed to dashboards over SSE and WebSocket."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from .git_status import get_git_status

if TYPE_CHECKING:
    from ..app_state import MonitorState

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def collect_update(state: MonitorState) -> dict:
    """Run a full enrichment pass plus the repository's git status."""
    result = state.pipeline.enrich_all()

    try:
        git = get_git_status(
            state.paths.repo_dir,
            state.git,
            commit_limit=state.commit_limit,
            main_branch=state.paths.main_branch,
        ).model_dump()
    except (FileNotFoundError, RuntimeError) as exc:
        logger.debug("No git status for %s: %s", state.paths.repo_dir, exc)
        git = None

    return {
        "type": "update",
        "timestamp": result.timestamp,
        "tasks": [task.model_dump() for task in result.tasks],
        "fileChanges": {path: changes.model_dump() for path, changes in result.fileChanges.items()},
        "git": git,
        "summary": result.summary(),
        "error": result.error,
    }


def collect_update_safe(state: MonitorState) -> dict:
    """Like collect_update, but failures become an ``error`` event."""
    try:
        return collect_update(state)
    except Exception as exc:
        logger.exception("Failed to collect update")
        return {"type": "error", "timestamp": _now(), "message": f"Failed to collect data: {exc}"}


async def collect_update_async(state: MonitorState) -> dict:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, collect_update_safe, state)


def format_sse(event: dict) -> str:
    return f"data: {json.dumps(event)}\n\n"
