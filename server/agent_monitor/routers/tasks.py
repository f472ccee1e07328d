"""Enriched agent task endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..app_state import MonitorState
from ..deps import get_monitor_state
from ..services.prompts import list_prompts

router = APIRouter(prefix="/api", tags=["tasks"])


@router.get("/agent-tasks")
async def get_agent_tasks(state: MonitorState = Depends(get_monitor_state)):
    """Enriched task list. A missing store is an empty list, a broken one a 500."""
    result = await state.pipeline.enrich_all_async()
    body: dict = {
        "tasks": [task.model_dump() for task in result.tasks],
        "source": result.source,
        "timestamp": result.timestamp,
        "summary": result.summary(),
    }
    if result.error:
        body["error"] = result.error
    status_code = 500 if result.errorKind == "malformed" else 200
    return JSONResponse(body, status_code=status_code)


@router.get("/prompts")
async def get_prompts(state: MonitorState = Depends(get_monitor_state)) -> dict:
    """Prompt files of the enriched tasks."""
    result = await state.pipeline.enrich_all_async()
    body: dict = {"prompts": list_prompts(result.tasks, state.paths)}
    if result.error:
        body["error"] = result.error
    return body
