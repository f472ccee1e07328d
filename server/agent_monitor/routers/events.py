"""Server-sent event stream of task updates."""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ..app_state import MonitorState
from ..deps import get_monitor_state
from ..services.events import collect_update_async, format_sse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["events"])


@router.get("/events")
async def events(request: Request, state: MonitorState = Depends(get_monitor_state)) -> StreamingResponse:
    """Send an update immediately, then one every poll interval until the client leaves."""

    async def stream():
        while True:
            event = await collect_update_async(state)
            yield format_sse(event)
            await asyncio.sleep(state.poll_interval)
            if await request.is_disconnected():
                logger.info("Event stream client disconnected")
                break

    return StreamingResponse(
        stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )
