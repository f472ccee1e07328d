"""FastAPI application for the Agent Monitor."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import config
from .services.events import collect_update_async
from .ws.manager import ws_manager

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    from .app_state import monitor

    logger.info("Agent Monitor starting on %s:%d", config.host, config.port)
    monitor.log_paths()

    # Start the WebSocket background poller
    ws_manager.start_poller()

    yield

    ws_manager.stop_poller()
    logger.info("Agent Monitor stopped")


app = FastAPI(
    title="Agent Monitor",
    description="Task status and file changes of coding agents running in git worktrees",
    version=__version__,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from .routers.events import router as events_router
from .routers.git import router as git_router
from .routers.health import router as health_router
from .routers.tasks import router as tasks_router

app.include_router(health_router)
app.include_router(tasks_router)
app.include_router(git_router)
app.include_router(events_router)


@app.websocket("/api/ws")
async def websocket_endpoint(ws: WebSocket):
    """WebSocket endpoint for real-time task updates.

    Sends the current snapshot on connect, then whatever the poller broadcasts.
    """
    from .app_state import monitor

    await ws_manager.connect(ws)
    try:
        await ws.send_json(await collect_update_async(monitor))
        while True:
            # We don't expect client messages, but reading detects disconnects
            await ws.receive_text()
    except WebSocketDisconnect:
        ws_manager.disconnect(ws)
    except Exception:
        ws_manager.disconnect(ws)


def main() -> None:
    """Run the monitor with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
