"""WebSocket connection manager with a background polling loop."""

from __future__ import annotations

import asyncio
import json
import logging

from fastapi import WebSocket

from ..services.events import collect_update_async

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks dashboard WebSockets and broadcasts task updates to them."""

    def __init__(self) -> None:
        self._connections: list[WebSocket] = []
        self._poller_task: asyncio.Task | None = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self._connections.append(ws)
        logger.info("WebSocket client connected (%d total)", len(self._connections))

    def disconnect(self, ws: WebSocket) -> None:
        if ws in self._connections:
            self._connections.remove(ws)
        logger.info("WebSocket client disconnected (%d total)", len(self._connections))

    async def broadcast(self, event: dict) -> None:
        """Send an event to every connected client, dropping dead sockets."""
        if not self._connections:
            return

        message = json.dumps(event)
        disconnected: list[WebSocket] = []

        for ws in list(self._connections):
            try:
                await ws.send_text(message)
            except Exception:
                disconnected.append(ws)

        for ws in disconnected:
            self.disconnect(ws)

    def start_poller(self) -> None:
        """Start the background polling task."""
        if self._poller_task is None or self._poller_task.done():
            self._poller_task = asyncio.create_task(self._poll_loop())
            logger.info("Background poller started")

    def stop_poller(self) -> None:
        """Stop the background polling task."""
        if self._poller_task and not self._poller_task.done():
            self._poller_task.cancel()
            logger.info("Background poller stopped")

    async def _poll_loop(self) -> None:
        """Re-run enrichment every poll interval and broadcast when it changed."""
        from ..app_state import monitor

        last_payload: dict | None = None

        while True:
            try:
                await asyncio.sleep(monitor.poll_interval)

                if not self._connections:
                    continue

                event = await collect_update_async(monitor)
                if event["type"] == "error":
                    await self.broadcast(event)
                    continue

                payload = {k: v for k, v in event.items() if k != "timestamp"}
                if payload != last_payload:
                    last_payload = payload
                    await self.broadcast(event)

            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.error("Poller error: %s", exc)
                await asyncio.sleep(monitor.poll_interval)


# Singleton
ws_manager = ConnectionManager()
