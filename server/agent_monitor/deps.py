"""FastAPI dependencies."""

from __future__ import annotations

from .app_state import MonitorState, monitor


async def get_monitor_state() -> MonitorState:
    """Resolve the shared monitor state (overridden in tests)."""
    return monitor
