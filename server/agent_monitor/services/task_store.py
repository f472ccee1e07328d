"""Read-only access to the active-tasks JSON store written by the spawn script."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from ..models.tasks import Task

logger = logging.getLogger(__name__)


class TaskStoreError(Exception):
    """The task store could not be used."""


class TaskStoreNotFoundError(TaskStoreError):
    pass


class TaskStoreFormatError(TaskStoreError):
    pass


def load_task_records(path: Path) -> list[dict]:
    """Return raw task records from ``path``.

    Accepts either a bare array or ``{"tasks": [...]}``.
    """
    if not path.exists():
        raise TaskStoreNotFoundError(f"Task store not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise TaskStoreFormatError(f"Invalid JSON in {path}: {exc}") from exc
    except OSError as exc:
        raise TaskStoreError(f"Cannot read {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("tasks")
    if not isinstance(data, list):
        raise TaskStoreFormatError(f"Expected a task array or {{\"tasks\": [...]}} in {path}")
    return data


def parse_tasks(records: list) -> list[Task]:
    """Build Task models, skipping records without a usable id."""
    tasks = []
    for index, record in enumerate(records):
        if not isinstance(record, dict) or not isinstance(record.get("id"), str) or not record["id"]:
            logger.warning("Skipping task record %d: missing string id", index)
            continue
        try:
            tasks.append(Task(**record))
        except ValidationError as exc:
            # Keep the task; only the offending fields are dropped
            bad = {err["loc"][0] for err in exc.errors() if err["loc"]} - {"id"}
            logger.warning("Task %s: ignoring invalid fields %s", record["id"], sorted(map(str, bad)))
            try:
                tasks.append(Task(**{k: v for k, v in record.items() if k not in bad}))
            except ValidationError as retry_exc:
                logger.warning("Skipping task %s: %s", record["id"], retry_exc)
    return tasks
