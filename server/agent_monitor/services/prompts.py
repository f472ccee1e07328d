"""Prompt files of spawned tasks."""

from __future__ import annotations

import logging
from pathlib import Path

from ..config import PathsConfig
from ..models.tasks import Task

logger = logging.getLogger(__name__)


def prompt_path(task: Task, paths: PathsConfig) -> Path | None:
    """The task's ``promptFile`` (relative to the repo), else ``<prompts_dir>/<id>.md``."""
    if task.promptFile:
        candidate = Path(task.promptFile)
        return candidate if candidate.is_absolute() else paths.repo_dir / candidate
    if paths.prompts_dir is None:
        return None
    return paths.prompts_dir / f"{task.id}.md"


def list_prompts(tasks: list[Task], paths: PathsConfig) -> list[dict]:
    prompts = []
    for task in tasks:
        path = prompt_path(task, paths)
        if path is None or not path.is_file():
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable prompt %s: %s", path, exc)
            continue
        prompts.append({
            "taskId": task.id,
            "name": task.description or task.name or task.id,
            "filename": path.name,
            "content": content,
            "agent": task.agent,
            "status": task.status,
            "timestamp": task.startedAt,
        })
    return prompts
