"""Task enrichment pipeline: tmux + git state merged onto every stored task."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ..config import PathsConfig
from ..models.tasks import EnrichmentResult, FileChangesResult, Task
from .file_changes import get_file_changes
from .git_probe import GitClient, SubprocessGitClient
from .status_inference import resolve_status
from .task_store import TaskStoreError, TaskStoreNotFoundError, load_task_records, parse_tasks
from .tmux_probe import SubprocessTmuxClient, TmuxClient

logger = logging.getLogger(__name__)


class TaskEnrichmentPipeline:
    """Recomputes derived task fields from live state on every call.

    Shared by the polling endpoint, the event stream and the prompt listing
    so the status heuristics live in exactly one place.
    """

    def __init__(
        self,
        paths: PathsConfig,
        git: GitClient | None = None,
        tmux: TmuxClient | None = None,
    ) -> None:
        self.paths = paths
        self.git = git or SubprocessGitClient(timeout=paths.git_timeout)
        self.tmux = tmux or SubprocessTmuxClient(timeout=paths.tmux_timeout)

    def load_tasks(self) -> list[Task]:
        """Raises TaskStoreError if the store is missing or unusable."""
        return parse_tasks(load_task_records(self.paths.task_store_path))

    def worktree_path(self, task: Task) -> Path:
        return self.paths.worktree_base_dir / task.worktree_name

    def enrich_task(self, task: Task) -> tuple[Task, FileChangesResult | None]:
        """Return an enriched copy of ``task`` and its file changes, if any."""
        worktree = self.worktree_path(task)
        tmux_alive = self.tmux.is_session_alive(task.session_name)
        status = resolve_status(task.status, tmux_alive, worktree, task.branch, self.git, self.paths)

        update: dict = {
            "tmuxAlive": tmux_alive,
            "worktreePath": str(worktree),
            "declaredStatus": task.status,
            "status": status,
        }

        changes = None
        if worktree.exists():
            changes = get_file_changes(worktree, self.git, self.paths.main_branch)
        if changes is not None:
            update.update(
                liveFileCount=changes.totalFiles,
                liveAdditions=changes.totalAdditions,
                liveDeletions=changes.totalDeletions,
                liveFiles=changes.files,
            )

        if status != task.status:
            logger.debug("Task %s: declared %s, inferred %s", task.id, task.status, status)
        return task.model_copy(update=update), changes

    def enrich_all(self) -> EnrichmentResult:
        """Enrich every stored task. Never raises; store problems become ``error``."""
        source = str(self.paths.task_store_path)
        try:
            tasks = self.load_tasks()
        except TaskStoreNotFoundError as exc:
            return EnrichmentResult(source=source, error=str(exc), errorKind="missing")
        except TaskStoreError as exc:
            logger.warning("Task store unusable: %s", exc)
            return EnrichmentResult(source=source, error=str(exc), errorKind="malformed")

        enriched: list[Task] = []
        file_changes: dict[str, FileChangesResult] = {}
        for task in tasks:
            try:
                task, changes = self.enrich_task(task)
            except Exception:
                logger.exception("Enrichment failed for task %s", task.id)
            else:
                if changes is not None and task.worktreePath:
                    file_changes[task.worktreePath] = changes
            enriched.append(task)

        return EnrichmentResult(tasks=enriched, source=source, fileChanges=file_changes)

    async def enrich_all_async(self) -> EnrichmentResult:
        """Run a full pass off the event loop; probes stay sequential."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.enrich_all)
