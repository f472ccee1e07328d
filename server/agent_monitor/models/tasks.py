"""Task and file-change models matching the dashboard TypeScript types."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    DEAD = "dead"
    UNKNOWN = "unknown"

    @classmethod
    def categorize(cls, value: str | None) -> TaskStatus:
        """Map a free-form declared status onto one of the six states."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return _STATUS_ALIASES.get(value, cls.UNKNOWN)


_STATUS_ALIASES = {
    "done": TaskStatus.COMPLETED,
    "ready_for_review": TaskStatus.COMPLETED,
    "ci_failed": TaskStatus.FAILED,
    "ci_pending": TaskStatus.PENDING,
}


class FileChange(BaseModel):
    path: str
    additions: int = 0
    deletions: int = 0

    @property
    def total(self) -> int:
        return self.additions + self.deletions


class FileChangesResult(BaseModel):
    directory: str
    files: list[FileChange] = []
    totalFiles: int = 0
    totalAdditions: int = 0
    totalDeletions: int = 0

    @classmethod
    def from_files(cls, directory: str, files: list[FileChange]) -> FileChangesResult:
        return cls(
            directory=directory,
            files=files,
            totalFiles=len(files),
            totalAdditions=sum(f.additions for f in files),
            totalDeletions=sum(f.deletions for f in files),
        )


class Task(BaseModel):
    """One spawned coding-agent attempt.

    Fields not listed here are kept as extras and dumped back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str | None = None
    agent: str | None = None
    model: str | None = None
    branch: str | None = None
    description: str | None = None
    startedAt: str | int | float | None = None
    completedAt: str | int | float | None = None
    status: str = TaskStatus.UNKNOWN.value
    worktree: str | None = None
    tmuxSession: str | None = None
    promptFile: str | None = None

    # Enriched on every poll, never written back to the store
    tmuxAlive: bool = False
    worktreePath: str | None = None
    declaredStatus: str | None = None
    liveFileCount: int | None = None
    liveAdditions: int | None = None
    liveDeletions: int | None = None
    liveFiles: list[FileChange] | None = None

    @field_validator(
        "name", "agent", "model", "branch", "description", "worktree", "tmuxSession", "promptFile",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: object) -> str | None:
        # The store is written by external tooling; numbers and flags become text
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return str(value)
        return None

    @field_validator("startedAt", "completedAt", mode="before")
    @classmethod
    def _coerce_timestamp(cls, value: object) -> str | int | float | None:
        if value is None or isinstance(value, (str, int, float)):
            return value
        return None

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value: object) -> str:
        if value is None or value == "":
            return TaskStatus.UNKNOWN.value
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)

    @property
    def session_name(self) -> str:
        return self.tmuxSession or self.id

    @property
    def worktree_name(self) -> str:
        return self.worktree or self.id


class EnrichmentResult(BaseModel):
    tasks: list[Task] = []
    source: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    error: str | None = None
    errorKind: str | None = None  # "missing" | "malformed"
    fileChanges: dict[str, FileChangesResult] = {}

    def summary(self) -> dict:
        """Count tasks per status category, plus live tmux sessions."""
        counts = {status.value: 0 for status in TaskStatus}
        for task in self.tasks:
            counts[TaskStatus.categorize(task.status).value] += 1
        counts["total"] = len(self.tasks)
        counts["tmuxAlive"] = sum(1 for t in self.tasks if t.tmuxAlive)
        return counts
