"""Environment-based configuration for the Agent Monitor."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PathsConfig:
    """Filesystem and git settings handed to the enrichment pipeline.

    The inference engine never reads the environment itself; everything it
    needs to locate tasks, worktrees and trunk arrives through this object.
    """

    task_store_path: Path
    worktree_base_dir: Path
    repo_dir: Path
    main_branch: str = "main"
    prompts_dir: Path | None = None
    git_timeout: float = 10.0
    tmux_timeout: float = 3.0


class MonitorConfig:
    """Monitor configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.project_dir = Path(os.environ.get("PROJECT_DIR", os.getcwd()))
        self.host = os.environ.get("AGENT_MONITOR_HOST", "127.0.0.1")
        self.port = int(os.environ.get("AGENT_MONITOR_PORT", "8080"))

        # Derived paths
        self.clawdbot_dir = self.project_dir / ".clawdbot"
        self.task_store_path = Path(
            os.environ.get("AGENT_MONITOR_TASK_STORE", self.clawdbot_dir / "active-tasks.json")
        )
        self.worktree_base_dir = Path(
            os.environ.get(
                "AGENT_MONITOR_WORKTREE_BASE",
                self.project_dir.parent / f"{self.project_dir.name}-worktrees",
            )
        )
        self.prompts_dir = Path(os.environ.get("AGENT_MONITOR_PROMPTS_DIR", self.clawdbot_dir / "prompts"))
        self.main_branch = os.environ.get("AGENT_MONITOR_MAIN_BRANCH", "main")

        # Subprocess timeouts (seconds)
        self.git_timeout = float(os.environ.get("AGENT_MONITOR_GIT_TIMEOUT", "10"))
        self.tmux_timeout = float(os.environ.get("AGENT_MONITOR_TMUX_TIMEOUT", "3"))

        # Push loop cadence and git log depth
        self.poll_interval = float(os.environ.get("AGENT_MONITOR_POLL_INTERVAL", "5"))
        self.commit_limit = int(os.environ.get("AGENT_MONITOR_COMMIT_LIMIT", "20"))

        # CORS origins (comma-separated)
        origins = os.environ.get("AGENT_MONITOR_CORS_ORIGINS", "")
        self.cors_origins: list[str] = [o.strip() for o in origins.split(",") if o.strip()] if origins else ["*"]

    def paths(self) -> PathsConfig:
        return PathsConfig(
            task_store_path=self.task_store_path,
            worktree_base_dir=self.worktree_base_dir,
            repo_dir=self.project_dir,
            main_branch=self.main_branch,
            prompts_dir=self.prompts_dir,
            git_timeout=self.git_timeout,
            tmux_timeout=self.tmux_timeout,
        )


# Singleton
config = MonitorConfig()
