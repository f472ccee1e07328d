"""Shared application state: paths, probe clients and the enrichment pipeline."""

from __future__ import annotations

import logging

from .config import MonitorConfig, PathsConfig, config
from .services.enrichment import TaskEnrichmentPipeline
from .services.git_probe import GitClient, SubprocessGitClient
from .services.tmux_probe import SubprocessTmuxClient, TmuxClient

logger = logging.getLogger(__name__)


class MonitorState:
    """Holds the service instances every router and push loop shares."""

    def __init__(
        self,
        paths: PathsConfig,
        git: GitClient | None = None,
        tmux: TmuxClient | None = None,
        commit_limit: int = 20,
        poll_interval: float = 5.0,
    ) -> None:
        self.paths = paths
        self.git = git or SubprocessGitClient(timeout=paths.git_timeout)
        self.tmux = tmux or SubprocessTmuxClient(timeout=paths.tmux_timeout)
        self.pipeline = TaskEnrichmentPipeline(paths, git=self.git, tmux=self.tmux)
        self.commit_limit = commit_limit
        self.poll_interval = poll_interval

    @classmethod
    def from_config(cls, cfg: MonitorConfig) -> MonitorState:
        return cls(cfg.paths(), commit_limit=cfg.commit_limit, poll_interval=cfg.poll_interval)

    def log_paths(self) -> None:
        logger.info("Task store: %s", self.paths.task_store_path)
        logger.info("Worktree base: %s", self.paths.worktree_base_dir)
        logger.info("Repository: %s (trunk %s)", self.paths.repo_dir, self.paths.main_branch)


# Module-level singleton
monitor = MonitorState.from_config(config)
