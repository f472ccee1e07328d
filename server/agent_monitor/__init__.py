"""Agent Monitor: task status and file changes of coding agents in git worktrees."""

__version__ = "0.1.0"
