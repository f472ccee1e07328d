"""Git status and commit diff models."""

from __future__ import annotations

from pydantic import BaseModel

from .tasks import FileChange


class GitCommit(BaseModel):
    hash: str
    parents: list[str] = []
    message: str = ""
    author: str = ""
    time: str = ""
    refs: list[str] = []


class BranchInfo(BaseModel):
    name: str
    commit: str = ""
    tracking: str = ""
    isHead: bool = False
    merged: bool = False


class GitStatusSnapshot(BaseModel):
    directory: str
    branch: str
    clean: bool
    changedFiles: int
    status: str
    recentCommits: list[GitCommit] = []
    branches: list[BranchInfo] = []
    mainBranch: str
    diffStat: str


class DiffStats(BaseModel):
    filesChanged: int = 0
    additions: int = 0
    deletions: int = 0


class CommitDiff(BaseModel):
    diff: str
    files: list[FileChange] = []
    stats: DiffStats
