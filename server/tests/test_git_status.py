"""Tests for the git status snapshot and single-commit diff."""

from __future__ import annotations

import os

import pytest
from conftest import FakeGitClient

from agent_monitor.services.git_status import (
    EMPTY_TREE,
    NotAGitRepositoryError,
    get_commit_diff,
    get_git_status,
)

SEP = "\x1f"
LOG_ARGS = ("log", "--all", f"--format=%H{SEP}%P{SEP}%s{SEP}%an{SEP}%ar{SEP}%D", "-20")
BRANCH_ARGS = ("branch", "-a", f"--format=%(refname:short){SEP}%(objectname:short){SEP}%(upstream:track)")


def _repo_client(extra: dict | None = None) -> FakeGitClient:
    responses = {("rev-parse", "--is-inside-work-tree"): "true"}
    responses.update(extra or {})
    return FakeGitClient(responses)


class TestGitStatus:
    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_git_status(tmp_path / "missing", _repo_client())

    def test_not_a_repository(self, tmp_path):
        with pytest.raises(NotAGitRepositoryError):
            get_git_status(tmp_path, FakeGitClient())

    def test_clean_snapshot(self, tmp_path):
        snapshot = get_git_status(tmp_path, _repo_client({("rev-parse", "--abbrev-ref", "HEAD"): "main"}))
        assert snapshot.branch == "main"
        assert snapshot.clean is True
        assert snapshot.changedFiles == 0
        assert snapshot.status == "(clean)"
        assert snapshot.diffStat == "(no changes)"
        assert snapshot.recentCommits == []

    def test_full_snapshot(self, tmp_path):
        log = "\n".join([
            SEP.join(["h2", "h1", "Fix | pipe in subject", "Ada", "2 hours ago", "HEAD -> feat/x, origin/feat/x"]),
            SEP.join(["h1", "", "initial", "Ada", "3 days ago", ""]),
        ])
        branches = "\n".join([
            SEP.join(["feat/x", "h2", "[ahead 1]"]),
            SEP.join(["main", "h1", ""]),
            SEP.join(["origin/main", "h1", ""]),
        ])
        fake = _repo_client({
            ("rev-parse", "--abbrev-ref", "HEAD"): "feat/x",
            ("status", "--short"): " M app.py\n?? new.txt",
            LOG_ARGS: log,
            ("diff", "--stat"): " app.py | 2 +-",
            BRANCH_ARGS: branches,
            ("branch", "--merged", "main"): "* main",
        })
        snapshot = get_git_status(tmp_path, fake)

        assert snapshot.clean is False
        assert snapshot.changedFiles == 2
        assert snapshot.mainBranch == "main"
        assert snapshot.recentCommits[0].message == "Fix | pipe in subject"
        assert snapshot.recentCommits[0].parents == ["h1"]
        assert snapshot.recentCommits[0].refs == ["HEAD -> feat/x", "origin/feat/x"]
        assert snapshot.recentCommits[1].parents == []
        assert [b.name for b in snapshot.branches] == ["feat/x", "main"]
        feat, main = snapshot.branches
        assert feat.isHead and not feat.merged and feat.tracking == "[ahead 1]"
        assert main.merged and not main.isHead

    def test_master_fallback(self, tmp_path):
        fake = _repo_client({
            ("rev-parse", "--abbrev-ref", "HEAD"): "dev",
            BRANCH_ARGS: f"master{SEP}a{SEP}\ndev{SEP}b{SEP}",
        })
        assert get_git_status(tmp_path, fake).mainBranch == "master"


class TestCommitDiff:
    @pytest.mark.parametrize("bad", ["xyz1234", "abc", "a" * 41, "abc123; rm -rf /", "HEAD~1"])
    def test_invalid_hash(self, tmp_path, bad):
        with pytest.raises(ValueError):
            get_commit_diff(tmp_path, bad, FakeGitClient())

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_commit_diff(tmp_path / "missing", "abcdef1", FakeGitClient())

    def test_unknown_commit(self, tmp_path):
        with pytest.raises(LookupError):
            get_commit_diff(tmp_path, "abcdef1", FakeGitClient())

    def test_regular_commit(self, tmp_path):
        fake = FakeGitClient({
            ("rev-parse", "--verify", "--quiet", "abcdef1^{commit}"): "abcdef1full",
            ("rev-parse", "--verify", "--quiet", "abcdef1^"): "parent",
            ("diff", "abcdef1^..abcdef1"): "diff --git a/x b/x",
            ("diff", "--numstat", "abcdef1^..abcdef1"): "4\t1\tx\n-\t-\tlogo.png",
        })
        result = get_commit_diff(tmp_path, "abcdef1", fake)
        assert result.diff == "diff --git a/x b/x"
        assert [f.path for f in result.files] == ["x", "logo.png"]
        assert result.stats.filesChanged == 2
        assert result.stats.additions == 4
        assert result.stats.deletions == 1

    def test_root_commit_diffs_against_hashed_empty_tree(self, tmp_path):
        fake = FakeGitClient({
            ("rev-parse", "--verify", "--quiet", "abcdef1^{commit}"): "abcdef1full",
            ("hash-object", "-t", "tree", os.devnull): "emptytreesha",
            ("diff", "--numstat", "emptytreesha..abcdef1"): "3\t0\tREADME.md",
        })
        result = get_commit_diff(tmp_path, "abcdef1", fake)
        assert fake.called("diff", "emptytreesha..abcdef1")
        assert result.stats.additions == 3

    def test_root_commit_falls_back_to_canonical_empty_tree(self, tmp_path):
        fake = FakeGitClient({
            ("rev-parse", "--verify", "--quiet", "abcdef1^{commit}"): "abcdef1full",
            ("diff", "--numstat", "4b825dc642cb6eb9a060e54bf8d69288fbee4904..abcdef1"): "1\t0\tx",
        })
        result = get_commit_diff(tmp_path, "abcdef1", fake)
        assert EMPTY_TREE == "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
        assert result.stats.filesChanged == 1
