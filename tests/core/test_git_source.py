"""Tests for GitDiffSource against real throwaway repositories."""

from datetime import timedelta

import pytest

from code_halflife.core.diff_source import ChunkKind
from code_halflife.core.git_source import GitDiffSource
from code_halflife.error.exceptions import BranchNotFoundError, RepositoryError


class TestOpenRepository:
    """Tests for repository and branch resolution."""

    def test_missing_path(self, tmp_path):
        with pytest.raises(RepositoryError, match="does not exist"):
            GitDiffSource(tmp_path / "nope", show_progress=False)

    def test_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()

        with pytest.raises(RepositoryError, match="not a git repository"):
            GitDiffSource(plain, show_progress=False)

    def test_default_branch_main(self, git_repo):
        source = GitDiffSource(git_repo.path, show_progress=False)
        assert source.branch == "main"

    def test_falls_back_to_master(self, repo_builder):
        builder = repo_builder("legacy", branch="master")
        builder.commit({"a.txt": "x\n"}, days=0)

        source = GitDiffSource(builder.path, show_progress=False)

        assert source.branch == "master"

    def test_no_candidate_branch(self, repo_builder):
        builder = repo_builder("trunk", branch="trunk")
        builder.commit({"a.txt": "x\n"}, days=0)

        with pytest.raises(BranchNotFoundError, match="main, master"):
            GitDiffSource(builder.path, show_progress=False)

    def test_explicit_branch(self, repo_builder):
        builder = repo_builder("trunk", branch="trunk")
        builder.commit({"a.txt": "x\n"}, days=0)

        source = GitDiffSource(builder.path, branch="trunk", show_progress=False)

        assert source.branch == "trunk"

    def test_explicit_branch_missing(self, git_repo):
        with pytest.raises(BranchNotFoundError, match="develop"):
            GitDiffSource(git_repo.path, branch="develop", show_progress=False)

    def test_custom_candidates(self, repo_builder):
        builder = repo_builder("trunk", branch="trunk")
        builder.commit({"a.txt": "x\n"}, days=0)

        source = GitDiffSource(
            builder.path, candidate_branches=["main", "trunk"], show_progress=False
        )

        assert source.branch == "trunk"


class TestReadHistory:
    """Tests for commits, diffs and snapshots."""

    @pytest.fixture
    def source(self, git_repo):
        return GitDiffSource(git_repo.path, show_progress=False)

    def test_commits_oldest_first(self, source, t0):
        commits = source.chronological_commits()

        assert [c.message for c in commits] == ["Initial commit", "Edit", "Remove readme"]
        assert [c.timestamp for c in commits] == [
            t0,
            t0 + timedelta(days=10),
            t0 + timedelta(days=20),
        ]
        assert all(len(c.commit_id) == 40 for c in commits)

    def test_snapshot_of_first_commit(self, source):
        first = source.chronological_commits()[0]

        entries = {e.path: e for e in source.full_tree_snapshot(first)}

        assert set(entries) == {"main.py", "README.md"}
        assert entries["main.py"].lines == ["import os", "", "def a():", "    return 1", ""]

    def test_snapshot_skips_binary_files(self, repo_builder):
        builder = repo_builder("binary")
        (builder.path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00")
        builder.commit({"a.py": "x = 1\n"}, days=0)
        source = GitDiffSource(builder.path, show_progress=False)

        entries = source.full_tree_snapshot(source.chronological_commits()[0])

        assert [e.path for e in entries] == ["a.py"]

    def test_diff_of_edit(self, source):
        edit = source.chronological_commits()[1]

        diffs = source.diff_against_parent(edit)

        assert len(diffs) == 1
        assert diffs[0].path == "main.py"
        added = [line for c in diffs[0].chunks_of(ChunkKind.ADDED) for line in c.lines]
        deleted = [line for c in diffs[0].chunks_of(ChunkKind.DELETED) for line in c.lines]
        assert added == ["    return 2"]
        assert deleted == ["    return 1"]

    def test_diff_of_deleted_file(self, source):
        removal = source.chronological_commits()[2]

        diffs = source.diff_against_parent(removal)

        assert [d.path for d in diffs] == ["README.md"]
        assert [c.kind for c in diffs[0].chunks] == [ChunkKind.DELETED]
        assert diffs[0].chunks[0].lines == ["# Title"]

    def test_rebased_commits_keep_parent_order(self, repo_builder, t0):
        """A backdated author date must not move a child before its parent."""
        builder = repo_builder("rebased")
        builder.commit({"a.py": "x = 1\n"}, days=0, message="root")
        builder.commit({"a.py": "x = 1\nlater = 2\n"}, days=10, message="add")
        builder.commit({"a.py": "x = 1\n"}, days=20, author_days=5, message="remove")

        commits = GitDiffSource(builder.path, show_progress=False).chronological_commits()

        assert [c.message for c in commits] == ["root", "add", "remove"]
        assert [c.timestamp for c in commits] == [
            t0,
            t0 + timedelta(days=10),
            t0 + timedelta(days=20),
        ]

    def test_backdated_committer_date_is_clamped(self, repo_builder, t0):
        builder = repo_builder("skewed")
        builder.commit({"a.txt": "a\n"}, days=5, message="first")
        builder.commit({"b.txt": "b\n"}, days=1, message="skewed clock")

        commits = GitDiffSource(builder.path, show_progress=False).chronological_commits()

        assert [c.message for c in commits] == ["first", "skewed clock"]
        assert [c.timestamp for c in commits] == [t0 + timedelta(days=5)] * 2
