"""Shared fixtures for code-halflife tests."""

from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
import subprocess

import pytest

from code_halflife.core.diff_source import (
    ChunkKind,
    CommitInfo,
    DiffChunk,
    DiffSource,
    FileDiff,
    FileEntry,
)
from code_halflife.error.exceptions import DiffUnavailableError

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


class InMemoryDiffSource(DiffSource):
    """Diff source serving a scripted history.

    ``history`` is a list of (commit, changes) pairs; the first item's changes
    are FileEntry objects, the rest FileDiff objects. Commits listed in
    ``broken`` raise DiffUnavailableError when read.
    """

    def __init__(self, history, broken=()):
        self.history = history
        self.broken = set(broken)

    def chronological_commits(self):
        return [commit for commit, _ in self.history]

    def _changes(self, commit):
        if commit.commit_id in self.broken:
            raise DiffUnavailableError(commit.commit_id, "object missing")
        return {c.commit_id: changes for c, changes in self.history}[commit.commit_id]

    def diff_against_parent(self, commit):
        return self._changes(commit)

    def full_tree_snapshot(self, commit):
        return self._changes(commit)


class GitRepoBuilder:
    """Builds a throwaway git repository with controlled commit dates."""

    def __init__(self, path: Path, branch: str = "main") -> None:
        self.path = path
        self.path.mkdir(parents=True, exist_ok=True)
        self._git("init")
        self._git("symbolic-ref", "HEAD", f"refs/heads/{branch}")
        self._git("config", "user.email", "test@test.com")
        self._git("config", "user.name", "Test User")

    def commit(
        self,
        files: dict[str, str | None],
        days: float,
        message: str = "change",
        author_days: float | None = None,
    ) -> str:
        """Write (or delete, for None) files and commit them at T0 + days.

        ``author_days`` backdates the author date only, as a rebase or
        cherry-pick does.
        """
        for name, content in files.items():
            file_path = self.path / name
            if content is None:
                file_path.unlink()
            else:
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_path.write_text(content)

        stamp = self._stamp(days)
        author_stamp = self._stamp(days if author_days is None else author_days)
        env = {**os.environ, "GIT_AUTHOR_DATE": author_stamp, "GIT_COMMITTER_DATE": stamp}
        self._git("add", "-A")
        self._git("commit", "-m", message, env=env)
        return self._git("rev-parse", "HEAD").strip()

    @staticmethod
    def _stamp(days: float) -> str:
        when = T0 + timedelta(days=days)
        return f"{int(when.timestamp())} +0000"

    def _git(self, *args: str, env: dict[str, str] | None = None) -> str:
        result = subprocess.run(
            ["git", *args],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
            env=env,
        )
        return result.stdout


@pytest.fixture
def t0():
    """Timestamp of the first commit in scripted histories."""
    return T0


@pytest.fixture
def make_commit():
    """Factory for commits at T0 + days."""

    def _make(commit_id: str, days: float = 0) -> CommitInfo:
        return CommitInfo(commit_id=commit_id, timestamp=T0 + timedelta(days=days))

    return _make


@pytest.fixture
def make_diff():
    """Factory for single-file diffs from (kind, lines) pairs."""

    def _make(path: str, *chunks: tuple[ChunkKind, list[str]]) -> FileDiff:
        return FileDiff(path, [DiffChunk(kind, list(lines)) for kind, lines in chunks])

    return _make


@pytest.fixture
def make_entry():
    """Factory for snapshot file entries from a list of lines."""

    def _make(path: str, lines: list[str]) -> FileEntry:
        return FileEntry(path=path, content="\n".join(lines) + "\n")

    return _make


@pytest.fixture
def diff_source_factory():
    """Factory for InMemoryDiffSource."""
    return InMemoryDiffSource


@pytest.fixture
def git_repo(tmp_path):
    """Repository with three commits on main.

    - T0: main.py (3 lines + blank) and README.md
    - T0+10d: main.py return value edited
    - T0+20d: README.md deleted
    """
    builder = GitRepoBuilder(tmp_path / "repo")
    builder.commit(
        {
            "main.py": "import os\n\ndef a():\n    return 1\n",
            "README.md": "# Title\n",
        },
        days=0,
        message="Initial commit",
    )
    builder.commit({"main.py": "import os\n\ndef a():\n    return 2\n"}, days=10, message="Edit")
    builder.commit({"README.md": None}, days=20, message="Remove readme")
    return builder


@pytest.fixture
def repo_builder(tmp_path):
    """Factory for empty repositories on a given branch."""

    def _make(name: str = "scratch", branch: str = "main") -> GitRepoBuilder:
        return GitRepoBuilder(tmp_path / name, branch=branch)

    return _make
