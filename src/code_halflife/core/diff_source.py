"""Diff source interface and the value types it produces.

A diff source linearizes the history of one branch and hands the tracker,
commit by commit, the changed lines of every file. The first commit is read as
a full tree snapshot instead of a diff.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from fnmatch import fnmatchcase
import posixpath
import re


class ChunkKind(Enum):
    """Kind of a contiguous run of lines in a file diff."""

    ADDED = "added"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class CommitInfo:
    """A commit of the linearized history.

    Attributes:
        commit_id: Full commit hash.
        timestamp: Commit timestamp (timezone aware).
        message: First line of the commit message.
    """

    commit_id: str
    timestamp: datetime
    message: str = ""

    @property
    def short_id(self) -> str:
        return self.commit_id[:7]


@dataclass
class DiffChunk:
    """Contiguous run of added, deleted or unchanged lines.

    Attributes:
        kind: Chunk kind.
        lines: Raw line texts without the diff prefix.
        hunk: Index of the @@ hunk the run belongs to.
    """

    kind: ChunkKind
    lines: list[str]
    hunk: int = 0

    @property
    def size(self) -> int:
        """Number of characters in the chunk (line terminators excluded)."""
        return sum(len(line) for line in self.lines)


@dataclass
class FileDiff:
    """Changes to one file in one commit."""

    path: str
    chunks: list[DiffChunk] = field(default_factory=list)

    def chunks_of(self, kind: ChunkKind) -> list[DiffChunk]:
        return [chunk for chunk in self.chunks if chunk.kind == kind]


@dataclass
class FileEntry:
    """A file of a tree snapshot."""

    path: str
    content: str

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")


class DiffSource(ABC):
    """Abstract base class for anything that can feed commits to the tracker."""

    @abstractmethod
    def chronological_commits(self) -> list[CommitInfo]:
        """Return commits of the analyzed branch, oldest first."""
        pass

    @abstractmethod
    def diff_against_parent(self, commit: CommitInfo) -> list[FileDiff]:
        """Return per-file diffs of a commit against its first parent.

        Raises:
            DiffUnavailableError: If the patch cannot be read
        """
        pass

    @abstractmethod
    def full_tree_snapshot(self, commit: CommitInfo) -> list[FileEntry]:
        """Return every file of the commit's tree.

        Raises:
            DiffUnavailableError: If the tree cannot be read
        """
        pass


def matches_pattern(path: str, pattern: str) -> bool:
    """Check a file path against a glob-style pattern.

    ``*`` matches every file, ``*.ext`` is a suffix test on the whole path and
    anything else is matched against the file's basename.

    Args:
        path: Repository-relative file path
        pattern: Glob pattern

    Returns:
        True if the file should be analyzed
    """
    if pattern == "*":
        return True
    if pattern.startswith("*."):
        return path.endswith(pattern[1:])
    return fnmatchcase(posixpath.basename(path), pattern)


_HUNK_HEADER = re.compile(r"^@@ -\d+(?:,\d+)? \+\d+(?:,\d+)? @@")

_PREFIX_KINDS = {
    "+": ChunkKind.ADDED,
    "-": ChunkKind.DELETED,
    " ": ChunkKind.UNCHANGED,
}


def parse_unified_diff(diff_text: str) -> list[DiffChunk]:
    """Split unified diff text into runs of added/deleted/unchanged lines.

    A new chunk starts whenever the line kind changes or a new hunk begins.
    File headers (``---``/``+++``) and ``\\ No newline at end of file`` markers
    are ignored.

    Args:
        diff_text: Unified diff body as produced by ``git diff``

    Returns:
        Chunks in diff order
    """
    chunks: list[DiffChunk] = []
    current: DiffChunk | None = None
    hunk = -1
    in_hunk = False

    for raw in diff_text.rstrip("\n").split("\n"):
        if _HUNK_HEADER.match(raw):
            hunk += 1
            in_hunk = True
            current = None
            continue
        if not in_hunk or raw.startswith("\\"):
            continue

        # git emits an empty string for an unchanged blank line in some modes
        prefix = raw[:1] if raw else " "
        kind = _PREFIX_KINDS.get(prefix)
        if kind is None:
            continue

        if current is None or current.kind != kind:
            current = DiffChunk(kind=kind, lines=[], hunk=hunk)
            chunks.append(current)
        current.lines.append(raw[1:])

    return chunks
