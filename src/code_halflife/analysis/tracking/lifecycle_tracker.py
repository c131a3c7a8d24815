"""Lifecycle tracker for lines of code across commits."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import logging

from code_halflife.analysis.identity import ContentIdentityResolver, LineIdentityResolver
from code_halflife.analysis.tracking.line_record import EventKind, LineRecord, TimelineEvent
from code_halflife.core.diff_source import (
    ChunkKind,
    CommitInfo,
    FileDiff,
    FileEntry,
    matches_pattern,
)
from code_halflife.error.exceptions import CommitOrderError

logger = logging.getLogger(__name__)


class ModificationPolicy(Enum):
    """How an edited line is represented.

    REPLACE: the old content is deleted and the new content created.
    IN_PLACE: a deleted line directly replaced by an added line keeps its
        record and gets a MODIFIED event.
    """

    REPLACE = "replace"
    IN_PLACE = "in_place"


class CommitStatus(Enum):
    PROCESSED = "processed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CommitOutcome:
    """Result of feeding one commit to the tracker."""

    commit_id: str
    timestamp: datetime
    status: CommitStatus
    reason: str | None = None

    @classmethod
    def processed(cls, commit: CommitInfo) -> "CommitOutcome":
        return cls(commit.commit_id, commit.timestamp, CommitStatus.PROCESSED)

    @classmethod
    def skipped(cls, commit: CommitInfo, reason: str) -> "CommitOutcome":
        return cls(commit.commit_id, commit.timestamp, CommitStatus.SKIPPED, reason)


@dataclass
class ReplayState:
    """Accumulator threaded through the replay.

    Attributes:
        records: Every record ever created, in creation order
        open_records: Identity key -> record for lines that are still alive
        event_counts: Running tally of lifecycle events per kind
        total_edit_size: Characters in all added/deleted chunks
        edit_count: Number of added/deleted chunks
        deleted_count: Number of closed records
        timeline: Lifecycle snapshots (validation mode only)
        outcomes: One entry per commit fed to the tracker
        first_commit_at: Timestamp of the first processed commit
        last_commit_at: Timestamp of the latest processed commit
    """

    records: list[LineRecord] = field(default_factory=list)
    open_records: dict[str, LineRecord] = field(default_factory=dict)
    event_counts: dict[EventKind, int] = field(
        default_factory=lambda: {kind: 0 for kind in EventKind}
    )
    total_edit_size: int = 0
    edit_count: int = 0
    deleted_count: int = 0
    timeline: list[TimelineEvent] = field(default_factory=list)
    outcomes: list[CommitOutcome] = field(default_factory=list)
    first_commit_at: datetime | None = None
    last_commit_at: datetime | None = None

    @property
    def average_edit_size(self) -> float:
        if self.edit_count == 0:
            return 0.0
        return self.total_edit_size / self.edit_count

    @property
    def surviving_records(self) -> list[LineRecord]:
        return [record for record in self.records if record.is_alive]

    @property
    def commits_processed(self) -> int:
        return sum(1 for o in self.outcomes if o.status == CommitStatus.PROCESSED)

    @property
    def commits_skipped(self) -> list[CommitOutcome]:
        return [o for o in self.outcomes if o.status == CommitStatus.SKIPPED]


class LifecycleTracker:
    """Creates, updates and closes line records as commits are replayed.

    The tracker itself is stateless; all replay state lives in the
    ``ReplayState`` passed to and returned by every step. Commits must be fed
    oldest first and each one is applied to completion before the next.
    """

    def __init__(
        self,
        resolver: LineIdentityResolver | None = None,
        modification_policy: ModificationPolicy = ModificationPolicy.REPLACE,
        file_pattern: str = "*",
        record_timeline: bool = False,
    ) -> None:
        """Initialize lifecycle tracker.

        Args:
            resolver: Line identity strategy (default: content identity)
            modification_policy: How edited lines are represented
            file_pattern: Glob pattern selecting the files to track
            record_timeline: Snapshot the replay at every event for validation
        """
        self.resolver = resolver or ContentIdentityResolver()
        self.modification_policy = modification_policy
        self.file_pattern = file_pattern
        self.record_timeline = record_timeline

    def record_snapshot(
        self, state: ReplayState, commit: CommitInfo, entries: list[FileEntry]
    ) -> ReplayState:
        """Record every line of the first commit's tree as created."""
        self._begin_commit(state, commit)

        for entry in entries:
            if not matches_pattern(entry.path, self.file_pattern):
                continue
            for line in entry.lines:
                self._add_line(state, commit, entry.path, line)

        return self._finish_commit(state, commit)

    def apply_commit(
        self, state: ReplayState, commit: CommitInfo, file_diffs: list[FileDiff]
    ) -> ReplayState:
        """Apply one commit's diffs: additions, then deletions, then unchanged runs."""
        self._begin_commit(state, commit)

        for file_diff in file_diffs:
            if not matches_pattern(file_diff.path, self.file_pattern):
                continue
            self._apply_file_diff(state, commit, file_diff)

        return self._finish_commit(state, commit)

    def skip_commit(self, state: ReplayState, commit: CommitInfo, reason: str) -> ReplayState:
        """Record a commit that could not be read."""
        logger.warning("Skipping commit %s: %s", commit.short_id, reason)
        state.outcomes.append(CommitOutcome.skipped(commit, reason))
        return state

    def replay(
        self,
        history: Iterable[tuple[CommitInfo, list[FileEntry] | list[FileDiff]]],
        state: ReplayState | None = None,
    ) -> ReplayState:
        """Replay an already materialized history.

        On a fresh state the first item pairs the first commit with its tree
        snapshot (list of ``FileEntry``); every other item pairs a commit with
        its diffs (list of ``FileDiff``).
        """
        state = state if state is not None else ReplayState()
        fresh = not state.outcomes
        for index, (commit, changes) in enumerate(history):
            if index == 0 and fresh:
                self.record_snapshot(state, commit, changes)
            else:
                self.apply_commit(state, commit, changes)
        return state

    # Per-file processing

    def _apply_file_diff(self, state: ReplayState, commit: CommitInfo, file_diff: FileDiff) -> None:
        path = file_diff.path

        for chunk in file_diff.chunks:
            if chunk.kind != ChunkKind.UNCHANGED:
                state.total_edit_size += chunk.size
                state.edit_count += 1

        replacements, paired = self._find_replacements(state, file_diff)

        for index, chunk in enumerate(file_diff.chunks):
            if chunk.kind != ChunkKind.ADDED:
                continue
            for offset, line in enumerate(chunk.lines):
                if (index, offset) not in paired:
                    self._add_line(state, commit, path, line)

        for index, chunk in enumerate(file_diff.chunks):
            if chunk.kind != ChunkKind.DELETED:
                continue
            for offset, line in enumerate(chunk.lines):
                if (index, offset) not in paired:
                    self._delete_line(state, commit, path, line)

        for chunk in file_diff.chunks_of(ChunkKind.UNCHANGED):
            for line in chunk.lines:
                key = self.resolver.resolve(path, line)
                if key is not None and key in state.open_records:
                    state.open_records[key].touch(commit.timestamp)

        for old_line, new_line in replacements:
            self._modify_line(state, commit, path, old_line, new_line)

    def _find_replacements(
        self, state: ReplayState, file_diff: FileDiff
    ) -> tuple[list[tuple[str, str]], set[tuple[int, int]]]:
        """Pair deleted runs with the added run that directly follows them.

        Returns:
            Tuple of ((old_line, new_line) pairs, set of (chunk_index, line_index)
            positions consumed by those pairs)
        """
        if self.modification_policy != ModificationPolicy.IN_PLACE:
            return [], set()

        replacements: list[tuple[str, str]] = []
        paired: set[tuple[int, int]] = set()
        chunks = file_diff.chunks

        for index in range(len(chunks) - 1):
            deleted, added = chunks[index], chunks[index + 1]
            if deleted.kind != ChunkKind.DELETED or added.kind != ChunkKind.ADDED:
                continue
            if deleted.hunk != added.hunk:
                continue

            for offset in range(min(len(deleted.lines), len(added.lines))):
                old_line, new_line = deleted.lines[offset], added.lines[offset]
                old_key = self.resolver.resolve(file_diff.path, old_line)
                new_key = self.resolver.resolve(file_diff.path, new_line)
                if old_key is None or new_key is None:
                    continue
                if old_key not in state.open_records:
                    continue
                replacements.append((old_line, new_line))
                paired.add((index, offset))
                paired.add((index + 1, offset))

        return replacements, paired

    # Line transitions

    def _add_line(self, state: ReplayState, commit: CommitInfo, path: str, line: str) -> None:
        key = self.resolver.resolve(path, line)
        if key is None:
            return

        existing = state.open_records.get(key)
        if existing is not None:
            existing.touch(commit.timestamp)
            return

        record = LineRecord.create(key, path, line, commit.timestamp, commit.commit_id)
        state.records.append(record)
        state.open_records[key] = record
        self._count(state, commit, EventKind.CREATED, path, line)

    def _delete_line(self, state: ReplayState, commit: CommitInfo, path: str, line: str) -> None:
        key = self.resolver.resolve(path, line)
        if key is None:
            return

        record = state.open_records.pop(key, None)
        if record is None:
            return

        record.delete(commit.timestamp, commit.commit_id)
        state.deleted_count += 1
        self._count(state, commit, EventKind.DELETED, path, line)

    def _modify_line(
        self, state: ReplayState, commit: CommitInfo, path: str, old_line: str, new_line: str
    ) -> None:
        old_key = self.resolver.resolve(path, old_line)
        new_key = self.resolver.resolve(path, new_line)

        record = state.open_records.get(old_key)
        if record is None:
            # Old line was closed earlier in this commit
            self._add_line(state, commit, path, new_line)
            return
        if new_key in state.open_records:
            # New content already tracked; keep the identities separate
            self._delete_line(state, commit, path, old_line)
            self._add_line(state, commit, path, new_line)
            return

        record.modify(new_line, commit.timestamp, commit.commit_id)
        del state.open_records[old_key]
        state.open_records[new_key] = record
        self._count(state, commit, EventKind.MODIFIED, path, new_line)

    # Bookkeeping

    def _count(
        self, state: ReplayState, commit: CommitInfo, kind: EventKind, path: str, line: str
    ) -> None:
        state.event_counts[kind] += 1
        if self.record_timeline:
            state.timeline.append(
                TimelineEvent(
                    timestamp=commit.timestamp,
                    commit_id=commit.commit_id,
                    kind=kind,
                    file=path,
                    line=line,
                    running_line_count=len(state.records),
                    running_deleted_count=state.deleted_count,
                )
            )

    def _begin_commit(self, state: ReplayState, commit: CommitInfo) -> None:
        if state.last_commit_at is not None and commit.timestamp < state.last_commit_at:
            raise CommitOrderError(
                f"commit {commit.short_id} ({commit.timestamp.isoformat()}) is older than "
                f"the previous commit ({state.last_commit_at.isoformat()})"
            )

    def _finish_commit(self, state: ReplayState, commit: CommitInfo) -> ReplayState:
        if state.first_commit_at is None:
            state.first_commit_at = commit.timestamp
        state.last_commit_at = commit.timestamp
        state.outcomes.append(CommitOutcome.processed(commit))
        logger.debug(
            "Commit %s: %d records, %d open",
            commit.short_id,
            len(state.records),
            len(state.open_records),
        )
        return state
