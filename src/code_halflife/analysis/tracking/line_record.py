"""Lifecycle records for tracked lines."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from code_halflife.error.exceptions import RecordClosedError


class EventKind(Enum):
    """Lifecycle event kinds of a tracked line."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class LifecycleEvent:
    """One step in the life of a line."""

    timestamp: datetime
    kind: EventKind
    commit_id: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class LineRecord:
    """Lifecycle record of one line identity.

    Attributes:
        key: Identity key the record was created under
        file: File path the line belongs to
        content: Line text at creation
        created_at: Timestamp of the introducing commit
        last_seen_at: Timestamp of the latest commit that re-confirmed the line
        origin_commit: Hash of the introducing commit
        deleted_at: Timestamp of the removing commit, None while alive
        events: Chronological lifecycle events, CREATED first
    """

    key: str
    file: str
    content: str
    created_at: datetime
    last_seen_at: datetime
    origin_commit: str
    deleted_at: datetime | None = None
    events: list[LifecycleEvent] = field(default_factory=list)

    @classmethod
    def create(cls, key: str, file: str, content: str, timestamp: datetime, commit_id: str):
        """Build a new open record with its CREATED event."""
        record = cls(
            key=key,
            file=file,
            content=content,
            created_at=timestamp,
            last_seen_at=timestamp,
            origin_commit=commit_id,
        )
        record.events.append(LifecycleEvent(timestamp, EventKind.CREATED, commit_id))
        return record

    @property
    def is_alive(self) -> bool:
        return self.deleted_at is None

    @property
    def current_content(self) -> str:
        """Content after the latest in-place modification."""
        for event in reversed(self.events):
            if event.kind == EventKind.MODIFIED:
                return event.payload["new"]
        return self.content

    def touch(self, timestamp: datetime) -> None:
        if timestamp > self.last_seen_at:
            self.last_seen_at = timestamp

    def modify(self, new_content: str, timestamp: datetime, commit_id: str) -> None:
        self._require_open()
        self.events.append(
            LifecycleEvent(
                timestamp,
                EventKind.MODIFIED,
                commit_id,
                {"old": self.current_content, "new": new_content},
            )
        )
        self.touch(timestamp)

    def delete(self, timestamp: datetime, commit_id: str) -> None:
        self._require_open()
        self.deleted_at = timestamp
        self.events.append(LifecycleEvent(timestamp, EventKind.DELETED, commit_id))

    def lifetime_days(self, now: datetime) -> float:
        """Days between creation and deletion (or ``now`` while alive)."""
        end = self.deleted_at if self.deleted_at is not None else now
        return (end - self.created_at).total_seconds() / 86400

    def _require_open(self) -> None:
        if self.deleted_at is not None:
            raise RecordClosedError(f"record {self.key!r} is already closed")


@dataclass(frozen=True)
class TimelineEvent:
    """Snapshot of the replay taken at every lifecycle event (validation mode)."""

    timestamp: datetime
    commit_id: str
    kind: EventKind
    file: str
    line: str
    running_line_count: int
    running_deleted_count: int
