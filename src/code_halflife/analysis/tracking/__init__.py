"""Tracking module for line lifecycle evolution."""

from code_halflife.analysis.tracking.lifecycle_tracker import (
    CommitOutcome,
    CommitStatus,
    LifecycleTracker,
    ModificationPolicy,
    ReplayState,
)
from code_halflife.analysis.tracking.line_record import (
    EventKind,
    LifecycleEvent,
    LineRecord,
    TimelineEvent,
)

__all__ = [
    "CommitOutcome",
    "CommitStatus",
    "EventKind",
    "LifecycleEvent",
    "LifecycleTracker",
    "LineRecord",
    "ModificationPolicy",
    "ReplayState",
    "TimelineEvent",
]
