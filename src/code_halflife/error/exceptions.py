"""Exception hierarchy for half-life analysis.

Every exception carries the stage of the pipeline that failed so the CLI can
tell the user where the analysis stopped.
"""


class HalfLifeError(Exception):
    """Base class for all analysis failures."""

    stage = "analyze repository"

    def __init__(self, message: str, stage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if stage is not None:
            self.stage = stage

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}"


class RepositoryError(HalfLifeError):
    """Repository path is missing or is not a git repository."""

    stage = "open repository"


class BranchNotFoundError(HalfLifeError):
    """None of the candidate branches exist in the repository."""

    stage = "resolve branch"


class DiffUnavailableError(HalfLifeError):
    """Tree or patch of a single commit could not be read.

    Recoverable: the analyzer skips the commit and keeps going.
    """

    stage = "read commit"

    def __init__(self, commit_id: str, message: str) -> None:
        super().__init__(message)
        self.commit_id = commit_id


class CommitOrderError(HalfLifeError):
    """A commit older than the previously replayed one was fed to the tracker."""

    stage = "replay history"


class NoValidLifetimesError(HalfLifeError):
    """Replay produced no record with a positive lifetime."""

    stage = "compute statistics"

    def __init__(self, message: str = "no valid lifetimes found") -> None:
        super().__init__(message)


class RecordClosedError(HalfLifeError):
    """A lifecycle transition was applied to a record that is already deleted."""

    stage = "replay history"
