"""Half-life analysis of a repository history."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path

from tqdm import tqdm

from code_halflife.analysis.identity import LineIdentityResolver
from code_halflife.analysis.survival_stats import (
    AggregateStats,
    calculate_survival_stats,
    select_sample_records,
)
from code_halflife.analysis.tracking import (
    CommitOutcome,
    LifecycleTracker,
    LineRecord,
    ReplayState,
    TimelineEvent,
)
from code_halflife.core.config import AnalysisConfig
from code_halflife.core.diff_source import DiffSource
from code_halflife.core.git_source import GitDiffSource
from code_halflife.error.exceptions import DiffUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class AnalysisResult:
    """Result of a half-life analysis.

    Attributes:
        stats: Aggregate survival statistics
        analyzed_at: Reference time used for lines that are still alive
        skipped_commits: Commits that could not be read
        timeline: Lifecycle snapshots (validation mode only)
        samples: Representative surviving records (validation mode only)
        branch: Analyzed branch, if the source is a git repository
    """

    stats: AggregateStats
    analyzed_at: datetime
    skipped_commits: list[CommitOutcome] = field(default_factory=list)
    timeline: list[TimelineEvent] = field(default_factory=list)
    samples: dict[str, LineRecord] = field(default_factory=dict)
    branch: str | None = None

    @property
    def is_validation(self) -> bool:
        return bool(self.timeline or self.samples)


class HalfLifeAnalyzer:
    """Replays a commit history and computes code survival statistics."""

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        resolver: LineIdentityResolver | None = None,
        show_progress: bool = True,
    ) -> None:
        """Initialize analyzer.

        Args:
            config: Analysis settings (default: AnalysisConfig())
            resolver: Line identity strategy (default: content identity)
            show_progress: Show tqdm progress bars
        """
        self.config = config or AnalysisConfig()
        self.show_progress = show_progress
        self.tracker = LifecycleTracker(
            resolver=resolver,
            modification_policy=self.config.modification_policy,
            file_pattern=self.config.file_pattern,
            record_timeline=self.config.validate_mode,
        )

    def analyze(self, repo_path: Path, now: datetime | None = None) -> AnalysisResult:
        """Analyze a local git repository.

        Raises:
            RepositoryError: If the repository cannot be opened
            BranchNotFoundError: If no branch can be resolved
            NoValidLifetimesError: If no line has a positive lifetime
        """
        source = GitDiffSource(
            repo_path,
            branch=self.config.branch,
            candidate_branches=self.config.candidate_branches,
            show_progress=self.show_progress,
        )
        result = self.analyze_source(source, now=now)
        result.branch = source.branch
        return result

    def analyze_source(self, source: DiffSource, now: datetime | None = None) -> AnalysisResult:
        """Analyze any diff source."""
        now = now or datetime.now(timezone.utc)
        state = self.replay(source)

        stats = calculate_survival_stats(state, now=now, time_points=self.config.time_points)
        logger.info(
            "Tracked %d lines over %d commits (%d skipped), half-life %.1f days",
            stats.total_tracked,
            stats.commits_processed,
            stats.commits_skipped,
            stats.half_life,
        )

        result = AnalysisResult(
            stats=stats,
            analyzed_at=now,
            skipped_commits=state.commits_skipped,
        )
        if self.config.validate_mode:
            result.timeline = list(state.timeline)
            result.samples = select_sample_records(state, now)
        return result

    def replay(self, source: DiffSource) -> ReplayState:
        """Feed every commit of the source to the tracker, skipping unreadable ones."""
        commits = source.chronological_commits()
        state = ReplayState()

        for index, commit in enumerate(
            tqdm(commits, desc="Replaying commits", disable=not self.show_progress)
        ):
            try:
                if index == 0:
                    entries = source.full_tree_snapshot(commit)
                    self.tracker.record_snapshot(state, commit, entries)
                else:
                    file_diffs = source.diff_against_parent(commit)
                    self.tracker.apply_commit(state, commit, file_diffs)
            except DiffUnavailableError as e:
                self.tracker.skip_commit(state, commit, e.message)

        return state
