"""Survival statistics calculator for line lifecycle records."""

from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
import pandas as pd

from code_halflife.analysis.tracking.lifecycle_tracker import ReplayState
from code_halflife.analysis.tracking.line_record import EventKind, LineRecord
from code_halflife.error.exceptions import NoValidLifetimesError

DEFAULT_TIME_POINTS = 100


@dataclass(frozen=True)
class AggregateStats:
    """Survival statistics of all tracked lines. All ages are in days."""

    lifetimes: tuple[float, ...]
    mean_lifetime: float
    median_lifetime: float
    std_dev_lifetime: float
    half_life: float
    survival_curve: tuple[tuple[float, float], ...]

    # Population counts
    total_tracked: int
    surviving_lines: int
    deleted_lines: int
    lines_with_changes: int
    change_frequency: dict[str, int]

    # Surviving population
    oldest_age: float | None
    newest_age: float | None
    oldest_line: str | None
    newest_line: str | None

    average_edit_size: float

    # Repository timespan
    first_commit_at: datetime | None
    last_commit_at: datetime | None
    commits_processed: int
    commits_skipped: int

    @property
    def sample_size(self) -> int:
        return len(self.lifetimes)

    @property
    def surviving_percentage(self) -> float:
        return self.surviving_lines / self.total_tracked * 100 if self.total_tracked else 0.0

    @property
    def deleted_percentage(self) -> float:
        return self.deleted_lines / self.total_tracked * 100 if self.total_tracked else 0.0

    @property
    def timespan_days(self) -> float:
        if self.first_commit_at is None or self.last_commit_at is None:
            return 0.0
        return (self.last_commit_at - self.first_commit_at).total_seconds() / 86400


def calculate_survival_stats(
    state: ReplayState,
    now: datetime | None = None,
    time_points: int = DEFAULT_TIME_POINTS,
) -> AggregateStats:
    """Calculate survival statistics from a completed replay.

    Args:
        state: Replay state holding every lifecycle record
        now: Reference time for lines that are still alive (default: current UTC time)
        time_points: Number of evenly spaced ages sampled on the survival curve

    Returns:
        AggregateStats object with calculated statistics

    Raises:
        ValueError: If time_points is smaller than 1
        NoValidLifetimesError: If no record has a positive lifetime
    """
    if time_points < 1:
        raise ValueError(f"time_points must be at least 1, got {time_points}")
    now = now or datetime.now(timezone.utc)

    records = state.records
    lifetimes = collect_lifetimes(records, now)
    if lifetimes.empty:
        raise NoValidLifetimesError()

    sorted_lifetimes = np.sort(lifetimes.to_numpy(dtype=float))
    median_lifetime = float(lifetimes.median())
    curve = calculate_survival_curve(sorted_lifetimes, time_points)
    half_life = find_half_life(curve, fallback=median_lifetime)

    surviving = [record for record in records if record.is_alive]
    oldest, newest = _age_extremes(surviving, now)

    return AggregateStats(
        lifetimes=tuple(float(v) for v in sorted_lifetimes),
        mean_lifetime=float(lifetimes.mean()),
        median_lifetime=median_lifetime,
        std_dev_lifetime=float(lifetimes.std(ddof=0)),
        half_life=half_life,
        survival_curve=curve,
        total_tracked=len(records),
        surviving_lines=len(surviving),
        deleted_lines=len(records) - len(surviving),
        lines_with_changes=sum(1 for record in records if len(record.events) > 1),
        change_frequency=count_events(records),
        oldest_age=oldest[1] if oldest else None,
        newest_age=newest[1] if newest else None,
        oldest_line=oldest[0].content if oldest else None,
        newest_line=newest[0].content if newest else None,
        average_edit_size=state.average_edit_size,
        first_commit_at=state.first_commit_at,
        last_commit_at=state.last_commit_at,
        commits_processed=state.commits_processed,
        commits_skipped=len(state.commits_skipped),
    )


def collect_lifetimes(records: list[LineRecord], now: datetime) -> pd.Series:
    """Lifetimes in days of every record with a positive lifetime."""
    values = [record.lifetime_days(now) for record in records]
    series = pd.Series(values, dtype=float)
    return series[series > 0].reset_index(drop=True)


def calculate_survival_curve(
    sorted_lifetimes: np.ndarray, time_points: int
) -> tuple[tuple[float, float], ...]:
    """Sample the fraction of lines alive at evenly spaced ages.

    Ages run from 0 towards the maximum lifetime: ``max_age * i / time_points``
    for ``i`` in ``range(time_points)``.

    Args:
        sorted_lifetimes: Lifetimes in ascending order
        time_points: Number of samples

    Returns:
        Tuple of (age_days, fraction_surviving) pairs
    """
    sample_size = len(sorted_lifetimes)
    max_age = float(sorted_lifetimes[-1])
    ages = max_age * np.arange(time_points, dtype=float) / time_points

    # count(lifetime >= age) is everything right of the leftmost insertion point
    survivors = sample_size - np.searchsorted(sorted_lifetimes, ages, side="left")
    fractions = survivors / sample_size

    return tuple((float(age), float(fraction)) for age, fraction in zip(ages, fractions))


def find_half_life(curve: tuple[tuple[float, float], ...], fallback: float) -> float:
    """Smallest sampled age at which at most half of the lines survive.

    Falls back to ``fallback`` (the median lifetime) when the curve never drops
    to 0.5.
    """
    for age, fraction in curve:
        if fraction <= 0.5:
            return age
    return fallback


def count_events(records: list[LineRecord]) -> dict[str, int]:
    """Count lifecycle events per kind across all records."""
    counts = {kind.value: 0 for kind in EventKind}
    for record in records:
        for event in record.events:
            counts[event.kind.value] += 1
    return counts


def _age_extremes(
    surviving: list[LineRecord], now: datetime
) -> tuple[tuple[LineRecord, float] | None, tuple[LineRecord, float] | None]:
    oldest: tuple[LineRecord, float] | None = None
    newest: tuple[LineRecord, float] | None = None

    for record in surviving:
        age = record.lifetime_days(now)
        if age <= 0:
            continue
        if oldest is None or age > oldest[1]:
            oldest = (record, age)
        if newest is None or age < newest[1]:
            newest = (record, age)

    return oldest, newest


def select_sample_records(
    state: ReplayState, now: datetime, count: int = 5
) -> dict[str, LineRecord]:
    """Pick representative surviving records for manual spot-checking.

    Returns the oldest and newest surviving records plus ``count`` evenly spaced
    survivors when more than ``count`` lines survive.
    """
    surviving = state.surviving_records
    oldest, newest = _age_extremes(surviving, now)

    samples: dict[str, LineRecord] = {}
    if oldest is not None:
        samples["oldest"] = oldest[0]
    if newest is not None:
        samples["newest"] = newest[0]

    if len(surviving) > count:
        for i in range(count):
            samples[f"sample_{i}"] = surviving[(i * len(surviving)) // count]

    return samples


def get_lifetime_distribution(stats: AggregateStats, bins: int = 10) -> pd.DataFrame:
    """Get lifetime distribution histogram.

    Args:
        stats: Computed survival statistics
        bins: Number of bins for histogram

    Returns:
        DataFrame with bin ranges and counts
    """
    if not stats.lifetimes:
        return pd.DataFrame(columns=["bin", "count"])

    lifetimes = pd.Series(stats.lifetimes)
    counts, bin_edges = pd.cut(lifetimes, bins=bins, retbins=True, include_lowest=True)
    dist = counts.value_counts().sort_index()

    bin_labels = [f"{edge:.1f}-{bin_edges[i + 1]:.1f}" for i, edge in enumerate(bin_edges[:-1])]

    return pd.DataFrame({"bin": bin_labels, "count": dist.values})
