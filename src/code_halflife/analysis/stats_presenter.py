"""Presentation layer for half-life reports.

This module handles the display and export of survival statistics,
separating presentation logic from command orchestration.
"""

from datetime import datetime
import json
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from code_halflife.analysis.survival_stats import AggregateStats
from code_halflife.analysis.tracking import LineRecord, TimelineEvent
from code_halflife.core.analyzer import AnalysisResult


def display_stats_tables(
    stats: AggregateStats, console: Console, curve_points: int = 5
) -> None:
    """Display survival statistics as Rich tables.

    Args:
        stats: Survival statistics data
        console: Rich console for output
        curve_points: Number of survival curve rows to show

    Displays four tables:
    1. Summary (half-life, median, tracked/surviving/deleted lines)
    2. Repository Timespan (first/last commit, commits processed)
    3. Lifetime Statistics (mean/median/stddev, ages, change frequency)
    4. Survival Rate (fraction alive at evenly spaced points of the curve)
    """
    summary_table = Table(title="Code Half-Life Analysis - Summary")
    summary_table.add_column("Metric", style="cyan")
    summary_table.add_column("Value", style="green", justify="right")

    summary_table.add_row("Code half-life", f"{stats.half_life:.1f} days")
    summary_table.add_row("Median age", f"{stats.median_lifetime:.1f} days")
    summary_table.add_row("Total lines analyzed", str(stats.total_tracked))
    summary_table.add_row(
        "Currently surviving",
        f"{stats.surviving_lines} ({stats.surviving_percentage:.1f}%)",
    )
    summary_table.add_row(
        "Deleted", f"{stats.deleted_lines} ({stats.deleted_percentage:.1f}%)"
    )

    console.print(summary_table)

    timespan_table = Table(title="Repository Timespan")
    timespan_table.add_column("Metric", style="cyan")
    timespan_table.add_column("Value", style="green", justify="right")

    timespan_table.add_row("First commit", _format_date(stats.first_commit_at))
    timespan_table.add_row("Last commit", _format_date(stats.last_commit_at))
    timespan_table.add_row("Total age", f"{stats.timespan_days:.1f} days")
    timespan_table.add_row("Commits processed", str(stats.commits_processed))
    timespan_table.add_row("Commits skipped", str(stats.commits_skipped))

    console.print(timespan_table)

    _display_lifetime_statistics_table(stats, console)
    _display_survival_curve_table(stats.survival_curve, console, curve_points)


def display_validation_report(
    result: AnalysisResult, console: Console, timeline_preview: int = 5
) -> None:
    """Display sample lines and a timeline excerpt for manual validation.

    Args:
        result: Analysis result collected in validation mode
        console: Rich console for output
        timeline_preview: Number of events shown from each end of the timeline
    """
    sample_table = Table(title="Sample Lines for Validation")
    sample_table.add_column("Sample", style="cyan")
    sample_table.add_column("File", style="magenta")
    sample_table.add_column("Content")
    sample_table.add_column("Age (days)", style="green", justify="right")
    sample_table.add_column("Created in", style="yellow")
    sample_table.add_column("Created at")

    for label, record in result.samples.items():
        sample_table.add_row(
            label,
            record.file,
            record.content,
            f"{record.lifetime_days(result.analyzed_at):.1f}",
            record.origin_commit[:7],
            _format_date(record.created_at),
        )

    console.print(sample_table)

    timeline = result.timeline
    console.print(
        f"[bold]Timeline sample[/bold] (first {timeline_preview} and last "
        f"{timeline_preview} of {len(timeline)} events)"
    )
    for event in _timeline_excerpt(timeline, timeline_preview):
        if event is None:
            console.print("...")
            continue
        console.print(
            f"{_format_date(event.timestamp)}: {event.kind.value} line in {event.file} "
            f"({event.running_line_count} lines total, {event.running_deleted_count} deleted)",
            highlight=False,
        )


def display_skipped_commits(result: AnalysisResult, console: Console) -> None:
    """Warn about commits that could not be read."""
    if not result.skipped_commits:
        return

    skipped_table = Table(title="Skipped Commits")
    skipped_table.add_column("Commit", style="yellow")
    skipped_table.add_column("Date")
    skipped_table.add_column("Reason", style="red")

    for outcome in result.skipped_commits:
        skipped_table.add_row(
            outcome.commit_id[:7], _format_date(outcome.timestamp), outcome.reason or ""
        )

    console.print(skipped_table)


def result_to_dict(result: AnalysisResult) -> dict[str, Any]:
    """Convert an analysis result to a JSON-serializable dictionary."""
    stats = result.stats
    data: dict[str, Any] = {
        "half_life": stats.half_life,
        "mean_lifetime": stats.mean_lifetime,
        "median_lifetime": stats.median_lifetime,
        "std_dev_lifetime": stats.std_dev_lifetime,
        "total_tracked": stats.total_tracked,
        "surviving_lines": stats.surviving_lines,
        "deleted_lines": stats.deleted_lines,
        "lines_with_changes": stats.lines_with_changes,
        "change_frequency": dict(stats.change_frequency),
        "average_edit_size": stats.average_edit_size,
        "oldest_line": stats.oldest_line,
        "oldest_age": stats.oldest_age,
        "newest_line": stats.newest_line,
        "newest_age": stats.newest_age,
        "first_commit": _isoformat(stats.first_commit_at),
        "last_commit": _isoformat(stats.last_commit_at),
        "commits_processed": stats.commits_processed,
        "commits_skipped": stats.commits_skipped,
        "survival_curve": [
            {"age_days": age, "fraction": fraction} for age, fraction in stats.survival_curve
        ],
        "analyzed_at": result.analyzed_at.isoformat(),
        "branch": result.branch,
        "skipped": [
            {"commit": o.commit_id, "timestamp": o.timestamp.isoformat(), "reason": o.reason}
            for o in result.skipped_commits
        ],
    }

    if result.is_validation:
        data["samples"] = {
            label: _record_to_dict(record) for label, record in result.samples.items()
        }
        data["timeline"] = [_timeline_event_to_dict(event) for event in result.timeline]

    return data


def export_result_to_json(result: AnalysisResult, output_path: str) -> str:
    """Export an analysis result to a JSON file.

    Args:
        result: Analysis result
        output_path: Output file path (``.json`` is appended if missing)

    Returns:
        Actual output file path used
    """
    output_file = output_path if output_path.endswith(".json") else f"{output_path}.json"
    path = Path(output_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2, ensure_ascii=False)

    return output_file


# Helper functions


def _display_lifetime_statistics_table(stats: AggregateStats, console: Console) -> None:
    lifetime_table = Table(title="Lifetime Statistics")
    lifetime_table.add_column("Metric", style="cyan")
    lifetime_table.add_column("Value", style="green", justify="right")

    lifetime_table.add_row("Mean lifetime", f"{stats.mean_lifetime:.1f} days")
    lifetime_table.add_row("Median lifetime", f"{stats.median_lifetime:.1f} days")
    lifetime_table.add_row("Std. deviation", f"{stats.std_dev_lifetime:.1f} days")
    lifetime_table.add_row("Lifetime samples", str(stats.sample_size))
    lifetime_table.add_row("Oldest surviving line", _format_age(stats.oldest_age))
    lifetime_table.add_row("Newest surviving line", _format_age(stats.newest_age))
    lifetime_table.add_row("Lines with changes", str(stats.lines_with_changes))
    lifetime_table.add_row("Average edit size", f"{stats.average_edit_size:.1f} chars")
    for kind, count in stats.change_frequency.items():
        lifetime_table.add_row(f"{kind.capitalize()} events", str(count))

    console.print(lifetime_table)


def _display_survival_curve_table(
    curve: tuple[tuple[float, float], ...], console: Console, num_points: int
) -> None:
    curve_table = Table(title="Survival Rate")
    curve_table.add_column("Position", style="cyan", justify="right")
    curve_table.add_column("Age (days)", style="yellow", justify="right")
    curve_table.add_column("Surviving", style="green", justify="right")

    if not curve:
        console.print("No survival rate data available")
        return

    step = max(len(curve) // num_points, 1)
    for i in range(0, min(num_points, len(curve))):
        index = i * step
        if index >= len(curve):
            break
        age, fraction = curve[index]
        curve_table.add_row(
            f"{index / len(curve) * 100:.0f}%", f"{age:.1f}", f"{fraction * 100:.1f}%"
        )

    console.print(curve_table)


def _timeline_excerpt(
    timeline: list[TimelineEvent], preview: int
) -> list[TimelineEvent | None]:
    """First and last ``preview`` events, with None marking the elided middle."""
    if len(timeline) <= preview * 2:
        return list(timeline)
    return [*timeline[:preview], None, *timeline[-preview:]]


def _record_to_dict(record: LineRecord) -> dict[str, Any]:
    return {
        "file": record.file,
        "content": record.content,
        "created_at": record.created_at.isoformat(),
        "last_seen_at": record.last_seen_at.isoformat(),
        "deleted_at": _isoformat(record.deleted_at),
        "origin_commit": record.origin_commit,
        "events": [
            {
                "timestamp": event.timestamp.isoformat(),
                "kind": event.kind.value,
                "commit": event.commit_id,
                "payload": event.payload,
            }
            for event in record.events
        ],
    }


def _timeline_event_to_dict(event: TimelineEvent) -> dict[str, Any]:
    return {
        "timestamp": event.timestamp.isoformat(),
        "commit": event.commit_id,
        "kind": event.kind.value,
        "file": event.file,
        "line": event.line,
        "running_line_count": event.running_line_count,
        "running_deleted_count": event.running_deleted_count,
    }


def _format_date(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d") if value is not None else "-"


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _format_age(age: float | None) -> str:
    return f"{age:.1f} days" if age is not None else "-"
