"""Analyze command for estimating the half-life of code in a repository."""

import json
from pathlib import Path

import click
from rich.console import Console

from code_halflife.analysis.stats_presenter import (
    display_skipped_commits,
    display_stats_tables,
    display_validation_report,
    export_result_to_json,
    result_to_dict,
)
from code_halflife.analysis.survival_plot import plot_survival_curve
from code_halflife.analysis.tracking import ModificationPolicy
from code_halflife.core.analyzer import HalfLifeAnalyzer
from code_halflife.core.config import load_config
from code_halflife.error.cmd import handle_command_errors

console = Console()


@click.command()
@click.argument("repo_path", type=click.Path(path_type=Path))
@click.argument("pattern", required=False)
@click.option(
    "--validate",
    is_flag=True,
    help="Collect a lifecycle timeline and sample lines for manual validation",
)
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON")
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Also save the JSON report to this file",
)
@click.option(
    "--plot",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Save a survival curve plot (PNG, PDF or SVG)",
)
@click.option("--branch", "-b", help="Branch to follow (default: main, then master)")
@click.option(
    "--time-points",
    type=click.IntRange(1),
    help="Number of ages sampled on the survival curve (default: 100)",
)
@click.option(
    "--modification-policy",
    type=click.Choice([policy.value for policy in ModificationPolicy]),
    help="Represent edits as delete+create (replace) or as modifications (in_place)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file",
)
@click.option("--no-progress", is_flag=True, help="Hide progress bars")
@handle_command_errors
def analyze(
    repo_path: Path,
    pattern: str | None,
    validate: bool,
    json_output: bool,
    output: str | None,
    plot: Path | None,
    branch: str | None,
    time_points: int | None,
    modification_policy: str | None,
    config_path: Path | None,
    no_progress: bool,
):
    """Estimate how long lines of code survive in a git repository.

    REPO_PATH: Path to the git repository

    PATTERN: Glob pattern of files to analyze (e.g. "*.py", default: all files)
    """
    config = load_config(config_path)

    overrides: dict[str, object] = {}
    if pattern is not None:
        overrides["file_pattern"] = pattern
    if branch is not None:
        overrides["branch"] = branch
    if time_points is not None:
        overrides["time_points"] = time_points
    if modification_policy is not None:
        overrides["modification_policy"] = ModificationPolicy(modification_policy)
    if validate:
        overrides["validate_mode"] = True
    analysis_config = config.analysis.model_copy(update=overrides)

    if not json_output:
        console.print(f"[bold blue]Analyzing:[/bold blue] {repo_path}")
        console.print(
            f"[dim]Pattern: {analysis_config.file_pattern}, "
            f"policy: {analysis_config.modification_policy.value}[/dim]",
            highlight=False,
        )

    analyzer = HalfLifeAnalyzer(analysis_config, show_progress=not no_progress)
    result = analyzer.analyze(repo_path)

    if json_output:
        click.echo(json.dumps(result_to_dict(result), indent=2, ensure_ascii=False))
    else:
        display_stats_tables(
            result.stats, console, curve_points=config.report.curve_preview_points
        )
        display_skipped_commits(result, console)
        if analysis_config.validate_mode:
            display_validation_report(
                result, console, timeline_preview=config.report.timeline_preview
            )

    if output:
        output_file = export_result_to_json(result, output)
        if not json_output:
            console.print(f"[green]Results saved to:[/green] {output_file}")

    if plot:
        plot_file = plot_survival_curve(result.stats, plot, config.visualization)
        if not json_output:
            console.print(f"[green]Survival curve saved to:[/green] {plot_file}")

    if not json_output:
        console.print("[bold green]✓[/bold green] Analysis complete!")
