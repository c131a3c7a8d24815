"""Survival curve plotting."""

from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from code_halflife.analysis.survival_stats import AggregateStats
from code_halflife.core.config import VisualizationConfig

_CURVE_COLOR = "#1f77b4"
_HALF_LIFE_COLOR = "#d62728"


def survival_curve_frame(stats: AggregateStats) -> pd.DataFrame:
    """Survival curve as a DataFrame with age_days and surviving_pct columns."""
    df = pd.DataFrame(stats.survival_curve, columns=["age_days", "fraction"])
    df["surviving_pct"] = df["fraction"] * 100
    return df


def plot_survival_curve(
    stats: AggregateStats,
    output_path: Path,
    config: VisualizationConfig | None = None,
) -> Path:
    """Plot the survival curve with the half-life marked and save it.

    Args:
        stats: Survival statistics
        output_path: Image file path (format inferred from the suffix)
        config: Figure settings (default: VisualizationConfig())

    Returns:
        Path of the saved figure
    """
    config = config or VisualizationConfig()
    sns.set_theme(style=config.style, palette=config.color_palette)

    df = survival_curve_frame(stats)

    fig, ax = plt.subplots(figsize=config.figure_size)
    sns.lineplot(data=df, x="age_days", y="surviving_pct", color=_CURVE_COLOR, ax=ax)
    ax.axhline(50, color="gray", linestyle=":", linewidth=1)
    ax.axvline(
        stats.half_life,
        color=_HALF_LIFE_COLOR,
        linestyle="--",
        linewidth=1.2,
        label=f"Half-life: {stats.half_life:.1f} days",
    )
    ax.set_xlabel("Age (days)")
    ax.set_ylabel("Lines surviving (%)")
    ax.set_ylim(0, 105)
    ax.set_title("Code Survival Curve")
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3, linestyle="--")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.tight_layout()
    plt.savefig(output_path, dpi=config.dpi, bbox_inches="tight", facecolor="white")
    plt.close(fig)

    return output_path
