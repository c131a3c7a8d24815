"""Configuration management for code-halflife."""

from pathlib import Path
import json

from pydantic import BaseModel, Field

from code_halflife.analysis.tracking.lifecycle_tracker import ModificationPolicy


class AnalysisConfig(BaseModel):
    """Configuration for history replay and statistics."""

    file_pattern: str = Field(default="*", description="Glob pattern of files to analyze")
    branch: str | None = Field(default=None, description="Branch to follow (default: auto)")
    candidate_branches: list[str] = Field(
        default_factory=lambda: ["main", "master"],
        description="Branches tried in order when no branch is given",
    )
    time_points: int = Field(default=100, ge=1, description="Survival curve sample count")
    modification_policy: ModificationPolicy = Field(
        default=ModificationPolicy.REPLACE, description="How edited lines are represented"
    )
    validate_mode: bool = Field(default=False, description="Collect timeline and sample lines")


class ReportConfig(BaseModel):
    """Configuration for report rendering."""

    timeline_preview: int = Field(default=5, ge=0, description="Timeline events shown per end")
    curve_preview_points: int = Field(default=5, ge=1, description="Survival curve rows shown")


class VisualizationConfig(BaseModel):
    """Configuration for survival curve plots."""

    dpi: int = Field(default=300, description="DPI for saved figures")
    figure_size: tuple[int, int] = Field(default=(10, 6), description="Default figure size")
    style: str = Field(default="whitegrid", description="Seaborn style")
    color_palette: str = Field(default="deep", description="Color palette")


class Config(BaseModel):
    """Main configuration for code-halflife."""

    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    visualization: VisualizationConfig = Field(default_factory=VisualizationConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "Config":
        """Load configuration from a JSON file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to a JSON file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)

    @classmethod
    def get_default(cls) -> "Config":
        """Get default configuration."""
        return cls()


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from file or return default.

    Args:
        config_path: Path to configuration file. If None, searches the default
            locations and falls back to the default config.

    Returns:
        Config object
    """
    if config_path is None:
        default_locations = [
            Path.home() / ".config" / "code-halflife" / "config.json",
            Path.cwd() / "code-halflife.json",
        ]

        for location in default_locations:
            if location.exists():
                return Config.load_from_file(location)

        return Config.get_default()

    return Config.load_from_file(config_path)
