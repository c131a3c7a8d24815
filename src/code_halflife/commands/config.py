"""Config command for inspecting and creating configuration files."""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from code_halflife.core.config import Config, load_config
from code_halflife.error.cmd import handle_command_errors

console = Console()


@click.group()
def config():
    """Inspect and create configuration files."""
    pass


@config.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON configuration file (default: search standard locations)",
)
@handle_command_errors
def show(config_path: Path | None):
    """Show the effective configuration."""
    current = load_config(config_path)

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for section, values in current.model_dump(mode="json").items():
        for key, value in values.items():
            table.add_row(f"{section}.{key}", str(value))

    console.print(table)


@config.command()
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
@handle_command_errors
def init(output: Path, force: bool):
    """Write the default configuration to OUTPUT."""
    if output.exists() and not force:
        raise ValueError(f"{output} already exists (use --force to overwrite)")

    Config.get_default().save_to_file(output)
    console.print(f"[green]Default configuration saved to:[/green] {output}")
