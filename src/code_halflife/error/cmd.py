import functools
import logging
from typing import Callable

import click
from rich.console import Console

from code_halflife.error.exceptions import HalfLifeError

console = Console()
logger = logging.getLogger(__name__)


def handle_command_errors(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except HalfLifeError as e:
            console.print(f"[red]Error ({e.stage}):[/red] {e.message}", highlight=False)
            raise click.Abort()
        except FileNotFoundError as e:
            console.print(f"[red]Error:[/red] {e}", highlight=False)
            raise click.Abort()
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}", highlight=False)
            raise click.Abort()
        except Exception as e:
            logger.debug("Unexpected failure", exc_info=True)
            console.print(f"[red]Unexpected error:[/red] {e}", highlight=False)
            raise click.Abort()

    return wrapper
