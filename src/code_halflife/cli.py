"""CLI entry point for code-halflife tool."""

import logging

import click

from code_halflife.commands import analyze, config


@click.group()
@click.version_option(version="0.1.0", prog_name="code-halflife")
@click.option("--verbose", "-v", is_flag=True, help="Verbose logging")
@click.pass_context
def main(ctx, verbose: bool):
    """Code Half-Life Analysis Tool.

    Estimates how long lines of code survive in a git repository.
    """
    ctx.ensure_object(dict)

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj["verbose"] = verbose


# Register commands
main.add_command(analyze.analyze)
main.add_command(config.config)


if __name__ == "__main__":
    main()
