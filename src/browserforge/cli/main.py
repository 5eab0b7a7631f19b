"""BrowserForge CLI entry point."""

import logging

import click


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def cli(verbose: bool):
    """BrowserForge browser field tooling CLI."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)


# Register subcommand groups
from browserforge.cli.browsers_cmd import browsers  # noqa: E402

cli.add_command(browsers)
