"""
Click-based command line for notion-token.

Usage: ``python -m notion_token auth extract`` (or the ``notion-token`` script).
"""
import logging

import click

from notion_token import __version__
from notion_token.cli.commands.auth import auth


class CliContext:
    """Shared state passed to subcommands through ``ctx.obj``."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose


@click.group()
@click.version_option(__version__, prog_name="notion-token")
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """Extract the Notion desktop app's session token."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    ctx.obj = CliContext(verbose=verbose)


cli.add_command(auth)


def main():
    """Entry point for the console script and ``python -m notion_token``."""
    return cli(obj=None)
