"""
Shared CLI options and output helpers.
"""
import json
from typing import Any

import click

from notion_token.core.config import CONFIG_DIR_ENV_VAR, NOTION_DIR_ENV_VAR

pretty_option = click.option('--pretty', is_flag=True, help='Pretty print JSON output')

config_dir_option = click.option(
    '--config-dir',
    type=click.Path(file_okay=False),
    envvar=CONFIG_DIR_ENV_VAR,
    help='Directory for stored credentials (default: ~/.config/notion-token)',
)

notion_dir_option = click.option(
    '--notion-dir',
    type=click.Path(file_okay=False),
    envvar=NOTION_DIR_ENV_VAR,
    help='Notion desktop data directory (default: OS-specific location)',
)


def format_output(data: Any, pretty: bool = False) -> str:
    """Render command output as JSON."""
    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)


def mask_token(token: str) -> str:
    """Show only the ends of a token: ``v02%3A...abcd``."""
    if len(token) <= 10:
        return '***'
    return f"{token[:6]}...{token[-4:]}"
