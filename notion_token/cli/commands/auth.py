"""
Authentication commands (extract, status, logout).

``extract`` reads token_v2 from the Notion desktop app and stores it;
``status`` and ``logout`` inspect and delete the stored credential.
All commands print JSON to stdout and errors as JSON to stderr.
"""
import json
from typing import NoReturn

import click

from notion_token.cli.common import (
    config_dir_option,
    format_output,
    mask_token,
    notion_dir_option,
    pretty_option,
)
from notion_token.core.errors import TokenExtractionError
from notion_token.core.models import PlatformId
from notion_token.extractors.notion import TokenExtractor
from notion_token.services.credentials import CredentialManager

KEYCHAIN_NOTICE = """
  Extracting your Notion credentials...

  Your Mac may ask for your password to access Keychain.
  Notion encrypts its login cookies with a key kept in the macOS Keychain.

  What happens:
    1. The encrypted cookie is read from Notion's local storage
    2. macOS Keychain releases the decryption key (requires your password)
    3. The token is stored locally in your notion-token config directory

  Your password is never stored or transmitted anywhere.
"""


def _fail(ctx, message: str) -> NoReturn:
    click.echo(json.dumps({"error": message}), err=True)
    ctx.exit(1)


@click.group()
def auth():
    """Authentication commands."""


@auth.command()
@pretty_option
@click.option('--debug', is_flag=True, help='Show debug output for troubleshooting')
@notion_dir_option
@config_dir_option
@click.option(
    '--platform',
    type=click.Choice([p.value for p in PlatformId]),
    default=None,
    help='Platform layout to read (default: this machine)',
)
@click.pass_context
def extract(ctx, pretty, debug, notion_dir, config_dir, platform):
    """Extract token_v2 from the Notion desktop app and store it."""
    try:
        extractor = TokenExtractor(platform=platform, notion_dir=notion_dir)
    except TokenExtractionError as e:
        _fail(ctx, str(e))

    if extractor.platform is PlatformId.MACOS:
        click.echo(KEYCHAIN_NOTICE, err=True)

    if debug:
        click.echo(f"[debug] Notion directory: {extractor.get_notion_dir()}", err=True)

    try:
        extracted = extractor.extract()
    except TokenExtractionError as e:
        _fail(ctx, str(e))

    if extracted is None:
        error = {"error": "No token_v2 found. Make sure Notion desktop app is installed and logged in."}
        if not debug:
            error["hint"] = "Run with --debug for more info."
        click.echo(format_output(error, pretty))
        ctx.exit(1)

    if debug:
        click.echo(f"[debug] token_v2 extracted: {mask_token(extracted.token_v2)}", err=True)

    manager = CredentialManager(config_dir)
    try:
        manager.set_credentials(extracted)
    except OSError as e:
        _fail(ctx, f"Could not store credentials: {e}")

    output = {
        "token_v2": mask_token(extracted.token_v2),
        "user_id": extracted.user_id,
        "stored": True,
    }
    if extracted.user_ids:
        output["user_ids"] = extracted.user_ids
    click.echo(format_output(output, pretty))


@auth.command()
@pretty_option
@config_dir_option
@click.pass_context
def status(ctx, pretty, config_dir):
    """Show stored credential status."""
    try:
        stored = CredentialManager(config_dir).get_credentials()
    except (OSError, ValueError) as e:
        _fail(ctx, f"Could not read stored credentials: {e}")

    stored_output = None
    if stored:
        stored_output = {
            "token_v2": mask_token(stored.token_v2),
            "user_id": stored.user_id,
        }
        if stored.user_ids:
            stored_output["user_ids"] = stored.user_ids

    output = {"stored_token_v2": stored_output}
    click.echo(format_output(output, pretty))


@auth.command()
@pretty_option
@config_dir_option
@click.pass_context
def logout(ctx, pretty, config_dir):
    """Remove locally stored token_v2 credentials."""
    try:
        CredentialManager(config_dir).remove()
    except OSError as e:
        _fail(ctx, str(e))

    click.echo(format_output({"success": True}, pretty))
