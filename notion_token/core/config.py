"""
Filesystem locations used by notion_token.

Resolves the Notion desktop app's data directory per platform, the candidate
cookie databases inside it, and where extracted credentials are stored.
"""

import os
from pathlib import Path
from typing import List, Optional, Union

from notion_token.core.errors import ConfigurationError
from notion_token.core.models import PlatformId

APP_NAME = "Notion"
PARTITION_NAME = "notion"
COOKIES_FILENAME = "Cookies"

CONFIG_DIR_ENV_VAR = "NOTION_TOKEN_CONFIG_DIR"
NOTION_DIR_ENV_VAR = "NOTION_DIR"


def resolve_base_dir(
    platform: Union[PlatformId, str],
    override: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Get the Notion desktop app's data directory.

    Parameters
    ----------
    platform : PlatformId or str
        Target operating system
    override : str or Path, optional
        Explicit directory; returned unchanged when given

    Returns
    -------
    Path
        Application-support directory for Notion (may not exist)

    Raises
    ------
    ConfigurationError
        On Windows when APPDATA is unset and no override was given, or for an
        unsupported platform
    """
    if override is not None:
        return Path(override)

    platform = PlatformId.from_value(platform)

    if platform is PlatformId.MACOS:
        return Path.home() / "Library" / "Application Support" / APP_NAME
    if platform is PlatformId.LINUX:
        return Path.home() / ".config" / APP_NAME

    app_data = os.environ.get("APPDATA")
    if not app_data:
        raise ConfigurationError(
            "APPDATA is not set; pass the Notion directory explicitly"
        )
    return Path(app_data) / APP_NAME


def resolve_store_locations(base_dir: Union[str, Path]) -> List[Path]:
    """
    Candidate cookie databases under ``base_dir``, most specific first.

    The partition used by the Notion web view comes first, then the root
    store, then the newer ``Network/`` layout. Existence is not checked.
    """
    base_dir = Path(base_dir)
    return [
        base_dir / "Partitions" / PARTITION_NAME / COOKIES_FILENAME,
        base_dir / COOKIES_FILENAME,
        base_dir / "Network" / COOKIES_FILENAME,
    ]


def get_default_config_dir() -> Path:
    """
    Get the directory holding stored credentials.

    Returns
    -------
    Path
        $NOTION_TOKEN_CONFIG_DIR if set, otherwise ~/.config/notion-token
    """
    env_dir = os.environ.get(CONFIG_DIR_ENV_VAR)
    if env_dir:
        return Path(env_dir)
    return Path.home() / ".config" / "notion-token"
