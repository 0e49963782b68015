"""
Local storage for extracted credentials.

Credentials are kept in ``credentials.json`` under the config directory,
readable by the owner only.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from notion_token.core.config import get_default_config_dir
from notion_token.core.models import ExtractedCredential

logger = logging.getLogger(__name__)

CREDENTIALS_FILENAME = "credentials.json"
CREDENTIALS_MODE = 0o600


class CredentialManager:
    """
    Reads and writes the stored credential file.

    The file holds ``{"credentials": {...}}``, or ``{"credentials": null}``
    after an explicit reset.
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Initialize manager.

        Parameters
        ----------
        config_dir : str or Path, optional
            Directory for credentials.json. If None, uses get_default_config_dir().
        """
        self.config_dir = Path(config_dir) if config_dir else get_default_config_dir()
        self.credentials_path = self.config_dir / CREDENTIALS_FILENAME

    def load(self) -> Dict[str, Any]:
        if not self.credentials_path.exists():
            return {"credentials": None}

        with open(self.credentials_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def save(self, config: Dict[str, Any]) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # O_CREAT mode only applies to new files; chmod covers an existing one.
        fd = os.open(self.credentials_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, CREDENTIALS_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        os.chmod(self.credentials_path, CREDENTIALS_MODE)
        logger.debug("Saved credentials to %s", self.credentials_path)

    def get_credentials(self) -> Optional[ExtractedCredential]:
        credentials = self.load().get("credentials")
        if not credentials:
            return None
        return ExtractedCredential.model_validate(credentials)

    def set_credentials(self, credential: ExtractedCredential) -> None:
        self.save({"credentials": credential.to_dict()})

    def remove(self) -> None:
        """Delete the credential file; a missing file is not an error."""
        try:
            self.credentials_path.unlink()
            logger.debug("Removed %s", self.credentials_path)
        except FileNotFoundError:
            pass
