"""
Domain models for cookie extraction.

These models represent the rows read from the desktop app's cookie store and
the credential produced from them, independent of SQLite's row format.

All models use Pydantic for validation, serialization, and type safety.
"""

import sys
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from notion_token.core.errors import ConfigurationError


class PlatformId(str, Enum):
    """Operating systems the Notion desktop app ships for (``sys.platform`` values)."""

    MACOS = "darwin"
    LINUX = "linux"
    WINDOWS = "win32"

    @classmethod
    def from_value(cls, value: str) -> "PlatformId":
        """
        Map a platform string to a PlatformId.

        Parameters
        ----------
        value : str
            ``sys.platform``-style identifier ('darwin', 'linux', 'win32')

        Returns
        -------
        PlatformId
            Matching platform

        Raises
        ------
        ConfigurationError
            If the platform is not one Notion supports
        """
        if isinstance(value, cls):
            return value
        if value.startswith("linux"):
            return cls.LINUX
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unsupported platform: {value}") from None

    @classmethod
    def current(cls) -> "PlatformId":
        """Platform of the running interpreter."""
        return cls.from_value(sys.platform)


class CookieRow(BaseModel):
    """
    One row of the ``cookies`` table.

    ``last_access_utc`` is in the store's native epoch (microseconds since
    1601-01-01 for Chromium) and is only compared, never converted.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    value: str = ""
    encrypted_value: bytes = b""
    host_key: str = ""
    last_access_utc: int = 0

    @property
    def needs_decryption(self) -> bool:
        """True when the plaintext column is empty and a ciphertext is present."""
        return not self.value and bool(self.encrypted_value)

    def __repr__(self) -> str:
        # Cookie values are credentials; keep them out of reprs and logs.
        return (
            f"CookieRow(name={self.name!r}, host_key={self.host_key!r}, "
            f"last_access_utc={self.last_access_utc})"
        )

    def __str__(self) -> str:
        return self.__repr__()


class ExtractedCredential(BaseModel):
    """
    Credential read from the desktop app.

    ``user_id`` and ``user_ids`` are None when the corresponding cookie is
    missing or unreadable, so an absent id is distinguishable from an empty one.
    """

    token_v2: str
    user_id: Optional[str] = None
    user_ids: Optional[List[str]] = None

    @property
    def token(self) -> str:
        return self.token_v2

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without the fields that are not set."""
        return self.model_dump(exclude_none=True)

    def __repr__(self) -> str:
        return f"ExtractedCredential(user_id={self.user_id!r}, user_ids={self.user_ids!r})"

    def __str__(self) -> str:
        return self.__repr__()
