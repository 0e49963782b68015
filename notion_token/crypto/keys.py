"""
Key derivation for Notion's encrypted cookies.

Notion's desktop app is Electron, so it encrypts cookies the way Chromium's
os_crypt does. Every platform ends with an AES key, but the secret behind it
comes from a different place on each:

- Linux: the fixed "peanuts" passphrase (no keyring is used by Notion)
- macOS: the "Notion Safe Storage" keychain item
- Windows: a DPAPI-wrapped key stored in ``Local State`` next to the cookies

Each source is a KeyDerivationProvider; ``get_key_provider`` is the only place
that branches on platform. Keys are returned to the caller and never cached.
"""

import base64
import hashlib
import json
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from notion_token.core.config import resolve_base_dir
from notion_token.core.errors import KeySourceUnavailable
from notion_token.core.models import PlatformId

logger = logging.getLogger(__name__)

SALT = b"saltysalt"
KEY_LENGTH = 16

LINUX_PASSWORD = b"peanuts"
LINUX_ITERATIONS = 1

KEYCHAIN_SERVICE = "Notion Safe Storage"
KEYCHAIN_ACCOUNT = "Notion"
MACOS_ITERATIONS = 1003

LOCAL_STATE_FILENAME = "Local State"
DPAPI_PREFIX = b"DPAPI"


def pbkdf2_sha1(password: bytes, iterations: int) -> bytes:
    """PBKDF2-HMAC-SHA1 over the fixed Chromium salt, 16-byte output."""
    return hashlib.pbkdf2_hmac("sha1", password, SALT, iterations, KEY_LENGTH)


class KeyDerivationProvider(ABC):
    """
    Source of the symmetric key used to decrypt cookie values.

    Methods
    -------
    derive_key()
        Produce the key, raising KeySourceUnavailable if the secret is unreachable
    """

    platform: PlatformId

    @abstractmethod
    def derive_key(self) -> bytes:
        """
        Produce the decryption key.

        Returns
        -------
        bytes
            16-byte AES key (32 bytes on Windows)

        Raises
        ------
        KeySourceUnavailable
            If the platform secret cannot be read
        """


class LinuxKeyProvider(KeyDerivationProvider):
    """Fixed key Chromium uses when no OS keyring is engaged."""

    platform = PlatformId.LINUX

    def derive_key(self) -> bytes:
        return pbkdf2_sha1(LINUX_PASSWORD, LINUX_ITERATIONS)


class MacKeychainKeyProvider(KeyDerivationProvider):
    """
    Reads the Safe Storage password from the macOS keychain.

    The lookup goes through the ``security`` tool, which may show a consent
    prompt and block until the user answers it.
    """

    platform = PlatformId.MACOS

    def __init__(self, service: str = KEYCHAIN_SERVICE, account: str = KEYCHAIN_ACCOUNT):
        self.service = service
        self.account = account

    def _lookup_commands(self) -> List[List[str]]:
        base = ["security", "find-generic-password", "-w", "-s", self.service]
        return [base, base + ["-a", self.account]]

    def _read_password(self) -> str:
        for command in self._lookup_commands():
            try:
                result = subprocess.run(
                    command, capture_output=True, text=True, check=True
                )
            except FileNotFoundError:
                raise KeySourceUnavailable(
                    "macOS 'security' tool not found; cannot read the keychain"
                ) from None
            except subprocess.CalledProcessError as e:
                logger.debug("Keychain lookup failed (exit %s)", e.returncode)
                continue

            password = result.stdout.strip()
            if password:
                return password

        raise KeySourceUnavailable(
            f"Could not read '{self.service}' from the macOS keychain. "
            "Make sure Notion is installed and allow keychain access when prompted."
        )

    def derive_key(self) -> bytes:
        password = self._read_password()
        return pbkdf2_sha1(password.encode("utf-8"), MACOS_ITERATIONS)


def _dpapi_unprotect(encrypted: bytes) -> bytes:
    """
    Decrypt a blob with the current user's DPAPI credentials (CryptUnprotectData).

    Only callable on Windows.
    """
    import ctypes
    from ctypes import wintypes

    class DATA_BLOB(ctypes.Structure):
        _fields_ = [("cbData", wintypes.DWORD), ("pbData", ctypes.POINTER(ctypes.c_char))]

    buffer = ctypes.create_string_buffer(encrypted, len(encrypted))
    input_blob = DATA_BLOB(len(encrypted), ctypes.cast(buffer, ctypes.POINTER(ctypes.c_char)))
    output_blob = DATA_BLOB()

    ok = ctypes.windll.crypt32.CryptUnprotectData(
        ctypes.byref(input_blob), None, None, None, None, 0, ctypes.byref(output_blob)
    )
    if not ok:
        raise OSError(f"CryptUnprotectData failed: {ctypes.GetLastError()}")

    try:
        return ctypes.string_at(output_blob.pbData, output_blob.cbData)
    finally:
        ctypes.windll.kernel32.LocalFree(output_blob.pbData)


class WindowsDpapiKeyProvider(KeyDerivationProvider):
    """
    Unwraps the cookie key stored in ``Local State`` with DPAPI.

    ``Local State`` holds ``os_crypt.encrypted_key``: base64 of ``b"DPAPI"``
    followed by the DPAPI blob. The unwrapped key is used directly (no PBKDF2).
    """

    platform = PlatformId.WINDOWS

    def __init__(self, base_dir: Union[str, Path]):
        self.local_state_path = Path(base_dir) / LOCAL_STATE_FILENAME

    def _read_wrapped_key(self) -> bytes:
        try:
            with open(self.local_state_path, "r", encoding="utf-8") as f:
                local_state = json.load(f)
        except FileNotFoundError:
            raise KeySourceUnavailable(
                f"Local State not found: {self.local_state_path}"
            ) from None
        except (OSError, json.JSONDecodeError) as e:
            raise KeySourceUnavailable(f"Cannot read Local State: {e}") from e

        encrypted_key_b64 = local_state.get("os_crypt", {}).get("encrypted_key")
        if not encrypted_key_b64:
            raise KeySourceUnavailable("encrypted_key not found in Local State")

        try:
            encrypted_key = base64.b64decode(encrypted_key_b64)
        except ValueError as e:
            raise KeySourceUnavailable(f"encrypted_key is not valid base64: {e}") from e

        if not encrypted_key.startswith(DPAPI_PREFIX):
            raise KeySourceUnavailable("Invalid key format (missing DPAPI prefix)")
        return encrypted_key[len(DPAPI_PREFIX):]

    def derive_key(self) -> bytes:
        wrapped = self._read_wrapped_key()
        try:
            return _dpapi_unprotect(wrapped)
        except (OSError, AttributeError) as e:
            raise KeySourceUnavailable(f"DPAPI could not unwrap the cookie key: {e}") from e


def get_key_provider(
    platform: Union[PlatformId, str],
    base_dir: Optional[Union[str, Path]] = None,
) -> KeyDerivationProvider:
    """
    Select the key provider for a platform.

    Parameters
    ----------
    platform : PlatformId or str
        Target operating system
    base_dir : str or Path, optional
        Notion data directory holding ``Local State`` on Windows; defaults to
        the platform location

    Returns
    -------
    KeyDerivationProvider
        Provider for that platform
    """
    platform = PlatformId.from_value(platform)

    if platform is PlatformId.LINUX:
        return LinuxKeyProvider()
    if platform is PlatformId.MACOS:
        return MacKeychainKeyProvider()
    if base_dir is None:
        base_dir = resolve_base_dir(platform)
    return WindowsDpapiKeyProvider(base_dir)


def derive_key(
    platform: Union[PlatformId, str],
    base_dir: Optional[Union[str, Path]] = None,
) -> bytes:
    """Derive the cookie key for ``platform``; see ``get_key_provider``."""
    return get_key_provider(platform, base_dir).derive_key()
