"""
Decoding of stored cookie values.

A cookie row carries either a plaintext ``value`` or a version-tagged
``encrypted_value``. Only the ``v10`` tag is understood:

- 16-byte key (macOS, Linux): AES-128-CBC, IV of 16 spaces, PKCS#7 padding
- 32-byte key (Windows): AES-256-GCM, ``nonce(12) | ciphertext | tag(16)``

Anything that cannot be decoded yields None; the caller decides whether a
missing value matters.
"""

import hashlib
import logging
from typing import Optional

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from notion_token.core.models import CookieRow

logger = logging.getLogger(__name__)

V10_MARKER = b"v10"
MARKER_LENGTH = len(V10_MARKER)
CBC_IV = b" " * 16

GCM_NONCE_LENGTH = 12
GCM_TAG_LENGTH = 16

# Chromium cookie schema 24+ prepends sha256(host_key) to the plaintext.
HOST_DIGEST_LENGTH = 32

# Notion tokens are recognizable even when stored unencrypted in encrypted_value.
PLAINTEXT_TOKEN_PREFIXES = (b"v02:", b"v02%3A")


def requires_key(row: CookieRow) -> bool:
    """True if decoding ``row`` needs the derived key."""
    return row.needs_decryption and row.encrypted_value[:MARKER_LENGTH] == V10_MARKER


def _decrypt_cbc(ciphertext: bytes, key: bytes) -> bytes:
    cipher = AES.new(key, AES.MODE_CBC, iv=CBC_IV)
    return unpad(cipher.decrypt(ciphertext), AES.block_size)


def _decrypt_gcm(payload: bytes, key: bytes) -> bytes:
    nonce = payload[:GCM_NONCE_LENGTH]
    ciphertext = payload[GCM_NONCE_LENGTH:-GCM_TAG_LENGTH]
    tag = payload[-GCM_TAG_LENGTH:]
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    return cipher.decrypt_and_verify(ciphertext, tag)


def _strip_host_digest(plaintext: bytes, host_key: str) -> bytes:
    if len(plaintext) < HOST_DIGEST_LENGTH:
        return plaintext
    digest = hashlib.sha256(host_key.encode("utf-8")).digest()
    if plaintext[:HOST_DIGEST_LENGTH] == digest:
        return plaintext[HOST_DIGEST_LENGTH:]
    return plaintext


def decrypt_value(encrypted: bytes, key: Optional[bytes], host_key: str = "") -> Optional[str]:
    """
    Decrypt a ``v10``-tagged cookie value.

    Parameters
    ----------
    encrypted : bytes
        Raw ``encrypted_value`` column, marker included
    key : bytes, optional
        Derived key; None means no key is available
    host_key : str
        Cookie domain, used to detect the schema-24 digest prefix

    Returns
    -------
    str or None
        Decrypted UTF-8 text, or None if the value cannot be decoded
    """
    if encrypted.startswith(PLAINTEXT_TOKEN_PREFIXES):
        try:
            return encrypted.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if encrypted[:MARKER_LENGTH] != V10_MARKER:
        logger.debug("Unsupported cookie marker %r", encrypted[:MARKER_LENGTH])
        return None

    payload = encrypted[MARKER_LENGTH:]
    if not payload or key is None:
        return None

    try:
        if len(key) == 32:
            plaintext = _decrypt_gcm(payload, key)
        else:
            plaintext = _decrypt_cbc(payload, key)
        return _strip_host_digest(plaintext, host_key).decode("utf-8")
    except ValueError as e:
        # Wrong key, bad padding, failed GCM tag or invalid UTF-8.
        logger.debug("Cookie decryption failed: %s", type(e).__name__)
        return None


def decode(row: Optional[CookieRow], key: Optional[bytes]) -> Optional[str]:
    """
    Get the usable value of a cookie row.

    A non-empty plaintext ``value`` wins; otherwise ``encrypted_value`` is
    decrypted with ``key``. Returns None for a missing row, an empty row or a
    value that cannot be decoded.
    """
    if row is None:
        return None
    if row.value:
        return row.value
    if not row.encrypted_value:
        return None
    return decrypt_value(row.encrypted_value, key, row.host_key)
