"""
Key derivation and cookie value decryption.
"""

from .decoder import decode, decrypt_value
from .keys import KeyDerivationProvider, derive_key, get_key_provider

__all__ = [
    "KeyDerivationProvider",
    "decode",
    "decrypt_value",
    "derive_key",
    "get_key_provider",
]
