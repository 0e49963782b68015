"""
Services that consume extracted credentials.
"""

from .credentials import CredentialManager

__all__ = [
    "CredentialManager",
]
