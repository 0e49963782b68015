"""
Exception hierarchy for token extraction.

Decode failures are not errors: an unusable cookie value is reported as
``None`` by the decoder and handled by the caller.
"""


class TokenExtractionError(Exception):
    """Base class for every failure raised by notion_token."""


class StoreNotFound(TokenExtractionError):
    """The Notion data directory or its cookie database does not exist."""


class KeySourceUnavailable(TokenExtractionError):
    """The platform secret needed to decrypt cookies could not be read."""


class ConfigurationError(TokenExtractionError):
    """Unsupported platform or missing environment needed to locate Notion."""
