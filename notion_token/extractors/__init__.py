"""
Extractors for pulling credentials out of desktop app stores.
"""

from .notion import TokenExtractor, extract

__all__ = [
    "TokenExtractor",
    "extract",
]
