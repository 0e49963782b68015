"""
Notion session token extractor.

Reads ``token_v2`` (and the signed-in user ids) from the Notion desktop app's
cookie store and returns them as an ExtractedCredential. Each ``extract()``
call resolves paths, reads the store, derives the key if needed and decodes,
with no state kept between calls.
"""

import json
import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from notion_token.core.config import resolve_base_dir, resolve_store_locations
from notion_token.core.errors import KeySourceUnavailable, StoreNotFound
from notion_token.core.models import CookieRow, ExtractedCredential, PlatformId
from notion_token.crypto.decoder import decode, requires_key
from notion_token.crypto.keys import KeyDerivationProvider, get_key_provider
from notion_token.readers.cookie_store import CookieStoreReader

logger = logging.getLogger(__name__)

TOKEN_COOKIE = "token_v2"
USER_ID_COOKIE = "notion_user_id"
USERS_COOKIE = "notion_users"
COOKIE_NAMES = (TOKEN_COOKIE, USER_ID_COOKIE, USERS_COOKIE)

NOTION_DOMAINS = ("notion.so", "notion.com")


def is_notion_host(host_key: str) -> bool:
    """True if a cookie's ``host_key`` is a Notion domain or subdomain."""
    host = host_key.lstrip(".").lower()
    return any(host == domain or host.endswith("." + domain) for domain in NOTION_DOMAINS)


def select_rows(rows: Iterable[CookieRow]) -> Dict[str, CookieRow]:
    """
    Pick the authoritative row for each cookie name.

    Rows outside Notion's domains are dropped; among the rest the most
    recently accessed row wins.

    Parameters
    ----------
    rows : Iterable[CookieRow]
        Rows as read from the store

    Returns
    -------
    Dict[str, CookieRow]
        Cookie name -> selected row
    """
    grouped: Dict[str, List[CookieRow]] = defaultdict(list)
    for row in rows:
        if is_notion_host(row.host_key):
            grouped[row.name].append(row)
        else:
            logger.debug("Ignoring %s cookie for host %s", row.name, row.host_key)

    return {
        name: max(candidates, key=lambda r: r.last_access_utc)
        for name, candidates in grouped.items()
    }


def parse_user_ids(raw: Optional[str]) -> Optional[List[str]]:
    """
    Parse the ``notion_users`` cookie, a JSON array of user ids.

    Decrypted values can carry bytes before the array, so parsing starts at
    the first ``[``. Returns None unless the value is an array of strings.
    """
    if not raw:
        return None

    start = raw.find("[")
    if start == -1:
        return None

    try:
        parsed = json.loads(raw[start:])
    except json.JSONDecodeError:
        return None

    if not isinstance(parsed, list) or not all(isinstance(u, str) for u in parsed):
        return None
    return parsed


class TokenExtractor:
    """
    Extracts the Notion session credential from the desktop app's cookies.

    Attributes
    ----------
    platform : PlatformId
        Platform whose paths and key source are used
    notion_dir : Path
        Notion data directory (may not exist)

    Methods
    -------
    extract()
        Read and decode the credential; None if the user is not signed in
    """

    def __init__(
        self,
        platform: Optional[Union[PlatformId, str]] = None,
        notion_dir: Optional[Union[str, Path]] = None,
        key_provider: Optional[KeyDerivationProvider] = None,
    ):
        """
        Initialize extractor.

        Parameters
        ----------
        platform : PlatformId or str, optional
            Target platform. If None, uses the running platform.
        notion_dir : str or Path, optional
            Notion data directory. If None, uses the default OS location.
        key_provider : KeyDerivationProvider, optional
            Key source. If None, the provider for ``platform`` is used.
        """
        self.platform = PlatformId.current() if platform is None else PlatformId.from_value(platform)
        self.notion_dir = resolve_base_dir(self.platform, notion_dir)
        self._key_provider = key_provider

    def get_notion_dir(self) -> Path:
        """Notion data directory used by this extractor."""
        return self.notion_dir

    @property
    def key_provider(self) -> KeyDerivationProvider:
        if self._key_provider is None:
            self._key_provider = get_key_provider(self.platform, self.notion_dir)
        return self._key_provider

    def extract(self) -> Optional[ExtractedCredential]:
        """
        Read the credential from the cookie store.

        Returns
        -------
        ExtractedCredential or None
            The credential, or None if no usable ``token_v2`` cookie exists

        Raises
        ------
        StoreNotFound
            If the Notion directory or its cookie database does not exist
        KeySourceUnavailable
            If token_v2 needs decrypting and the platform key cannot be read
        """
        if not self.notion_dir.is_dir():
            raise StoreNotFound(f"Notion directory not found: {self.notion_dir}")

        reader = CookieStoreReader(resolve_store_locations(self.notion_dir))
        selected = select_rows(reader.query_cookies(COOKIE_NAMES))

        token_row = selected.get(TOKEN_COOKIE)
        if token_row is None:
            logger.debug("No %s cookie found", TOKEN_COOKIE)
            return None

        key = None
        if requires_key(token_row):
            key = self.key_provider.derive_key()
        elif any(requires_key(row) for row in selected.values()):
            # Only optional ids need the key; without it they are left out.
            try:
                key = self.key_provider.derive_key()
            except KeySourceUnavailable as e:
                logger.debug("Skipping encrypted user id cookies: %s", e)

        token = decode(token_row, key)
        if not token:
            logger.debug("%s cookie could not be decoded", TOKEN_COOKIE)
            return None

        user_id = decode(selected.get(USER_ID_COOKIE), key) or None
        user_ids = parse_user_ids(decode(selected.get(USERS_COOKIE), key))

        logger.info("Extracted Notion credential from %s", self.notion_dir)
        return ExtractedCredential(token_v2=token, user_id=user_id, user_ids=user_ids)


def extract(
    platform: Optional[Union[PlatformId, str]] = None,
    notion_dir: Optional[Union[str, Path]] = None,
) -> Optional[ExtractedCredential]:
    """Extract the credential with a fresh TokenExtractor."""
    return TokenExtractor(platform, notion_dir).extract()
