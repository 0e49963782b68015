"""
Reader for Chromium-format cookie databases.

The desktop app keeps its cookies in a SQLite file (``Cookies``) with the
``cookies`` table laid out by Chromium. The reader only selects rows by name;
it does not filter by domain or decrypt anything.

The running app holds the database open, so the file and its journal side
files are copied to a temporary directory and the copy is opened read-only.
"""

import logging
import shutil
import sqlite3
import tempfile
from contextlib import closing
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from notion_token.core.errors import StoreNotFound
from notion_token.core.models import CookieRow

logger = logging.getLogger(__name__)

SIDE_FILE_SUFFIXES = ("-wal", "-shm", "-journal")

COOKIE_COLUMNS = "name, value, encrypted_value, host_key, last_access_utc"


def find_store(store_locations: Iterable[Union[str, Path]]) -> Optional[Path]:
    """
    Get the first candidate database that exists.

    Parameters
    ----------
    store_locations : Iterable[str or Path]
        Candidate paths, most specific first

    Returns
    -------
    Path or None
        First existing file, or None if there is none
    """
    for location in store_locations:
        path = Path(location)
        if path.is_file():
            return path
        logger.debug("Cookie database not found at %s", path)
    return None


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _row_to_cookie(row: sqlite3.Row) -> CookieRow:
    encrypted = row["encrypted_value"]
    if encrypted is None:
        encrypted = b""
    elif isinstance(encrypted, str):
        encrypted = encrypted.encode("utf-8")

    return CookieRow(
        name=_text(row["name"]),
        value=_text(row["value"]),
        encrypted_value=bytes(encrypted),
        host_key=_text(row["host_key"]),
        last_access_utc=int(row["last_access_utc"] or 0),
    )


class CookieStoreReader:
    """
    Reads cookie rows from the first existing database among candidates.

    Attributes
    ----------
    store_locations : List[Path]
        Candidate database paths, most specific first
    """

    def __init__(self, store_locations: Sequence[Union[str, Path]]):
        self.store_locations = [Path(p) for p in store_locations]

    def query_cookies(self, names: Iterable[str]) -> List[CookieRow]:
        """
        Select every row whose name is in ``names``, whatever its domain.

        Parameters
        ----------
        names : Iterable[str]
            Cookie names to select

        Returns
        -------
        List[CookieRow]
            Matching rows, possibly empty

        Raises
        ------
        StoreNotFound
            If no candidate exists, or the file is not a readable cookie database
        """
        db_path = find_store(self.store_locations)
        if db_path is None:
            searched = ", ".join(str(p) for p in self.store_locations)
            raise StoreNotFound(f"Notion cookie database not found (searched: {searched})")

        names = sorted(set(names))
        if not names:
            return []

        logger.debug("Reading cookies from %s", db_path)

        with tempfile.TemporaryDirectory(prefix="notion_cookies_") as temp_dir:
            try:
                temp_db = self._copy_store(db_path, Path(temp_dir))
                rows = self._select(temp_db, names)
            except (OSError, sqlite3.Error) as e:
                raise StoreNotFound(f"Cannot read cookie database {db_path}: {e}") from e

        logger.debug("Found %d matching cookie rows", len(rows))
        return rows

    @staticmethod
    def _copy_store(db_path: Path, temp_dir: Path) -> Path:
        temp_db = temp_dir / db_path.name
        shutil.copy2(db_path, temp_db)
        for suffix in SIDE_FILE_SUFFIXES:
            side_file = db_path.with_name(db_path.name + suffix)
            if side_file.exists():
                shutil.copy2(side_file, temp_dir / side_file.name)
        return temp_db

    @staticmethod
    def _select(db_path: Path, names: List[str]) -> List[CookieRow]:
        placeholders = ", ".join("?" for _ in names)
        query = f"SELECT {COOKIE_COLUMNS} FROM cookies WHERE name IN ({placeholders})"

        with closing(sqlite3.connect(f"{db_path.as_uri()}?mode=ro", uri=True)) as conn:
            conn.row_factory = sqlite3.Row
            conn.text_factory = lambda data: data.decode("utf-8", errors="replace")
            cursor = conn.execute(query, names)
            return [_row_to_cookie(row) for row in cursor.fetchall()]


def query_cookies(
    store_locations: Sequence[Union[str, Path]],
    names: Iterable[str],
) -> List[CookieRow]:
    """Select cookie rows by name; see ``CookieStoreReader.query_cookies``."""
    return CookieStoreReader(store_locations).query_cookies(names)
