"""
Shared fixtures: Chromium-style cookie databases and v10 ciphertexts.
"""
import sqlite3
from pathlib import Path

import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad

TEST_KEY = b"1234567890abcdef"

COOKIES_SCHEMA = """
CREATE TABLE cookies (
    name TEXT,
    value TEXT,
    encrypted_value BLOB,
    host_key TEXT,
    last_access_utc INTEGER
);
"""


def encrypt_v10(plaintext, key=TEST_KEY):
    """Encrypt the way Chromium does on macOS/Linux: v10 + AES-128-CBC, space IV."""
    if isinstance(plaintext, str):
        plaintext = plaintext.encode("utf-8")
    cipher = AES.new(key, AES.MODE_CBC, iv=b" " * 16)
    return b"v10" + cipher.encrypt(pad(plaintext, AES.block_size))


def cookie(name, value="", encrypted_value=b"", host_key=".notion.so", last_access_utc=1):
    return {
        "name": name,
        "value": value,
        "encrypted_value": encrypted_value,
        "host_key": host_key,
        "last_access_utc": last_access_utc,
    }


def write_cookies_db(db_path, rows):
    """Create a cookies database at db_path holding rows."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        conn.executescript(COOKIES_SCHEMA)
        conn.executemany(
            "INSERT INTO cookies (name, value, encrypted_value, host_key, last_access_utc) "
            "VALUES (:name, :value, :encrypted_value, :host_key, :last_access_utc)",
            rows,
        )
        conn.commit()
    finally:
        conn.close()
    return db_path


@pytest.fixture
def notion_dir(tmp_path):
    """An existing, empty Notion data directory."""
    path = tmp_path / "Notion"
    path.mkdir()
    return path


@pytest.fixture
def partition_db(notion_dir):
    """Path of the partition cookie database (not created)."""
    return notion_dir / "Partitions" / "notion" / "Cookies"
