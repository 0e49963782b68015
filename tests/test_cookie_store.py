"""
Tests for the cookie database reader.
"""
import sqlite3

import pytest

from conftest import cookie, write_cookies_db
from notion_token.core.errors import StoreNotFound
from notion_token.readers.cookie_store import CookieStoreReader, find_store, query_cookies


def test_find_store_returns_first_existing(tmp_path):
    first = tmp_path / "a" / "Cookies"
    second = write_cookies_db(tmp_path / "b" / "Cookies", [])
    third = write_cookies_db(tmp_path / "c" / "Cookies", [])

    assert find_store([first, second, third]) == second


def test_missing_store_raises(tmp_path):
    with pytest.raises(StoreNotFound, match="cookie database not found"):
        query_cookies([tmp_path / "Cookies"], ["token_v2"])


def test_selects_requested_names_regardless_of_host(tmp_path):
    db = write_cookies_db(tmp_path / "Cookies", [
        cookie("token_v2", value="t1", host_key=".notion.so", last_access_utc=5),
        cookie("token_v2", value="t2", host_key=".example.com", last_access_utc=6),
        cookie("other", value="x"),
    ])

    rows = query_cookies([db], {"token_v2"})

    assert sorted(r.value for r in rows) == ["t1", "t2"]
    assert {r.host_key for r in rows} == {".notion.so", ".example.com"}


def test_row_fields(tmp_path):
    db = write_cookies_db(tmp_path / "Cookies", [
        cookie("token_v2", encrypted_value=b"v10\x00\x01", host_key="www.notion.so", last_access_utc=42),
    ])

    (row,) = CookieStoreReader([db]).query_cookies(["token_v2"])

    assert row.name == "token_v2"
    assert row.value == ""
    assert row.encrypted_value == b"v10\x00\x01"
    assert row.host_key == "www.notion.so"
    assert row.last_access_utc == 42


def test_no_matching_rows(tmp_path):
    db = write_cookies_db(tmp_path / "Cookies", [cookie("other_cookie", value="v")])
    assert query_cookies([db], ["token_v2"]) == []


def test_store_is_not_modified(tmp_path):
    db = write_cookies_db(tmp_path / "Cookies", [cookie("token_v2", value="t")])
    before = db.read_bytes()

    query_cookies([db], ["token_v2"])

    assert db.read_bytes() == before
    assert sorted(p.name for p in tmp_path.iterdir()) == ["Cookies"]


def test_invalid_database_raises(tmp_path):
    db = tmp_path / "Cookies"
    db.write_bytes(b"this is not sqlite" * 100)

    with pytest.raises(StoreNotFound, match="Cannot read cookie database"):
        query_cookies([db], ["token_v2"])


def test_database_without_cookies_table_raises(tmp_path):
    db = tmp_path / "Cookies"
    conn = sqlite3.connect(db)
    conn.execute("CREATE TABLE meta (key TEXT, value TEXT)")
    conn.commit()
    conn.close()

    with pytest.raises(StoreNotFound):
        query_cookies([db], ["token_v2"])
