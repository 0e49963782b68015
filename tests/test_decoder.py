"""
Tests for cookie value decoding.
"""
import hashlib

from Crypto.Cipher import AES

from conftest import TEST_KEY, encrypt_v10
from notion_token.core.models import CookieRow
from notion_token.crypto.decoder import decode, decrypt_value, requires_key


def test_plaintext_value_is_preferred():
    row = CookieRow(name="token_v2", value="plain", encrypted_value=encrypt_v10("other"))
    assert decode(row, TEST_KEY) == "plain"
    assert not requires_key(row)


def test_decrypts_v10_value():
    plaintext = "v02%3Atoken-value"
    row = CookieRow(name="token_v2", encrypted_value=encrypt_v10(plaintext))

    assert requires_key(row)
    assert decode(row, TEST_KEY) == plaintext


def test_decrypts_multi_block_unicode_value():
    plaintext = "ünïcødé-" * 10
    assert decrypt_value(encrypt_v10(plaintext), TEST_KEY) == plaintext


def test_strips_host_digest_prefix():
    host = ".notion.so"
    digest = hashlib.sha256(host.encode()).digest()
    row = CookieRow(
        name="token_v2",
        encrypted_value=encrypt_v10(digest + b"v02%3Adigest-token"),
        host_key=host,
    )

    assert decode(row, TEST_KEY) == "v02%3Adigest-token"


def test_unknown_marker_returns_none():
    assert decrypt_value(b"v11" + encrypt_v10("x")[3:], TEST_KEY) is None
    assert decrypt_value(b"v20abcdef", TEST_KEY) is None


def test_empty_ciphertext_returns_none():
    assert decrypt_value(b"v10", TEST_KEY) is None


def test_wrong_key_returns_none():
    assert decrypt_value(encrypt_v10("secret"), b"fedcba0987654321") is None


def test_missing_key_returns_none():
    assert decrypt_value(encrypt_v10("secret"), None) is None


def test_truncated_ciphertext_returns_none():
    assert decrypt_value(encrypt_v10("secret")[:-3], TEST_KEY) is None


def test_invalid_utf8_returns_none():
    assert decrypt_value(encrypt_v10(b"\xff\xfe\xfd"), TEST_KEY) is None


def test_empty_row_returns_none():
    assert decode(CookieRow(name="token_v2"), TEST_KEY) is None
    assert decode(None, TEST_KEY) is None


def test_plaintext_token_in_encrypted_column():
    row = CookieRow(name="token_v2", encrypted_value=b"v02%3Araw-token")

    assert not requires_key(row)
    assert decode(row, None) == "v02%3Araw-token"


def test_decrypts_gcm_with_windows_key():
    key = b"w" * 32
    nonce = b"n" * 12
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    ciphertext, tag = cipher.encrypt_and_digest(b"v02%3Awindows-token")

    assert decrypt_value(b"v10" + nonce + ciphertext + tag, key) == "v02%3Awindows-token"


def test_gcm_tag_mismatch_returns_none():
    key = b"w" * 32
    nonce = b"n" * 12
    cipher = AES.new(key, AES.MODE_GCM, nonce=nonce)
    ciphertext, tag = cipher.encrypt_and_digest(b"token")

    assert decrypt_value(b"v10" + nonce + ciphertext + bytes(16), key) is None
