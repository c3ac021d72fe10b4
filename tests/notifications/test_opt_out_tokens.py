"""Opt-out token encryption and link minting."""

import json
from urllib.parse import unquote

import pytest

from gallery_notifications.modules.notifications import tokens
from gallery_notifications.modules.notifications.tokens import (
    OptOutTokenError,
    OptOutTokenMinter,
    decrypt,
    encrypt,
    read_opt_out_token,
)
from tests.fakes import ENCRYPT_KEY


def test_token_format_is_iv_hex_and_cipher_hex():
    token = encrypt('{"userId": "u1"}', ENCRYPT_KEY)
    iv_hex, _, cipher_hex = token.partition(":")
    assert len(iv_hex) == 32
    assert cipher_hex and len(cipher_hex) % 32 == 0
    assert decrypt(token, ENCRYPT_KEY) == '{"userId": "u1"}'


def test_each_token_uses_a_fresh_iv():
    assert encrypt("same", ENCRYPT_KEY) != encrypt("same", ENCRYPT_KEY)


def test_default_key_comes_from_settings():
    token = encrypt(json.dumps({"userId": "u9"}))
    assert read_opt_out_token(token) == {"userId": "u9"}


@pytest.mark.parametrize("key", ["", "abc", "zz" * 32])
def test_bad_keys_are_rejected(key):
    with pytest.raises(OptOutTokenError):
        encrypt("payload", key)


@pytest.mark.parametrize(
    "token",
    ["", "no-separator", "abcd:1234", "0" * 32 + ":", "0" * 32 + ":zz", "0" * 32 + ":" + "00" * 16],
)
def test_malformed_tokens_are_rejected(token):
    with pytest.raises(OptOutTokenError):
        read_opt_out_token(token, ENCRYPT_KEY)


def test_token_from_another_key_is_rejected():
    token = encrypt(json.dumps({"userId": "u1"}), "f" * 64)
    with pytest.raises(OptOutTokenError):
        read_opt_out_token(token, ENCRYPT_KEY)


def test_payload_without_user_id_is_rejected():
    token = encrypt(json.dumps({"emailType": "notifications"}), ENCRYPT_KEY)
    with pytest.raises(OptOutTokenError):
        read_opt_out_token(token, ENCRYPT_KEY)


def test_minted_link_round_trips_to_payload():
    minter = OptOutTokenMinter("https://photos.example.com/", ENCRYPT_KEY)

    link = minter.mint("user-1", "notifications")

    prefix = "https://photos.example.com/unsubscribe/"
    assert link.startswith(prefix)
    token = unquote(link[len(prefix):])
    assert read_opt_out_token(token, ENCRYPT_KEY) == {
        "userId": "user-1",
        "emailType": "notifications",
    }
    # the ':' separator is percent-encoded in the path segment
    assert ":" not in link[len(prefix):]


def test_minter_without_key_returns_none():
    assert OptOutTokenMinter("https://photos.example.com", "").mint("u", "notifications") is None


def test_minter_swallows_encryption_failures(monkeypatch, caplog):
    def boom(*args, **kwargs):
        raise RuntimeError("cipher backend missing")

    monkeypatch.setattr(tokens, "encrypt", boom)
    minter = OptOutTokenMinter("https://photos.example.com", ENCRYPT_KEY)

    assert minter.mint("u1", "notifications") is None
    assert "Could not mint opt-out token" in caplog.text


def test_minter_with_malformed_key_returns_none():
    assert OptOutTokenMinter("https://photos.example.com", "short").mint("u", "events") is None
