"""Encrypted opt-out tokens for one-click unsubscribe links.

Tokens are AES-256-CBC ciphertexts of a small JSON payload, written as
`<iv hex>:<ciphertext hex>` with a fresh 16-byte IV per token. The key is the
`ENCRYPT_KEY` setting: 32 bytes given as 64 hex characters.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from typing import Optional
from urllib.parse import quote

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from gallery_notifications.core.config import settings

from .common import logger

IV_LENGTH = 16
KEY_HEX_LENGTH = 64


class OptOutTokenError(ValueError):
    """Raised when a token cannot be produced or read."""


def _load_key(key_hex: Optional[str]) -> bytes:
    if not key_hex or len(key_hex) != KEY_HEX_LENGTH:
        raise OptOutTokenError("ENCRYPT_KEY must be 64 hex characters (32 bytes)")
    try:
        return bytes.fromhex(key_hex)
    except ValueError as exc:
        raise OptOutTokenError("ENCRYPT_KEY is not valid hex") from exc


def encrypt(plain_text: str, key_hex: Optional[str] = None) -> str:
    key = _load_key(settings.encrypt_key if key_hex is None else key_hex)
    iv = os.urandom(IV_LENGTH)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(plain_text.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    cipher_text = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{cipher_text.hex()}"


def decrypt(token: str, key_hex: Optional[str] = None) -> str:
    key = _load_key(settings.encrypt_key if key_hex is None else key_hex)
    iv_hex, sep, cipher_hex = (token or "").partition(":")
    if not sep or len(iv_hex) != IV_LENGTH * 2 or not cipher_hex:
        raise OptOutTokenError("Malformed token")
    try:
        iv = bytes.fromhex(iv_hex)
        cipher_text = bytes.fromhex(cipher_hex)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(cipher_text) + decryptor.finalize()
        unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
        plain = unpadder.update(padded) + unpadder.finalize()
        return plain.decode("utf-8")
    except ValueError as exc:
        raise OptOutTokenError("Token could not be decrypted") from exc


def read_opt_out_token(token: str, key_hex: Optional[str] = None) -> dict:
    """Decrypt a token and return its payload (`userId`, optional `emailType`)."""
    try:
        payload = json.loads(decrypt(token, key_hex))
    except ValueError as exc:
        raise OptOutTokenError("Token payload is not valid JSON") from exc
    if not isinstance(payload, dict) or not payload.get("userId"):
        raise OptOutTokenError("Token payload is missing userId")
    return payload


class OptOutTokenMinter:
    """Build opt-out URLs for a recipient and email category.

    Minting never raises: any failure is logged and the link is simply omitted.
    """

    def __init__(self, site_url: str, key_hex: Optional[str]):
        self.site_url = site_url.rstrip("/")
        self.key_hex = key_hex

    def mint(self, user_id: str, email_type: str) -> Optional[str]:
        if not self.key_hex:
            return None
        try:
            token = encrypt(
                json.dumps({"userId": str(user_id), "emailType": email_type}),
                self.key_hex,
            )
        except Exception as exc:
            logger.warning(
                "Could not mint opt-out token for %s: %s",
                user_id,
                exc,
                extra={"recipient_id": str(user_id)},
            )
            return None
        return f"{self.site_url}/unsubscribe/{quote(token, safe='')}"


@lru_cache
def get_token_minter() -> OptOutTokenMinter:
    return OptOutTokenMinter(settings.site_url, settings.encrypt_key)


__all__ = [
    "OptOutTokenError",
    "OptOutTokenMinter",
    "encrypt",
    "decrypt",
    "read_opt_out_token",
    "get_token_minter",
]
