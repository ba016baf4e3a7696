"""
Symmetric encryption for provider configuration at rest.

Payloads are AES-256-GCM with a fresh 96-bit nonce per message; the nonce,
tag and ciphertext are stored base64 encoded in separate columns together
with the algorithm name and the encoding of the root key that produced them.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import json
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from dynamic_secrets.core.config import settings
from dynamic_secrets.core.exceptions import DecryptionError

ALGORITHM_AES_256_GCM = "aes-256-gcm"
KEY_ENCODING_BASE64 = "base64"
KEY_ENCODING_UTF8 = "utf8"

_NONCE_BYTES = 12
_TAG_BYTES = 16
_KEY_BYTES = 32


@dataclass(frozen=True, slots=True)
class EncryptedPayload:
    ciphertext: str
    iv: str
    tag: str
    algorithm: str = ALGORITHM_AES_256_GCM
    encoding: str = KEY_ENCODING_BASE64


def _b64encode(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value.encode("ascii"), validate=True)
    except (binascii.Error, ValueError, UnicodeEncodeError) as exc:
        raise DecryptionError(f"Malformed {field} in encrypted payload") from exc


def derive_key(root_key: str) -> tuple[bytes, str]:
    """Return ``(key, encoding)`` for a configured root key.

    A base64 string that decodes to exactly 32 bytes is used as is; anything
    else is treated as a UTF-8 passphrase and stretched with SHA-256.
    """
    root_key = (root_key or "").strip()
    if not root_key:
        raise RuntimeError("ENCRYPTION_KEY not configured")
    try:
        decoded = base64.b64decode(root_key, validate=True)
    except (binascii.Error, ValueError):
        decoded = b""
    if len(decoded) == _KEY_BYTES:
        return decoded, KEY_ENCODING_BASE64
    return hashlib.sha256(root_key.encode("utf-8")).digest(), KEY_ENCODING_UTF8


class SymmetricCodec:
    """Encrypt/decrypt opaque byte blobs with a single root key."""

    algorithm = ALGORITHM_AES_256_GCM

    def __init__(self, root_key: str) -> None:
        key, encoding = derive_key(root_key)
        self._aead = AESGCM(key)
        self.encoding = encoding

    def encrypt(self, plaintext: bytes) -> EncryptedPayload:
        nonce = os.urandom(_NONCE_BYTES)
        sealed = self._aead.encrypt(nonce, plaintext, None)
        ciphertext, tag = sealed[:-_TAG_BYTES], sealed[-_TAG_BYTES:]
        return EncryptedPayload(
            ciphertext=_b64encode(ciphertext),
            iv=_b64encode(nonce),
            tag=_b64encode(tag),
            algorithm=self.algorithm,
            encoding=self.encoding,
        )

    def decrypt(self, payload: EncryptedPayload) -> bytes:
        if payload.algorithm != self.algorithm:
            raise DecryptionError(f"Unsupported algorithm: {payload.algorithm}")
        if payload.encoding != self.encoding:
            raise DecryptionError(
                f"Key encoding mismatch: payload={payload.encoding} key={self.encoding}"
            )

        nonce = _b64decode(payload.iv, "iv")
        tag = _b64decode(payload.tag, "tag")
        ciphertext = _b64decode(payload.ciphertext, "ciphertext")
        if len(nonce) != _NONCE_BYTES or len(tag) != _TAG_BYTES:
            raise DecryptionError("Inconsistent iv/tag length in encrypted payload")

        try:
            return self._aead.decrypt(nonce, ciphertext + tag, None)
        except InvalidTag as exc:
            raise DecryptionError("Authentication tag verification failed") from exc

    def encrypt_json(self, data: Any) -> EncryptedPayload:
        return self.encrypt(canonical_json(data))

    def decrypt_json(self, payload: EncryptedPayload) -> Any:
        raw = self.decrypt(payload)
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecryptionError("Decrypted payload is not valid JSON") from exc


def canonical_json(data: Any) -> bytes:
    return json.dumps(data, sort_keys=True, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


@lru_cache(maxsize=1)
def get_codec() -> SymmetricCodec:
    return SymmetricCodec(settings.ENCRYPTION_KEY)


__all__ = [
    "ALGORITHM_AES_256_GCM",
    "EncryptedPayload",
    "KEY_ENCODING_BASE64",
    "KEY_ENCODING_UTF8",
    "SymmetricCodec",
    "canonical_json",
    "derive_key",
    "get_codec",
]
