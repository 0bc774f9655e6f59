"""AES-256-GCM cipher for client-side decryption of configuration values and secrets.

Wire format (Base64 end-to-end)::

    IV (12 bytes) || ciphertext (N bytes) || auth tag (16 bytes)

No associated data is bound into the tag.
"""
from __future__ import annotations

import base64
import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from devkit_sdk.config.validation import ConfigError
from devkit_sdk.kernel.errors import DecryptionError

__all__ = [
    "CipherBox",
    "decrypt_if_needed",
    "IV_LENGTH",
    "KEY_LENGTH",
    "TAG_LENGTH",
]

IV_LENGTH = 12
TAG_LENGTH = 16
KEY_LENGTH = 32

_KEY_HINT = "Verify DEVKIT_ENCRYPTION_KEY matches the application's encryption key."


def _b64decode(value: str) -> bytes:
    # strict: rejects non-alphabet characters and bad padding
    return base64.b64decode(value, validate=True)


class CipherBox:
    """Holds one application key and performs authenticated encryption with it.

    The key is accepted Base64-encoded, exactly as it is distributed in
    ``DEVKIT_ENCRYPTION_KEY``. It is never exposed again: ``repr`` shows only
    the key fingerprint.
    """

    def __init__(self, encoded_key: str) -> None:
        if not encoded_key or not encoded_key.strip():
            raise ConfigError("Application encryption key cannot be empty")
        try:
            key = _b64decode(encoded_key.strip())
        except ValueError:
            raise ConfigError("Application encryption key is not valid Base64") from None
        if len(key) != KEY_LENGTH:
            raise ConfigError(
                f"Application key must be a 256-bit (32 byte) key. Got: {len(key)} bytes"
            )
        self._key = key
        self._aesgcm = AESGCM(key)

    def __repr__(self) -> str:
        return f"CipherBox(fingerprint={self.key_fingerprint()!r})"

    @staticmethod
    def generate_key() -> str:
        """Return a fresh random 256-bit key, Base64-encoded."""
        return base64.b64encode(os.urandom(KEY_LENGTH)).decode("ascii")

    @staticmethod
    def looks_encrypted(value: str | None) -> bool:
        """Best-effort check that *value* is an encrypted payload.

        True when the value is non-empty, strict Base64, and decodes to at
        least IV + tag bytes. Plaintext that happens to satisfy all three is
        misclassified; callers accept that risk.
        """
        if not value:
            return False
        try:
            decoded = _b64decode(value)
        except ValueError:
            return False
        return len(decoded) >= IV_LENGTH + TAG_LENGTH

    def key_fingerprint(self) -> str:
        """SHA-256 of the raw key bytes, Base64-encoded."""
        return base64.b64encode(hashlib.sha256(self._key).digest()).decode("ascii")

    def encrypt(self, plaintext: str) -> str:
        # the IV is always generated here, never supplied by the caller
        iv = os.urandom(IV_LENGTH)
        sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        return base64.b64encode(iv + sealed).decode("ascii")

    def decrypt(self, encoded: str) -> str:
        """Decrypt a Base64 payload, raising :class:`DecryptionError` on any failure."""
        encoded_length = len(encoded) if encoded is not None else 0
        if not encoded:
            raise DecryptionError(
                "Encrypted data cannot be empty", encoded_length=encoded_length
            )
        try:
            payload = _b64decode(encoded)
        except ValueError:
            raise DecryptionError(
                f"Encrypted data is not valid Base64 (encoded length {encoded_length})",
                encoded_length=encoded_length,
            ) from None

        if len(payload) < IV_LENGTH + TAG_LENGTH:
            raise DecryptionError(
                f"Encrypted payload too short: {len(payload)} bytes, expected at least "
                f"{IV_LENGTH + TAG_LENGTH} (IV + tag) (encoded length {encoded_length})",
                encoded_length=encoded_length,
                payload_length=len(payload),
            )

        iv, sealed = payload[:IV_LENGTH], payload[IV_LENGTH:]
        try:
            plaintext = self._aesgcm.decrypt(iv, sealed, None)
        except InvalidTag:
            raise DecryptionError(
                "Decryption failed: authentication tag mismatch "
                f"(encoded length {encoded_length}, payload {len(payload)} bytes). "
                f"This typically means the wrong encryption key was used. {_KEY_HINT}",
                encoded_length=encoded_length,
                payload_length=len(payload),
            ) from None

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError:
            # suppress the chain: UnicodeDecodeError carries the plaintext bytes
            raise DecryptionError(
                f"Decrypted payload is not valid UTF-8 (payload {len(payload)} bytes)",
                encoded_length=encoded_length,
                payload_length=len(payload),
            ) from None


def decrypt_if_needed(cipher: CipherBox | None, value: str) -> str:
    """Decrypt *value* only when a key is held and the value looks encrypted.

    Values that fail the heuristic are returned untouched without calling
    :meth:`CipherBox.decrypt`, so a :class:`DecryptionError` from here always
    concerns a value that really has the encrypted shape.
    """
    if cipher is None or not cipher.looks_encrypted(value):
        return value
    return cipher.decrypt(value)
