"""Security encryption – AES-256-GCM CipherBox."""
from devkit_sdk.security.encryption.cipher_box import (
    IV_LENGTH,
    KEY_LENGTH,
    TAG_LENGTH,
    CipherBox,
    decrypt_if_needed,
)

__all__ = ["CipherBox", "decrypt_if_needed", "IV_LENGTH", "KEY_LENGTH", "TAG_LENGTH"]
