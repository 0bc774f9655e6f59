"""Security – client-side encryption primitives."""
from devkit_sdk.security.encryption import CipherBox

__all__ = ["CipherBox"]
