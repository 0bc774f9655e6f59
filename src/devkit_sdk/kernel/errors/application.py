"""Client-level errors – raised by the SDK itself, not by the wire."""

from __future__ import annotations

from typing import Any

from devkit_sdk.kernel.errors.base import DevKitError


class AuthenticationError(DevKitError):
    """The service rejected the API key (HTTP 401)."""

    default_code = "authentication_failed"

    def __init__(self, message: str = "Invalid API key", **kwargs: Any) -> None:
        super().__init__(message, **kwargs)


class SecretNotFoundError(DevKitError):
    """The secret map was fetched but does not contain the requested key."""

    default_code = "secret_not_found"

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(f"Secret not found: {key}", **kwargs)
        self.key = key


class ConversionError(DevKitError):
    """A resolved configuration value cannot be converted to the requested type.

    The raw value is included in the message; only configuration values are
    converted, never secrets.
    """

    default_code = "conversion_error"

    def __init__(self, raw_value: str, target: str, reason: str | None = None, **kwargs: Any) -> None:
        msg = f"Cannot convert {raw_value!r} to {target}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg, detail={"target": target}, **kwargs)
        self.raw_value = raw_value
        self.target = target


__all__ = ["AuthenticationError", "ConversionError", "SecretNotFoundError"]
