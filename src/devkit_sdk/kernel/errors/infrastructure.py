"""Infrastructure errors – transport failures and cryptographic rejections."""

from __future__ import annotations

from typing import Any, Sequence

from devkit_sdk.kernel.errors.base import DevKitError


class TimeoutError(DevKitError):  # noqa: A001
    """The request deadline elapsed before the service answered."""

    default_code = "timeout"

    def __init__(self, message: str, *, timeout_ms: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.timeout_ms = timeout_ms


class RemoteError(DevKitError):
    """Non-success HTTP status, network failure or unparsable response body."""

    default_code = "remote_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.status_code = status_code
        if status_code is not None:
            self.detail.setdefault("status_code", status_code)


class DecryptionError(DevKitError):
    """An encrypted payload was malformed or failed tag verification.

    Only the shape of the input (encoded length, decoded length) is ever
    reported; key material and plaintext never appear in the message.
    """

    default_code = "decryption_failed"

    def __init__(
        self,
        message: str,
        *,
        encoded_length: int | None = None,
        payload_length: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.encoded_length = encoded_length
        self.payload_length = payload_length
        if encoded_length is not None:
            self.detail.setdefault("encoded_length", encoded_length)
        if payload_length is not None:
            self.detail.setdefault("payload_length", payload_length)


class SecretMapDecryptionError(DecryptionError):
    """One or more entries of a secret map could not be decrypted."""

    default_code = "secret_map_decryption_failed"

    def __init__(self, failed_keys: Sequence[str], **kwargs: Any) -> None:
        keys = sorted(failed_keys)
        super().__init__(
            f"Failed to decrypt {len(keys)} secret(s): {', '.join(keys)}. "
            "Verify your DEVKIT_ENCRYPTION_KEY is correct.",
            **kwargs,
        )
        self.failed_keys: list[str] = keys
        self.detail["failed_keys"] = keys


__all__ = [
    "DecryptionError",
    "RemoteError",
    "SecretMapDecryptionError",
    "TimeoutError",
]
