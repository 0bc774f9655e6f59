"""Root error class for the devkit-sdk error hierarchy."""

from __future__ import annotations

import json
from typing import Any


class DevKitError(Exception):
    """Root of every error the SDK raises.

    ``message`` and ``detail`` are safe to log: subclasses put identifiers,
    lengths and status codes there, never plaintext, ciphertext or keys.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context for logs and ``to_dict``.
        cause: Underlying exception, chained as ``__cause__``.
    """

    default_code: str = "devkit_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def log_fields(self) -> dict[str, Any]:
        """Flat key-value pairs for a structlog event describing this error.

        ``detail`` entries are prefixed with ``error_`` so they cannot shadow
        the event's own fields (``key``, ``environment_id``, ...).
        """
        fields: dict[str, Any] = {"error_code": self.code, "error_message": self.message}
        for name, value in self.detail.items():
            fields[f"error_{name}"] = value
        return fields


__all__ = ["DevKitError"]
