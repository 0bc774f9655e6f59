"""Application conversion – shape checks for service responses."""
from __future__ import annotations

from typing import Any

from devkit_sdk.kernel.errors import RemoteError

__all__ = ["require_string", "require_string_map"]


def require_string_map(payload: Any, what: str) -> dict[str, str]:
    """Return *payload* if it is a JSON object of strings, else raise :class:`RemoteError`."""
    if not isinstance(payload, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in payload.items()
    ):
        raise RemoteError(f"Unexpected {what} response: expected an object of strings")
    return payload


def require_string(payload: Any, field: str, what: str) -> str:
    if not isinstance(payload, dict) or not isinstance(payload.get(field), str):
        raise RemoteError(f"Unexpected {what} response: missing string '{field}'")
    return payload[field]
