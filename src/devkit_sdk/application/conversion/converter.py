"""Application conversion – turn resolved configuration strings into typed values."""
from __future__ import annotations

import json
from typing import Any

from devkit_sdk.kernel.errors import ConversionError

__all__ = ["SUPPORTED_TYPES", "convert_value"]

SUPPORTED_TYPES: tuple[type, ...] = (str, int, float, bool, dict, list)


def convert_value(value: str, as_type: type | None = None) -> Any:
    """Convert *value* to *as_type*.

    ``bool`` is true only for a case-insensitive ``"true"``; ``dict`` and
    ``list`` decode JSON. Raises :class:`ConversionError` naming the raw value
    when the string cannot be parsed as the target.
    """
    if as_type is None or as_type is str:
        return value
    if as_type is bool:
        return value.lower() == "true"
    if as_type is int:
        try:
            return int(value.strip())
        except ValueError:
            raise ConversionError(value, "int", "not an integer") from None
    if as_type is float:
        try:
            return float(value.strip())
        except ValueError:
            raise ConversionError(value, "float", "not a number") from None
    if as_type is dict or as_type is list:
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ConversionError(value, as_type.__name__, f"invalid JSON ({exc.msg})") from None
        if not isinstance(decoded, as_type):
            raise ConversionError(
                value, as_type.__name__, f"JSON document is a {type(decoded).__name__}"
            )
        return decoded
    name = getattr(as_type, "__name__", repr(as_type))
    raise ConversionError(value, name, "unsupported target type")
