"""Application conversion – typed configuration values and response shape checks."""
from devkit_sdk.application.conversion.converter import SUPPORTED_TYPES, convert_value
from devkit_sdk.application.conversion.payloads import require_string, require_string_map

__all__ = ["SUPPORTED_TYPES", "convert_value", "require_string", "require_string_map"]
