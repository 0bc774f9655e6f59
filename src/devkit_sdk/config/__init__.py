"""Config – client options, env loaders, and configuration errors."""

from devkit_sdk.config.settings import (
    ENCRYPTION_KEY_ENV,
    ClientOptions,
    EnvSettingsLoader,
    Settings,
    SettingsLoader,
    resolve_encryption_key,
)
from devkit_sdk.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ClientOptions",
    "ConfigError",
    "ENCRYPTION_KEY_ENV",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsLoader",
    "resolve_encryption_key",
]
