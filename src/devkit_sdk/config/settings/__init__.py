"""Config settings – env-backed client options."""
from devkit_sdk.config.settings.base import Settings
from devkit_sdk.config.settings.loaders import EnvSettingsLoader, SettingsLoader
from devkit_sdk.config.settings.options import (
    ENCRYPTION_KEY_ENV,
    ClientOptions,
    resolve_encryption_key,
)

__all__ = [
    "ClientOptions",
    "ENCRYPTION_KEY_ENV",
    "EnvSettingsLoader",
    "Settings",
    "SettingsLoader",
    "resolve_encryption_key",
]
