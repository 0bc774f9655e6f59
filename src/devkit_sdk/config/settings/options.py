"""Config settings – ClientOptions and encryption key resolution."""
from __future__ import annotations

import dataclasses
import os
from typing import Any, Mapping

from devkit_sdk.config.settings.base import Settings
from devkit_sdk.config.validation import (
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

ENCRYPTION_KEY_ENV = "DEVKIT_ENCRYPTION_KEY"
DEFAULT_BASE_URL = "http://localhost:8080"
DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_CACHE_EXPIRE_AFTER_MS = 60_000


@dataclasses.dataclass
class ClientOptions(Settings):
    """Construction options for :class:`~devkit_sdk.client.DevKitClient`.

    Durations are in milliseconds. ``encryption_key`` is a Base64-encoded
    256-bit key; when omitted the client falls back to the
    ``DEVKIT_ENCRYPTION_KEY`` environment variable.
    """

    _prefix = "DEVKIT"

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    enable_cache: bool = True
    cache_expire_after_ms: int = DEFAULT_CACHE_EXPIRE_AFTER_MS
    encryption_key: str | None = dataclasses.field(default=None, repr=False)

    def _validate(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise MissingRequiredSettingError(
                "api_key", "Pass api_key=..., or use ClientOptions.from_env() to read DEVKIT_API_KEY"
            )
        if self.timeout_ms <= 0:
            raise InvalidSettingValueError("timeout_ms", self.timeout_ms, "must be positive")
        if self.cache_expire_after_ms <= 0:
            raise InvalidSettingValueError(
                "cache_expire_after_ms", self.cache_expire_after_ms, "must be positive"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: Any) -> "ClientOptions":
        """Build options from ``DEVKIT_*`` environment variables; *overrides* win."""
        from devkit_sdk.config.settings.loaders import EnvSettingsLoader

        return EnvSettingsLoader(environ).load(cls, **overrides)


def resolve_encryption_key(
    option: str | None,
    environ: Mapping[str, str] | None = None,
) -> str | None:
    """Pick the encryption key: explicit option first, then ``DEVKIT_ENCRYPTION_KEY``.

    Blank values count as absent.
    """
    if option and option.strip():
        return option
    environ = os.environ if environ is None else environ
    from_env = environ.get(ENCRYPTION_KEY_ENV)
    if from_env and from_env.strip():
        return from_env
    return None


__all__ = [
    "ClientOptions",
    "DEFAULT_BASE_URL",
    "DEFAULT_CACHE_EXPIRE_AFTER_MS",
    "DEFAULT_TIMEOUT_MS",
    "ENCRYPTION_KEY_ENV",
    "resolve_encryption_key",
]
