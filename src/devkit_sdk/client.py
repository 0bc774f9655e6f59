"""DevKitClient – cached, decrypting access to configurations, secrets and feature flags.

Every read follows the same path::

    cache hit  -> return
    cache miss -> fetch -> decrypt (conditional for configs, unconditional for secrets)
               -> store decrypted value -> convert -> return

Usage::

    async with DevKitClient(api_key="dk_live_...", encryption_key=key) as client:
        port = await client.get_config("prod", "server.port", int)
        db_password = await client.get_secret("billing", "prod", "DB_PASSWORD")
"""
from __future__ import annotations

import types
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar, Union
from urllib.parse import quote

from devkit_sdk.adapters.http import HttpxTransport, Transport
from devkit_sdk.application.cache import CacheKey, TtlCache
from devkit_sdk.application.conversion import convert_value, require_string, require_string_map
from devkit_sdk.application.feature_flags import FeatureFlagEvaluation
from devkit_sdk.config.settings import ENCRYPTION_KEY_ENV, ClientOptions, resolve_encryption_key
from devkit_sdk.config.validation import MissingRequiredSettingError
from devkit_sdk.kernel.errors import (
    DecryptionError,
    SecretMapDecryptionError,
    SecretNotFoundError,
)
from devkit_sdk.kernel.time import Clock, SystemClock
from devkit_sdk.observability.logging import get_logger
from devkit_sdk.security.encryption import CipherBox, decrypt_if_needed

if TYPE_CHECKING:
    from devkit_sdk.hot_reload import HotReloadConfigClient

logger = get_logger(__name__)

CachedValue = Union[str, Mapping[str, str], FeatureFlagEvaluation]

_V = TypeVar("_V")

CONFIG_PATH = "/api/v1/configurations/environment/{environment_id}/key/{key}"
CONFIG_MAP_PATH = "/api/v1/configurations/environment/{environment_id}/map"
SECRET_MAP_PATH = "/api/v1/secrets/application/{application_id}/environment/{environment_id}/map"
FLAG_EVALUATE_PATH = "/api/v1/feature-flags/evaluate"


def _segment(value: str) -> str:
    return quote(value, safe="")


class DevKitClient:
    """Public client for the DevKit configuration service.

    Pass a :class:`ClientOptions` or the same fields as keyword arguments.
    The encryption key is resolved once here (``encryption_key`` option, then
    ``DEVKIT_ENCRYPTION_KEY``) and held for the client's lifetime.

    A client owns a single in-memory cache; all entries share
    ``cache_expire_after_ms``. Concurrent misses on the same key may each
    fetch; the last write wins.
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        transport: Transport | None = None,
        clock: Clock | None = None,
        environ: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        if options is None:
            if not kwargs.get("api_key"):
                raise MissingRequiredSettingError(
                    "api_key", "Pass api_key=..., or use ClientOptions.from_env() to read DEVKIT_API_KEY"
                )
            options = ClientOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a ClientOptions instance or keyword options, not both")

        self._options = options
        self._clock: Clock = clock or SystemClock()
        # validate the key before opening any connection
        encryption_key = resolve_encryption_key(options.encryption_key, environ)
        self._cipher: CipherBox | None = CipherBox(encryption_key) if encryption_key else None
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            options.api_key, options.base_url, options.timeout_ms
        )
        self._cache: TtlCache[CachedValue] | None = (
            TtlCache(options.cache_expire_after_ms, self._clock) if options.enable_cache else None
        )

        logger.info(
            "client.created",
            base_url=options.base_url,
            cache_enabled=self._cache is not None,
            crypto_enabled=self._cipher is not None,
        )

    def __repr__(self) -> str:
        return (
            f"DevKitClient(base_url={self._options.base_url!r}, "
            f"cache_enabled={self._cache is not None}, crypto_enabled={self._cipher is not None})"
        )

    async def __aenter__(self) -> "DevKitClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_transport:
            await self._transport.aclose()

    @property
    def options(self) -> ClientOptions:
        return self._options

    # ------------------------------------------------------------------
    # Feature flags
    # ------------------------------------------------------------------

    async def is_feature_enabled(self, flag_key: str, user_id: str) -> bool:
        return await self.is_feature_enabled_with_attributes(flag_key, user_id, {})

    async def is_feature_enabled_with_attributes(
        self, flag_key: str, user_id: str, attributes: Mapping[str, Any]
    ) -> bool:
        evaluation = await self.evaluate_feature_flag(flag_key, user_id, attributes)
        return evaluation.enabled

    async def evaluate_feature_flag(
        self,
        flag_key: str,
        user_id: str,
        attributes: Mapping[str, Any] | None = None,
    ) -> FeatureFlagEvaluation:
        """Evaluate *flag_key* for *user_id*.

        The cached evaluation is keyed by flag and user only, so a second call
        with different *attributes* inside the TTL returns the first result.
        """
        cache_key = CacheKey.flag(flag_key, user_id)
        cached = self._cached(cache_key, FeatureFlagEvaluation)
        if cached is not None:
            return cached

        payload = await self._transport.post(
            FLAG_EVALUATE_PATH,
            {"flagKey": flag_key, "userId": user_id, "attributes": dict(attributes or {})},
        )
        evaluation = FeatureFlagEvaluation.from_dict(payload)
        logger.debug("flag.evaluated", flag_key=flag_key, enabled=evaluation.enabled)
        self._store(cache_key, evaluation)
        return evaluation

    # ------------------------------------------------------------------
    # Configurations
    # ------------------------------------------------------------------

    async def get_config(self, environment_id: str, key: str, as_type: type | None = None) -> Any:
        """Return a configuration value, decrypted when it looks encrypted.

        *as_type* is one of ``str`` (default), ``int``, ``float``, ``bool``,
        ``dict`` or ``list``. The cache holds the decrypted string, so the
        conversion runs on every call.
        """
        cache_key = CacheKey.config(environment_id, key)
        value = self._cached(cache_key, str)
        if value is None:
            payload = await self._transport.get(
                CONFIG_PATH.format(environment_id=_segment(environment_id), key=_segment(key))
            )
            value = self._decrypt_if_needed(require_string(payload, "value", "configuration"))
            logger.debug("config.fetched", environment_id=environment_id, key=key)
            self._store(cache_key, value)
        return convert_value(value, as_type)

    async def get_config_map(self, environment_id: str) -> dict[str, str]:
        cache_key = CacheKey.config_map(environment_id)
        cached = self._cached(cache_key, Mapping)
        if cached is not None:
            return dict(cached)

        payload = await self._transport.get(
            CONFIG_MAP_PATH.format(environment_id=_segment(environment_id))
        )
        config_map = require_string_map(payload, "configuration map")
        resolved = {name: self._decrypt_if_needed(raw) for name, raw in config_map.items()}
        logger.debug("config.map_fetched", environment_id=environment_id, size=len(resolved))
        self._store(cache_key, types.MappingProxyType(dict(resolved)))
        return resolved

    # ------------------------------------------------------------------
    # Secrets
    # ------------------------------------------------------------------

    async def get_secret(self, application_id: str, environment_id: str, key: str) -> str:
        cipher = self._require_cipher()
        cache_key = CacheKey.secret(application_id, environment_id, key)
        cached = self._cached(cache_key, str)
        if cached is not None:
            return cached

        secret_map = await self._fetch_secret_map(application_id, environment_id)
        if key not in secret_map:
            raise SecretNotFoundError(key)
        value = cipher.decrypt(secret_map[key])
        logger.debug("secret.fetched", application_id=application_id, environment_id=environment_id, key=key)
        self._store(cache_key, value)
        return value

    async def get_secret_map(self, application_id: str, environment_id: str) -> dict[str, str]:
        """Fetch and decrypt every secret of an application environment.

        Every entry is attempted; if any fail, a single
        :class:`SecretMapDecryptionError` lists all the failed keys.
        """
        cipher = self._require_cipher()
        cache_key = CacheKey.secret_map(application_id, environment_id)
        cached = self._cached(cache_key, Mapping)
        if cached is not None:
            return dict(cached)

        secret_map = await self._fetch_secret_map(application_id, environment_id)
        decrypted: dict[str, str] = {}
        failed_keys: list[str] = []
        for name, encoded in secret_map.items():
            try:
                decrypted[name] = cipher.decrypt(encoded)
            except DecryptionError:
                failed_keys.append(name)

        if failed_keys:
            logger.warning(
                "secret_map.decrypt_failed",
                application_id=application_id,
                environment_id=environment_id,
                failed_keys=sorted(failed_keys),
                total=len(secret_map),
            )
            raise SecretMapDecryptionError(failed_keys)

        logger.debug(
            "secret_map.fetched",
            application_id=application_id,
            environment_id=environment_id,
            size=len(decrypted),
        )
        self._store(cache_key, types.MappingProxyType(dict(decrypted)))
        return decrypted

    async def _fetch_secret_map(self, application_id: str, environment_id: str) -> dict[str, str]:
        payload = await self._transport.get(
            SECRET_MAP_PATH.format(
                application_id=_segment(application_id), environment_id=_segment(environment_id)
            )
        )
        return require_string_map(payload, "secret map")

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def invalidate_cache(self, key: str) -> None:
        """Drop one entry; build *key* with :class:`~devkit_sdk.application.cache.CacheKey`."""
        if self._cache is not None:
            self._cache.invalidate(key)

    def clear_cache(self) -> None:
        if self._cache is not None:
            self._cache.invalidate_all()

    def get_cache_size(self) -> int:
        if self._cache is None:
            return 0
        return self._cache.size

    # ------------------------------------------------------------------
    # Encryption
    # ------------------------------------------------------------------

    def is_crypto_enabled(self) -> bool:
        return self._cipher is not None

    def get_encryption_key_hash(self) -> str | None:
        """Base64 SHA-256 of the configured key, or ``None`` without a key."""
        if self._cipher is None:
            return None
        return self._cipher.key_fingerprint()

    # ------------------------------------------------------------------
    # Hot reload
    # ------------------------------------------------------------------

    def hot_reload(self, environment_id: str, polling_interval_ms: int = 5000) -> "HotReloadConfigClient":
        """Create a polling client for *environment_id* sharing this client's transport and key."""
        from devkit_sdk.hot_reload import HotReloadConfigClient

        return HotReloadConfigClient(
            self._transport,
            environment_id,
            polling_interval_ms=polling_interval_ms,
            cache_expire_after_ms=self._options.cache_expire_after_ms,
            cipher=self._cipher,
            clock=self._clock,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _cached(self, cache_key: str, expected: type[_V]) -> _V | None:
        if self._cache is None:
            return None
        value = self._cache.get(cache_key)
        if isinstance(value, expected):
            logger.debug("cache.hit", cache_key=cache_key)
            return value
        logger.debug("cache.miss", cache_key=cache_key)
        return None

    def _store(self, cache_key: str, value: CachedValue) -> None:
        if self._cache is not None:
            self._cache.set(cache_key, value)

    def _decrypt_if_needed(self, value: str) -> str:
        return decrypt_if_needed(self._cipher, value)

    def _require_cipher(self) -> CipherBox:
        if self._cipher is None:
            raise MissingRequiredSettingError(
                "encryption_key",
                "Secrets require an encryption key to be configured. "
                f"Set the {ENCRYPTION_KEY_ENV} environment variable "
                "or pass encryption_key=... to DevKitClient.",
            )
        return self._cipher


__all__ = ["CachedValue", "DevKitClient"]
