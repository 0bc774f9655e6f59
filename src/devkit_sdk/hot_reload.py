"""HotReloadConfigClient – keeps one environment's configuration map warm by polling."""
from __future__ import annotations

import asyncio
import inspect
import types
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Awaitable, Callable, Union
from urllib.parse import quote

from devkit_sdk.adapters.http import Transport
from devkit_sdk.application.cache import CacheKey, TtlCache
from devkit_sdk.application.conversion import require_string_map
from devkit_sdk.config.settings.options import DEFAULT_CACHE_EXPIRE_AFTER_MS
from devkit_sdk.kernel.errors import DevKitError, RemoteError
from devkit_sdk.kernel.time import Clock
from devkit_sdk.observability.logging import get_logger
from devkit_sdk.security.encryption import CipherBox, decrypt_if_needed

logger = get_logger(__name__)

UpdateListener = Callable[[dict[str, str]], Union[None, Awaitable[None]]]

POLL_PATH = "/api/v1/configurations/environment/{environment_id}/poll?lastUpdate={last_update}&timeout={timeout}"
MAP_PATH = "/api/v1/configurations/environment/{environment_id}/map"
LONG_POLL_TIMEOUT_SECONDS = 30

_EPOCH = datetime.fromtimestamp(0, UTC)


class HotReloadConfigClient:
    """Poll the service for configuration changes and notify a listener.

    Reads (:meth:`get_config`, :meth:`get_all_configs`) only consult the local
    cache. Failures inside the background polling loop are logged and the
    loop keeps going; failures from :meth:`start` and :meth:`refresh`
    propagate.
    """

    def __init__(
        self,
        transport: Transport,
        environment_id: str,
        polling_interval_ms: int = 5000,
        cache_expire_after_ms: int = DEFAULT_CACHE_EXPIRE_AFTER_MS,
        cipher: CipherBox | None = None,
        clock: Clock | None = None,
    ) -> None:
        if polling_interval_ms <= 0:
            raise ValueError("polling_interval_ms must be positive")
        self._transport = transport
        self._environment_id = environment_id
        self._polling_interval_ms = polling_interval_ms
        self._cipher = cipher
        self._cache: TtlCache[str | Mapping[str, str]] = TtlCache(cache_expire_after_ms, clock)
        self._listener: UpdateListener | None = None
        self._task: asyncio.Task[None] | None = None
        self._starting = False
        self._last_update = _EPOCH

    @property
    def environment_id(self) -> str:
        return self._environment_id

    @property
    def last_update(self) -> datetime:
        return self._last_update

    @property
    def is_running(self) -> bool:
        return self._starting or (self._task is not None and not self._task.done())

    async def start(self, on_update: UpdateListener | None = None) -> None:
        """Load the current map, notify *on_update*, then poll in the background."""
        if self.is_running:
            return
        # claim the client before the first await so overlapping calls return early
        self._starting = True
        self._listener = on_update
        try:
            await self.refresh()
        except BaseException:
            self._starting = False
            raise
        if not self._starting:
            # stop() ran while the initial fetch was in flight
            return
        self._starting = False
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "hot_reload.started",
            environment_id=self._environment_id,
            polling_interval_ms=self._polling_interval_ms,
        )

    async def stop(self) -> None:
        self._starting = False
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("hot_reload.stopped", environment_id=self._environment_id)

    def get_config(self, key: str) -> str | None:
        value = self._cache.get(CacheKey.config(self._environment_id, key))
        return value if isinstance(value, str) else None

    def get_all_configs(self) -> dict[str, str] | None:
        value = self._cache.get(CacheKey.config_map(self._environment_id))
        return dict(value) if isinstance(value, Mapping) else None

    async def refresh(self) -> dict[str, str]:
        """Fetch the full map from the service, bypassing the poll endpoint."""
        payload = await self._transport.get(
            MAP_PATH.format(environment_id=quote(self._environment_id, safe=""))
        )
        configs = self._apply(require_string_map(payload, "configuration map"))
        await self._notify(configs)
        return configs

    async def poll_once(self) -> bool:
        """Run one long-poll round; return ``True`` when updates were applied."""
        last_update_ms = int(self._last_update.timestamp() * 1000)
        payload = await self._transport.get(
            POLL_PATH.format(
                environment_id=quote(self._environment_id, safe=""),
                last_update=last_update_ms,
                timeout=LONG_POLL_TIMEOUT_SECONDS,
            )
        )
        if not isinstance(payload, dict):
            raise RemoteError("Unexpected poll response: expected an object")
        if not payload.get("hasUpdates"):
            return False

        configs = self._apply(require_string_map(payload.get("configurations"), "poll"))
        server_update = payload.get("lastUpdate")
        if isinstance(server_update, (int, float)):
            self._last_update = datetime.fromtimestamp(server_update / 1000, UTC)
        logger.info("hot_reload.updated", environment_id=self._environment_id, size=len(configs))
        await self._notify(configs)
        return True

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._polling_interval_ms / 1000)
            try:
                await self.poll_once()
            except DevKitError as exc:
                logger.warning(
                    "hot_reload.poll_failed", environment_id=self._environment_id, **exc.log_fields()
                )
            except Exception:  # noqa: BLE001 - keep polling after a failed round
                logger.exception("hot_reload.poll_failed", environment_id=self._environment_id)

    def _apply(self, raw: dict[str, str]) -> dict[str, str]:
        configs = {name: decrypt_if_needed(self._cipher, value) for name, value in raw.items()}
        self._cache.set(
            CacheKey.config_map(self._environment_id), types.MappingProxyType(dict(configs))
        )
        for name, value in configs.items():
            self._cache.set(CacheKey.config(self._environment_id, name), value)
        return configs

    async def _notify(self, configs: dict[str, str]) -> None:
        if self._listener is None:
            return
        result = self._listener(dict(configs))
        if inspect.isawaitable(result):
            await result


__all__ = ["HotReloadConfigClient", "UpdateListener"]
