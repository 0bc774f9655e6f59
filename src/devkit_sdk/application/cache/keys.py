"""Application cache – CacheKey builder."""
from __future__ import annotations

__all__ = ["CacheKey"]


def _part(value: str) -> str:
    # escape the separator so distinct identifier tuples never share a key
    return value.replace("%", "%25").replace(":", "%3A")


class CacheKey:
    """Factory for namespaced cache key strings.

    The namespace prefix identifies the shape of the cached value:
    ``config`` and ``secret`` hold strings, ``config_map`` and ``secret_map``
    hold string maps, ``flag`` holds a feature-flag evaluation. Use these
    helpers to build the key passed to ``DevKitClient.invalidate_cache``.
    """

    CONFIG = "config"
    CONFIG_MAP = "config_map"
    SECRET = "secret"
    SECRET_MAP = "secret_map"
    FLAG = "flag"

    @staticmethod
    def _join(namespace: str, *parts: str) -> str:
        return ":".join([namespace, *(_part(p) for p in parts)])

    @staticmethod
    def config(environment_id: str, key: str) -> str:
        return CacheKey._join(CacheKey.CONFIG, environment_id, key)

    @staticmethod
    def config_map(environment_id: str) -> str:
        return CacheKey._join(CacheKey.CONFIG_MAP, environment_id)

    @staticmethod
    def secret(application_id: str, environment_id: str, key: str) -> str:
        return CacheKey._join(CacheKey.SECRET, application_id, environment_id, key)

    @staticmethod
    def secret_map(application_id: str, environment_id: str) -> str:
        return CacheKey._join(CacheKey.SECRET_MAP, application_id, environment_id)

    @staticmethod
    def flag(flag_key: str, user_id: str) -> str:
        # targeting attributes are not part of the key
        return CacheKey._join(CacheKey.FLAG, flag_key, user_id)
