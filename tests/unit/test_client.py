"""Unit tests for DevKitClient – caching, decryption and error surfaces."""
from __future__ import annotations

import asyncio

import pytest

import devkit_sdk.client as devkit_client
from devkit_sdk import (
    CipherBox,
    ClientOptions,
    ConfigError,
    ConversionError,
    DecryptionError,
    DevKitClient,
    FeatureFlagEvaluation,
    RemoteError,
    SecretMapDecryptionError,
    SecretNotFoundError,
)
from devkit_sdk.application.cache import CacheKey
from devkit_sdk.testing import FakeClock, FakeTransport

CONFIG_X = "/api/v1/configurations/environment/env1/key/feature.x"
CONFIG_MAP = "/api/v1/configurations/environment/env1/map"
SECRET_MAP = "/api/v1/secrets/application/app1/environment/prod/map"
EVALUATE = "/api/v1/feature-flags/evaluate"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client(transport: FakeTransport, **kwargs) -> DevKitClient:
    kwargs.setdefault("clock", FakeClock())
    kwargs.setdefault("environ", {})
    return DevKitClient(api_key="k", transport=transport, **kwargs)


def _spy_decrypt(monkeypatch: pytest.MonkeyPatch) -> list[str]:
    calls: list[str] = []
    original = CipherBox.decrypt

    def spy(self: CipherBox, encoded: str) -> str:
        calls.append(encoded)
        return original(self, encoded)

    monkeypatch.setattr(CipherBox, "decrypt", spy)
    return calls


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_missing_api_key_is_config_error(self) -> None:
        with pytest.raises(ConfigError, match="api_key"):
            DevKitClient(transport=FakeTransport())

    def test_missing_api_key_hint_names_from_env(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            DevKitClient(transport=FakeTransport())
        assert "ClientOptions.from_env()" in exc_info.value.message

    def test_invalid_key_rejected_before_transport_is_built(self, monkeypatch: pytest.MonkeyPatch) -> None:
        built: list[tuple] = []
        monkeypatch.setattr(devkit_client, "HttpxTransport", lambda *args: built.append(args))
        with pytest.raises(ConfigError):
            DevKitClient(api_key="k", environ={"DEVKIT_ENCRYPTION_KEY": "dG9vLXNob3J0"})
        assert built == []

    def test_options_and_kwargs_together_rejected(self) -> None:
        with pytest.raises(TypeError):
            DevKitClient(ClientOptions(api_key="k"), transport=FakeTransport(), api_key="other")

    def test_accepts_options_object(self) -> None:
        options = ClientOptions(api_key="k", cache_expire_after_ms=500)
        client = DevKitClient(options, transport=FakeTransport(), environ={})
        assert client.options is options

    def test_crypto_disabled_without_key(self) -> None:
        client = _client(FakeTransport())
        assert client.is_crypto_enabled() is False
        assert client.get_encryption_key_hash() is None

    def test_encryption_key_from_environment(self) -> None:
        key = CipherBox.generate_key()
        client = _client(FakeTransport(), environ={"DEVKIT_ENCRYPTION_KEY": key})
        assert client.is_crypto_enabled() is True
        assert client.get_encryption_key_hash() == CipherBox(key).key_fingerprint()

    def test_explicit_key_wins_over_environment(self) -> None:
        explicit = CipherBox.generate_key()
        client = _client(
            FakeTransport(),
            encryption_key=explicit,
            environ={"DEVKIT_ENCRYPTION_KEY": CipherBox.generate_key()},
        )
        assert client.get_encryption_key_hash() == CipherBox(explicit).key_fingerprint()

    def test_invalid_key_rejected_at_construction(self) -> None:
        with pytest.raises(ConfigError):
            _client(FakeTransport(), encryption_key="dG9vLXNob3J0")

    def test_repr_hides_key(self) -> None:
        key = CipherBox.generate_key()
        client = _client(FakeTransport(), encryption_key=key)
        assert key not in repr(client)
        assert "crypto_enabled=True" in repr(client)

    def test_injected_transport_not_closed(self) -> None:
        transport = FakeTransport()

        async def run() -> None:
            async with _client(transport):
                pass

        asyncio.run(run())
        assert transport.closed is False


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


class TestGetConfig:
    def test_fetch_once_then_served_from_cache(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": "42", "type": "STRING"})
        client = _client(transport, cache_expire_after_ms=1000)

        async def run() -> tuple:
            first = await client.get_config("env1", "feature.x")
            second = await client.get_config("env1", "feature.x")
            as_int = await client.get_config("env1", "feature.x", int)
            return first, second, as_int

        assert asyncio.run(run()) == ("42", "42", 42)
        assert transport.call_count() == 1

    def test_refetch_after_ttl(self) -> None:
        clock = FakeClock()
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": "42"})
        client = _client(transport, cache_expire_after_ms=1000, clock=clock)

        asyncio.run(client.get_config("env1", "feature.x"))
        clock.advance(milliseconds=999)
        asyncio.run(client.get_config("env1", "feature.x"))
        assert transport.call_count() == 1

        clock.advance(milliseconds=1)
        asyncio.run(client.get_config("env1", "feature.x"))
        assert transport.call_count() == 2

    def test_conversion_failure_after_fetch(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": "not-a-number"})
        client = _client(transport)
        with pytest.raises(ConversionError):
            asyncio.run(client.get_config("env1", "feature.x", int))
        # the raw value is still cached
        assert asyncio.run(client.get_config("env1", "feature.x")) == "not-a-number"
        assert transport.call_count() == 1

    @pytest.mark.parametrize(
        ("raw", "as_type", "expected"),
        [
            ("TRUE", bool, True),
            ("yes", bool, False),
            ("3.5", float, 3.5),
            ('{"a": 1}', dict, {"a": 1}),
            ("[1, 2]", list, [1, 2]),
        ],
    )
    def test_conversions(self, raw: str, as_type: type, expected: object) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": raw})
        assert asyncio.run(_client(transport).get_config("env1", "feature.x", as_type)) == expected

    def test_path_segments_are_escaped(self) -> None:
        transport = FakeTransport().seed(
            "GET", "/api/v1/configurations/environment/env%2F1/key/a%20b", {"value": "v"}
        )
        assert asyncio.run(_client(transport).get_config("env/1", "a b")) == "v"

    def test_missing_value_field_is_remote_error(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, {"type": "STRING"})
        with pytest.raises(RemoteError):
            asyncio.run(_client(transport).get_config("env1", "feature.x"))

    def test_transport_errors_propagate_and_nothing_cached(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, RemoteError("boom", status_code=500))
        client = _client(transport)
        with pytest.raises(RemoteError):
            asyncio.run(client.get_config("env1", "feature.x"))
        assert client.get_cache_size() == 0


class TestConditionalDecryption:
    def test_plaintext_never_decrypted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = _spy_decrypt(monkeypatch)
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": "plain-value"})
        client = _client(transport, encryption_key=CipherBox.generate_key())
        assert asyncio.run(client.get_config("env1", "feature.x")) == "plain-value"
        assert calls == []

    def test_encrypted_decrypted_once_per_miss(self, monkeypatch: pytest.MonkeyPatch) -> None:
        key = CipherBox.generate_key()
        encrypted = CipherBox(key).encrypt("db.internal:5432")
        calls = _spy_decrypt(monkeypatch)
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": encrypted})
        client = _client(transport, encryption_key=key)

        async def run() -> list:
            return [await client.get_config("env1", "feature.x") for _ in range(3)]

        assert asyncio.run(run()) == ["db.internal:5432"] * 3
        assert calls == [encrypted]

    def test_encrypted_returned_raw_without_key(self) -> None:
        encrypted = CipherBox(CipherBox.generate_key()).encrypt("hidden")
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": encrypted})
        assert asyncio.run(_client(transport).get_config("env1", "feature.x")) == encrypted

    def test_wrong_key_on_encrypted_config_raises(self) -> None:
        encrypted = CipherBox(CipherBox.generate_key()).encrypt("hidden")
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": encrypted})
        client = _client(transport, encryption_key=CipherBox.generate_key())
        with pytest.raises(DecryptionError):
            asyncio.run(client.get_config("env1", "feature.x"))
        assert client.get_cache_size() == 0


class TestGetConfigMap:
    def test_map_decrypts_encrypted_entries(self) -> None:
        key = CipherBox.generate_key()
        transport = FakeTransport().seed(
            "GET", CONFIG_MAP, {"plain": "one", "hidden": CipherBox(key).encrypt("two")}
        )
        client = _client(transport, encryption_key=key)
        assert asyncio.run(client.get_config_map("env1")) == {"plain": "one", "hidden": "two"}

    def test_returned_map_is_a_copy(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_MAP, {"a": "1"})
        client = _client(transport)
        first = asyncio.run(client.get_config_map("env1"))
        first["a"] = "tampered"
        assert asyncio.run(client.get_config_map("env1")) == {"a": "1"}
        assert transport.call_count() == 1

    def test_non_string_values_rejected(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_MAP, {"a": 1})
        with pytest.raises(RemoteError):
            asyncio.run(_client(transport).get_config_map("env1"))


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------


class TestGetSecret:
    def test_no_key_fails_before_any_request(self) -> None:
        transport = FakeTransport()
        client = _client(transport)
        with pytest.raises(ConfigError, match="DEVKIT_ENCRYPTION_KEY"):
            asyncio.run(client.get_secret("app1", "prod", "DB_PASSWORD"))
        with pytest.raises(ConfigError):
            asyncio.run(client.get_secret_map("app1", "prod"))
        assert transport.call_count() == 0

    def test_decrypts_and_caches(self) -> None:
        key = CipherBox.generate_key()
        transport = FakeTransport().seed(
            "GET", SECRET_MAP, {"DB_PASSWORD": CipherBox(key).encrypt("s3cr3t")}
        )
        client = _client(transport, encryption_key=key)

        async def run() -> tuple:
            return (
                await client.get_secret("app1", "prod", "DB_PASSWORD"),
                await client.get_secret("app1", "prod", "DB_PASSWORD"),
            )

        assert asyncio.run(run()) == ("s3cr3t", "s3cr3t")
        assert transport.call_count() == 1

    def test_missing_secret(self) -> None:
        transport = FakeTransport().seed("GET", SECRET_MAP, {})
        client = _client(transport, encryption_key=CipherBox.generate_key())
        with pytest.raises(SecretNotFoundError) as exc_info:
            asyncio.run(client.get_secret("app1", "prod", "NOPE"))
        assert exc_info.value.key == "NOPE"

    def test_secret_always_decrypted(self) -> None:
        # secrets are never passed through raw, even when they look like plaintext
        transport = FakeTransport().seed("GET", SECRET_MAP, {"TOKEN": "plain-text"})
        client = _client(transport, encryption_key=CipherBox.generate_key())
        with pytest.raises(DecryptionError):
            asyncio.run(client.get_secret("app1", "prod", "TOKEN"))


class TestGetSecretMap:
    def test_all_entries_decrypted(self) -> None:
        key = CipherBox.generate_key()
        box = CipherBox(key)
        transport = FakeTransport().seed(
            "GET", SECRET_MAP, {"A": box.encrypt("1"), "B": box.encrypt("2")}
        )
        client = _client(transport, encryption_key=key)
        assert asyncio.run(client.get_secret_map("app1", "prod")) == {"A": "1", "B": "2"}

    def test_partial_failure_reports_every_failed_key(self) -> None:
        key = CipherBox.generate_key()
        good, other = CipherBox(key), CipherBox(CipherBox.generate_key())
        secrets = {
            "key1": good.encrypt("v1"),
            "key2": other.encrypt("v2"),
            "key3": good.encrypt("v3"),
            "key4": other.encrypt("v4"),
            "key5": good.encrypt("v5"),
        }
        transport = FakeTransport().seed("GET", SECRET_MAP, secrets)
        client = _client(transport, encryption_key=key)

        with pytest.raises(SecretMapDecryptionError) as exc_info:
            asyncio.run(client.get_secret_map("app1", "prod"))
        assert exc_info.value.failed_keys == ["key2", "key4"]
        assert "v1" not in str(exc_info.value)
        assert client.get_cache_size() == 0

    def test_failure_is_a_decryption_error(self) -> None:
        transport = FakeTransport().seed("GET", SECRET_MAP, {"X": "not-encrypted"})
        client = _client(transport, encryption_key=CipherBox.generate_key())
        with pytest.raises(DecryptionError):
            asyncio.run(client.get_secret_map("app1", "prod"))


# ---------------------------------------------------------------------------
# Feature flags
# ---------------------------------------------------------------------------


class TestFeatureFlags:
    def test_evaluation_request_body(self) -> None:
        transport = FakeTransport().seed(
            "POST", EVALUATE, {"enabled": True, "variantKey": "blue", "reason": "RULE_MATCH"}
        )
        client = _client(transport)
        result = asyncio.run(client.evaluate_feature_flag("new-ui", "user-1", {"plan": "pro"}))
        assert result == FeatureFlagEvaluation(True, "blue", "RULE_MATCH")
        assert transport.calls[0].body == {
            "flagKey": "new-ui",
            "userId": "user-1",
            "attributes": {"plan": "pro"},
        }

    def test_is_feature_enabled_sends_empty_attributes(self) -> None:
        transport = FakeTransport().seed("POST", EVALUATE, {"enabled": False})
        client = _client(transport)
        assert asyncio.run(client.is_feature_enabled("new-ui", "user-1")) is False
        assert transport.calls[0].body["attributes"] == {}

    def test_cached_per_flag_and_user_ignoring_attributes(self) -> None:
        transport = FakeTransport().seed("POST", EVALUATE, {"enabled": True})
        client = _client(transport)

        async def run() -> None:
            await client.is_feature_enabled_with_attributes("f", "u1", {"country": "BR"})
            await client.is_feature_enabled_with_attributes("f", "u1", {"country": "US"})
            await client.is_feature_enabled("f", "u2")

        asyncio.run(run())
        assert transport.call_count("POST") == 2


# ---------------------------------------------------------------------------
# Cache management
# ---------------------------------------------------------------------------


class TestCacheManagement:
    def test_size_invalidate_and_clear(self) -> None:
        transport = (
            FakeTransport()
            .seed("GET", CONFIG_X, {"value": "42"})
            .seed("GET", CONFIG_MAP, {"a": "1"})
        )
        client = _client(transport)

        asyncio.run(client.get_config("env1", "feature.x"))
        asyncio.run(client.get_config_map("env1"))
        assert client.get_cache_size() == 2

        client.invalidate_cache(CacheKey.config("env1", "feature.x"))
        assert client.get_cache_size() == 1
        asyncio.run(client.get_config("env1", "feature.x"))
        assert transport.call_count(path=CONFIG_X) == 2

        client.clear_cache()
        assert client.get_cache_size() == 0

    def test_cache_disabled_always_fetches(self) -> None:
        transport = FakeTransport().seed("GET", CONFIG_X, {"value": "42"})
        client = _client(transport, enable_cache=False)

        async def run() -> None:
            for _ in range(3):
                await client.get_config("env1", "feature.x")

        asyncio.run(run())
        assert transport.call_count() == 3
        assert client.get_cache_size() == 0
        client.invalidate_cache(CacheKey.config("env1", "feature.x"))
        client.clear_cache()

    def test_invalidating_unknown_key_is_a_no_op(self) -> None:
        client = _client(FakeTransport())
        client.invalidate_cache("config:nowhere:nothing")
        assert client.get_cache_size() == 0


class TestHotReloadFactory:
    def test_shares_transport_and_key(self) -> None:
        key = CipherBox.generate_key()
        transport = FakeTransport().seed(
            "GET", CONFIG_MAP, {"hidden": CipherBox(key).encrypt("v")}
        )
        client = _client(transport, encryption_key=key)
        reloader = client.hot_reload("env1", polling_interval_ms=1000)
        assert reloader.environment_id == "env1"
        assert asyncio.run(reloader.refresh()) == {"hidden": "v"}
