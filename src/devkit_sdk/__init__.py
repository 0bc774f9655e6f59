"""
devkit_sdk – client for the DevKit configuration, secrets and feature-flag service.

Import path convention::

    from devkit_sdk import DevKitClient, ClientOptions
    from devkit_sdk.kernel.errors import DecryptionError, SecretMapDecryptionError
    from devkit_sdk.security.encryption import CipherBox
    from devkit_sdk.testing import FakeTransport
"""

from devkit_sdk.application.cache import CacheKey
from devkit_sdk.application.feature_flags import FeatureFlagEvaluation
from devkit_sdk.client import DevKitClient
from devkit_sdk.config import ClientOptions, ConfigError
from devkit_sdk.hot_reload import HotReloadConfigClient
from devkit_sdk.kernel.errors import (
    AuthenticationError,
    ConversionError,
    DecryptionError,
    DevKitError,
    RemoteError,
    SecretMapDecryptionError,
    SecretNotFoundError,
    TimeoutError,
)
from devkit_sdk.security.encryption import CipherBox

__version__ = "0.1.0"
__all__ = [
    "AuthenticationError",
    "CacheKey",
    "CipherBox",
    "ClientOptions",
    "ConfigError",
    "ConversionError",
    "DecryptionError",
    "DevKitClient",
    "DevKitError",
    "FeatureFlagEvaluation",
    "HotReloadConfigClient",
    "RemoteError",
    "SecretMapDecryptionError",
    "SecretNotFoundError",
    "TimeoutError",
    "__version__",
]
