"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    DevKitError
    ├── ConfigError              (devkit_sdk.config.validation)
    │   ├── MissingRequiredSettingError
    │   └── InvalidSettingValueError
    ├── AuthenticationError      (application.py)
    ├── SecretNotFoundError      (application.py)
    ├── ConversionError          (application.py)
    ├── TimeoutError             (infrastructure.py)
    ├── RemoteError              (infrastructure.py)
    └── DecryptionError          (infrastructure.py)
        └── SecretMapDecryptionError
"""

from devkit_sdk.kernel.errors.application import (
    AuthenticationError,
    ConversionError,
    SecretNotFoundError,
)
from devkit_sdk.kernel.errors.base import DevKitError
from devkit_sdk.kernel.errors.infrastructure import (
    DecryptionError,
    RemoteError,
    SecretMapDecryptionError,
    TimeoutError,
)

__all__ = [
    "AuthenticationError",
    "ConversionError",
    "DecryptionError",
    "DevKitError",
    "RemoteError",
    "SecretMapDecryptionError",
    "SecretNotFoundError",
    "TimeoutError",
]
