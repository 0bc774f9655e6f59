"""Config validation errors."""
from devkit_sdk.kernel.errors import DevKitError


class ConfigError(DevKitError):
    """Raised when configuration is invalid, incomplete, or used incorrectly."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A required option / environment variable is absent."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str, hint: str | None = None) -> None:
        message = f"Required setting '{setting_name}' is missing"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A setting's value is present but semantically invalid."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(
            f"Setting '{setting_name}' has invalid value {value!r}: {reason}"
        )
        self.setting_name = setting_name
        self.value = value
        self.reason = reason


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
