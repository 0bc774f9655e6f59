"""Application feature flags – FeatureFlagEvaluation value object."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from devkit_sdk.kernel.errors import RemoteError


@dataclasses.dataclass(frozen=True)
class FeatureFlagEvaluation:
    """Result of evaluating one flag for one user, as returned by the service."""
    enabled: bool
    variant_key: str | None = None
    reason: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FeatureFlagEvaluation":
        if not isinstance(data, Mapping) or not isinstance(data.get("enabled"), bool):
            raise RemoteError("Feature flag evaluation response is missing 'enabled'")
        return cls(
            enabled=data["enabled"],
            variant_key=data.get("variantKey"),
            reason=data.get("reason") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "variantKey": self.variant_key, "reason": self.reason}


__all__ = ["FeatureFlagEvaluation"]
