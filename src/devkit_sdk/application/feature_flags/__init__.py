"""Application feature flags – evaluation value object."""
from devkit_sdk.application.feature_flags.evaluation import FeatureFlagEvaluation

__all__ = ["FeatureFlagEvaluation"]
