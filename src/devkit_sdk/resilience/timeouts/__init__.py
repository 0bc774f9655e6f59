"""Resilience – request deadlines."""
from devkit_sdk.resilience.timeouts.policy import TimeoutPolicy

__all__ = ["TimeoutPolicy"]
