"""Kernel time – Clock port + implementations."""
from devkit_sdk.kernel.time.clock import Clock, FrozenClock, SystemClock

__all__ = ["Clock", "FrozenClock", "SystemClock"]
