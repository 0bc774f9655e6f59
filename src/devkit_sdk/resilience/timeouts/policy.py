"""Resilience – TimeoutPolicy."""
from __future__ import annotations

import asyncio
import dataclasses
from typing import Awaitable, Callable, TypeVar

from devkit_sdk.kernel.errors import TimeoutError as RequestTimeoutError

T = TypeVar("T")


@dataclasses.dataclass(frozen=True)
class TimeoutPolicy:
    """Whole-call deadline enforced by cancelling the awaited coroutine."""
    timeout_ms: int

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    async def execute(self, func: Callable[[], Awaitable[T]], *, operation: str = "Operation") -> T:
        try:
            return await asyncio.wait_for(func(), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise RequestTimeoutError(
                f"{operation} timed out after {self.timeout_ms}ms", timeout_ms=self.timeout_ms
            ) from exc


__all__ = ["TimeoutPolicy"]
