"""Admission gate bounding how many directories run at once."""

from __future__ import annotations

import asyncio
from typing import Any

__all__ = ["AdmissionGate"]


class AdmissionGate:
    """Fixed-capacity counting semaphore that tracks its holders.

    ``active`` is the number of tasks currently inside the gate and ``peak``
    the highest value it has reached, so callers can check the ceiling was
    honoured after a run.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = capacity
        self._semaphore = asyncio.Semaphore(capacity)
        self._active = 0
        self._peak = 0

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active(self) -> int:
        return self._active

    @property
    def peak(self) -> int:
        return self._peak

    async def acquire(self) -> None:
        await self._semaphore.acquire()
        self._active += 1
        self._peak = max(self._peak, self._active)

    def release(self) -> None:
        if self._active <= 0:
            raise RuntimeError("AdmissionGate released more times than acquired")
        self._active -= 1
        self._semaphore.release()

    async def __aenter__(self) -> "AdmissionGate":
        await self.acquire()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.release()
