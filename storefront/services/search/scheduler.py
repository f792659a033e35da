"""Clock and timer abstraction used by the debounced search controller."""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Schedules callbacks on the controller's event loop."""

    @abstractmethod
    def now(self) -> float:
        """Current time in seconds on the scheduler's clock."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds."""


class LoopScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def now(self) -> float:
        return asyncio.get_running_loop().time()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


_scheduler = LoopScheduler()


def get_scheduler() -> Scheduler:
    """FastAPI dependency returning the default scheduler."""

    return _scheduler
