"""Base worker functionality for periodic async jobs."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """Abstract base class for async workers."""

    def __init__(self, consumer_name: str | None = None):
        self.consumer_name = consumer_name or self._build_consumer_name()
        self._shutdown_event = asyncio.Event()

    @abstractmethod
    async def run_forever(self) -> None:
        """Main worker loop. Should be implemented by subclasses."""

    @abstractmethod
    def _build_consumer_name(self) -> str:
        """Build a unique name for this worker instance."""

    def shutdown(self) -> None:
        """Signal the worker to shut down gracefully."""
        self._shutdown_event.set()

    def is_shutdown_requested(self) -> bool:
        """Check if shutdown has been requested."""
        return self._shutdown_event.is_set()

    async def _sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` or until shutdown is requested."""
        with contextlib.suppress(asyncio.TimeoutError):
            await asyncio.wait_for(self._shutdown_event.wait(), timeout=seconds)
