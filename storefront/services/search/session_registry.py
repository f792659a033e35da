"""In-memory registry of live search sessions."""

from __future__ import annotations

import logging
import uuid
from collections import OrderedDict

from storefront.config import settings
from storefront.models.identity import Identity
from storefront.services.gateway.base import RepositoryGateway
from storefront.services.search.controller import IncrementalSearchController
from storefront.services.search.scheduler import Scheduler

logger = logging.getLogger(__name__)


class SearchSessionRegistry:
    """Holds one controller per open search box, evicting the least recent."""

    def __init__(self, max_sessions: int | None = None) -> None:
        self._max_sessions = max_sessions or settings.SEARCH_SESSION_LIMIT
        self._sessions: OrderedDict[str, IncrementalSearchController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self,
        gateway: RepositoryGateway,
        scheduler: Scheduler,
        identity: Identity | None = None,
    ) -> tuple[str, IncrementalSearchController]:
        session_id = uuid.uuid4().hex
        controller = IncrementalSearchController(gateway, scheduler, identity=identity)
        self._sessions[session_id] = controller

        while len(self._sessions) > self._max_sessions:
            evicted_id, evicted = self._sessions.popitem(last=False)
            evicted.close()
            logger.info("Evicted idle search session %s", evicted_id)

        return session_id, controller

    def get(self, session_id: str) -> IncrementalSearchController | None:
        controller = self._sessions.get(session_id)
        if controller is not None:
            self._sessions.move_to_end(session_id)
        return controller

    def close(self, session_id: str) -> bool:
        controller = self._sessions.pop(session_id, None)
        if controller is None:
            return False
        controller.close()
        return True

    def close_all(self) -> None:
        for controller in self._sessions.values():
            controller.close()
        self._sessions.clear()


_registry = SearchSessionRegistry()


def get_session_registry() -> SearchSessionRegistry:
    """FastAPI dependency factory."""

    return _registry
