from __future__ import annotations

import logging
import secrets
from collections import OrderedDict

from hackmate.gateway import Gateway
from hackmate.services.profile_session import ProfileSessionController
from hackmate.services.session_context import SessionContext


logger = logging.getLogger(__name__)


class SessionRegistry:
    """Per-visitor profile controllers keyed by an opaque cookie value."""

    def __init__(self, gateway: Gateway, max_sessions: int = 1000) -> None:
        self._gateway = gateway
        self._max_sessions = max_sessions
        self._controllers: OrderedDict[str, ProfileSessionController] = OrderedDict()

    def __len__(self) -> int:
        return len(self._controllers)

    def get(self, session_id: str | None) -> ProfileSessionController | None:
        if not session_id:
            return None
        controller = self._controllers.get(session_id)
        if controller is not None:
            self._controllers.move_to_end(session_id)
        return controller

    async def get_or_create(self, session_id: str | None) -> tuple[str, ProfileSessionController]:
        controller = self.get(session_id)
        if controller is not None:
            return session_id, controller

        session_id = secrets.token_urlsafe(24)
        controller = ProfileSessionController(SessionContext(self._gateway))
        await controller.init()
        self._controllers[session_id] = controller
        while len(self._controllers) > self._max_sessions:
            evicted, _ = self._controllers.popitem(last=False)
            logger.info("session.evicted id=%s", evicted[:6])
        return session_id, controller
