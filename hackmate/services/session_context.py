from __future__ import annotations

import logging

from hackmate.gateway import Gateway
from hackmate.schemas.auth import AuthSession, Identity


logger = logging.getLogger(__name__)


class SessionContext:
    """Who is logged in for one visitor: the access token and its identity."""

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway
        self.access_token: str | None = None
        self.identity: Identity | None = None

    @property
    def gateway(self) -> Gateway:
        return self._gateway

    @property
    def data(self) -> Gateway:
        return self._gateway.bind(self.access_token)

    async def init(self) -> Identity | None:
        """Re-check the held token against the gateway; drops it if no longer valid."""
        identity = await self._gateway.auth_current_user(self.access_token)
        if identity is None:
            self.clear()
            return None
        self.identity = identity
        return identity

    def establish(self, session: AuthSession) -> None:
        self.access_token = session.access_token
        self.identity = session.identity

    async def teardown(self) -> None:
        token = self.access_token
        self.clear()
        if token:
            await self._gateway.auth_sign_out(token)

    def clear(self) -> None:
        self.access_token = None
        self.identity = None
