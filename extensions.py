from __future__ import annotations

import secrets
import time
from typing import Callable, Dict, Optional

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from utils.session import SessionController

# In-memory rate limiter (sufficient for single-instance deployments).
limiter = Limiter(get_remote_address, storage_uri="memory://")


class SessionRegistry:
    """Owns one :class:`SessionController` per signed-in browser session.

    The browser only holds an opaque token in its signed cookie; the
    controller itself stays server side. A controller is registered only
    once its login succeeds, and entries idle for longer than ``max_idle``
    seconds are dropped on the next lookup or registration.
    """

    def __init__(
        self,
        factory: Callable[[], SessionController],
        max_idle: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory
        self._max_idle = max_idle
        self._clock = clock
        self._controllers: Dict[str, SessionController] = {}
        self._last_seen: Dict[str, float] = {}

    def create(self) -> SessionController:
        """A fresh, signed-out controller that is not tracked yet."""
        return self._factory()

    def register(self, controller: SessionController) -> str:
        self.prune()
        token = secrets.token_urlsafe(24)
        self._controllers[token] = controller
        self._last_seen[token] = self._clock()
        return token

    def get(self, token: Optional[str]) -> Optional[SessionController]:
        if not token:
            return None
        self.prune()
        controller = self._controllers.get(token)
        if controller is not None:
            self._last_seen[token] = self._clock()
        return controller

    def discard(self, token: Optional[str]) -> None:
        if token:
            self._controllers.pop(token, None)
            self._last_seen.pop(token, None)

    def prune(self) -> int:
        """Drop controllers idle past ``max_idle``; returns how many went."""
        if not self._max_idle:
            return 0
        cutoff = self._clock() - self._max_idle
        stale = [t for t, seen in self._last_seen.items() if seen < cutoff]
        for token in stale:
            self.discard(token)
        return len(stale)

    def __len__(self) -> int:
        return len(self._controllers)
