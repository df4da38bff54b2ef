"""Stand-in credential check for the three built-in staff accounts.

This is a placeholder for a real identity provider: a fixed directory of
users sharing one secret. It is asynchronous so a slow provider can be
slotted in without touching the session controller.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, Optional

from models import Identity, Role
from utils.errors import InvalidCredentials, MissingFields, Outcome
from utils.security import hash_password, verify_password

log = logging.getLogger(__name__)

DEMO_USERS: Dict[str, Identity] = {
    "admin": Identity(id="1", display_name="Dr. Kouassi Jean", role=Role.ADMINISTRATOR, email="admin@supptic.edu"),
    "academic": Identity(id="2", display_name="Prof. Marie Diop", role=Role.ACADEMIC, email="academic@supptic.edu"),
    "financial": Identity(id="3", display_name="Mme. Aya Koffi", role=Role.FINANCIAL, email="finance@supptic.edu"),
}


class DemoAuthenticator:
    def __init__(
        self,
        shared_secret: str,
        users: Optional[Mapping[str, Identity]] = None,
        delay: float = 0.0,
    ) -> None:
        self._users = {k.lower(): v for k, v in (users or DEMO_USERS).items()}
        self._secret_hash = hash_password(shared_secret)
        self._delay = max(0.0, float(delay or 0))

    @classmethod
    def from_config(cls, config: Mapping) -> "DemoAuthenticator":
        return cls(
            shared_secret=config.get("DEMO_PASSWORD", "password"),
            delay=config.get("AUTH_DELAY_SECONDS", 0.0),
        )

    async def authenticate(self, identifier: Optional[str], secret: Optional[str]) -> Outcome:
        """Resolve ``identifier``/``secret`` to an :class:`Identity`.

        Always resolves: there is no retry and no cancellation.
        """
        if not identifier or not secret:
            return Outcome.failure(MissingFields())
        if not isinstance(identifier, str) or not isinstance(secret, str):
            return Outcome.failure(InvalidCredentials())
        identifier = identifier.strip()
        if not identifier:
            return Outcome.failure(MissingFields())

        if self._delay:
            await asyncio.sleep(self._delay)

        user = self._users.get(identifier.lower())
        if user is None or not verify_password(self._secret_hash, secret):
            log.warning("Rejected login for identifier %r", identifier)
            return Outcome.failure(InvalidCredentials())
        return Outcome.success(user)
