"""Per-user session state: who is signed in and which view they are on.

A :class:`SessionController` is an ordinary object owned by whoever drives
the UI (one per browser session in the web app, one per test in the suite).
Every transition either succeeds completely or leaves the state untouched
and returns the reason in an :class:`~utils.errors.Outcome`.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping, Optional

from models import Identity, View
from utils import policy
from utils.errors import LoginInProgress, NotAuthenticated, Outcome

log = logging.getLogger(__name__)

UNAUTHENTICATED = "unauthenticated"
AUTHENTICATED = "authenticated"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


class SessionController:
    def __init__(self, authenticator) -> None:
        self._authenticator = authenticator
        self._identity: Optional[Identity] = None
        self._view: Optional[View] = None
        self._params: Mapping[str, Any] = _EMPTY
        self._pending = False

    # --------------------------
    # State
    # --------------------------
    @property
    def state(self) -> str:
        return AUTHENTICATED if self._identity is not None else UNAUTHENTICATED

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def role(self):
        return self._identity.role if self._identity else None

    @property
    def current_view(self) -> Optional[View]:
        return self._view

    @property
    def view_params(self) -> Mapping[str, Any]:
        return self._params

    @property
    def login_pending(self) -> bool:
        return self._pending

    def snapshot(self) -> dict:
        return {
            "state": self.state,
            "identity": self._identity.to_dict() if self._identity else None,
            "role_label": policy.role_label(self.role),
            "current_view": self._view.value if self._view else None,
            "view_params": dict(self._params),
            "menu": policy.menu_for(self.role),
        }

    # --------------------------
    # Transitions
    # --------------------------
    async def login(self, identifier: Optional[str], secret: Optional[str]) -> Outcome:
        """Sign in through the authenticator.

        Only one attempt may be in flight. On success the session lands on
        the dashboard with no view parameters; on failure nothing changes
        (a signed-in user who mistypes a password stays signed in).
        """
        if self._pending:
            return Outcome.failure(LoginInProgress())
        self._pending = True
        try:
            result = await self._authenticator.authenticate(identifier, secret)
        finally:
            self._pending = False

        if not result.ok:
            return result
        identity = result.value
        self._identity, self._view, self._params = identity, View.DASHBOARD, _EMPTY
        log.info("User %s signed in as %s", identity.id, identity.role.value)
        return Outcome.success(identity)

    def logout(self) -> None:
        if self._identity is not None:
            log.info("User %s signed out", self._identity.id)
        self._identity, self._view, self._params = None, None, _EMPTY

    def navigate(self, view, params: Optional[Mapping[str, Any]] = None) -> Outcome:
        if self._identity is None:
            return Outcome.failure(NotAuthenticated())
        decision = policy.authorize_navigation(self._identity.role, view, params)
        if not decision.ok:
            return decision
        # Swap view and params together so observers never see a mix
        frozen = MappingProxyType(dict(params or {}))
        self._view, self._params = decision.value, frozen
        return Outcome.success(decision.value)

    def authorize(self, action, view=None) -> Outcome:
        """Check a mutating action against the current (or given) view."""
        if self._identity is None:
            return Outcome.failure(NotAuthenticated())
        return policy.authorize_action(self._identity.role, view or self._view, action)

    def can_access(self, view) -> bool:
        return self._identity is not None and policy.can_access(self._identity.role, view)
