from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

# Aliased: the ``utils.session`` submodule becomes an attribute of this package
from flask import current_app, g, jsonify, request
from flask import session as flask_session

F = TypeVar("F", bound=Callable[..., Any])

SESSION_TOKEN_KEY = "dashboard_token"


def current_controller():
    """Return the session controller bound to this browser session, if any."""
    registry = current_app.extensions["dashboard_sessions"]
    controller = registry.get(flask_session.get(SESSION_TOKEN_KEY))
    g.dashboard_session = controller
    return controller


def login_controller():
    """Controller to run a login on: the current one, or a new untracked one.

    Pair with :func:`remember_controller` once the login succeeds, so failed
    attempts leave nothing behind in the registry.
    """
    controller = current_controller()
    if controller is None:
        controller = current_app.extensions["dashboard_sessions"].create()
    return controller


def remember_controller(controller) -> None:
    registry = current_app.extensions["dashboard_sessions"]
    if registry.get(flask_session.get(SESSION_TOKEN_KEY)) is not controller:
        flask_session[SESSION_TOKEN_KEY] = registry.register(controller)
        flask_session.permanent = True
    g.dashboard_session = controller


def request_data() -> dict:
    """JSON body if there is one, otherwise form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def error_response(error):
    return jsonify({"ok": False, "error": error.to_dict()}), error.http_status


def view_required(view, action: Optional[Any] = None) -> Callable[[F], F]:
    """Decorator that admits a request only when the policy allows it.

    - No signed-in session -> 401 ``not_authenticated``.
    - Role cannot read ``view`` (or perform ``action`` on it) -> 403 ``denied``.

    The decision itself comes from :mod:`utils.policy`; nothing here knows
    which role sees what.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            # Lazy to avoid a circular import (models -> utils.errors -> utils)
            from utils.errors import NotAuthenticated
            from utils import policy

            controller = current_controller()
            if controller is None or not controller.is_authenticated:
                return error_response(NotAuthenticated())
            if action is None:
                decision = policy.authorize_view(controller.role, view)
            else:
                decision = policy.authorize_action(controller.role, view, action)
            if not decision.ok:
                current_app.logger.info(
                    "Blocked %s for user %s (%s)", func.__name__, controller.identity.id, decision.error.code
                )
                return error_response(decision.error)
            return func(*args, **kwargs)

        return cast(F, wrapper)

    return decorator
