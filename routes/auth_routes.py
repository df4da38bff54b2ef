from __future__ import annotations

import asyncio

from flask import Blueprint, current_app, jsonify, session

from extensions import limiter
from utils import SESSION_TOKEN_KEY, current_controller, error_response, login_controller, remember_controller, request_data
from utils.audit import log_event

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")


def _login_limit() -> str:
    return current_app.config.get("LOGIN_RATE_LIMIT", "10 per minute")


@auth_bp.route("/login", methods=["POST"])
# Rate limit login POSTs only
@limiter.limit(_login_limit, methods=["POST"])
def login():
    """Sign in with ``username``/``password`` (JSON body or form fields).

    A failed attempt leaves the session exactly as it was.
    """
    data = request_data()
    controller = login_controller()
    outcome = asyncio.run(controller.login(data.get("username"), data.get("password")))
    if not outcome.ok:
        current_app.logger.info("Login failed (%s)", outcome.error.code)
        return error_response(outcome.error)

    remember_controller(controller)
    identity = outcome.value
    log_event("login", target=identity.role.value, detail=identity.display_name)
    return jsonify({"ok": True, "message": f"Welcome {identity.display_name}!", "session": controller.snapshot()})


@auth_bp.route("/logout", methods=["POST"])
def logout():
    controller = current_controller()
    if controller is not None and controller.is_authenticated:
        log_event("logout", target=controller.role.value, detail=controller.identity.display_name)
        controller.logout()
    current_app.extensions["dashboard_sessions"].discard(session.pop(SESSION_TOKEN_KEY, None))
    return jsonify({"ok": True})


@auth_bp.route("/me", methods=["GET"])
def me():
    controller = current_controller()
    if controller is None:
        return jsonify({"ok": True, "session": {"state": "unauthenticated", "identity": None, "menu": []}})
    return jsonify({"ok": True, "session": controller.snapshot()})
