from __future__ import annotations

import logging

from flask import Flask, jsonify

from config import Config
from extensions import SessionRegistry, limiter
from models import GRADE_SCALE_MAX
from routes.academic_routes import academic_bp
from routes.auth_routes import auth_bp
from routes.dashboard_routes import dashboard_bp
from routes.fee_routes import fee_bp
from routes.student_routes import student_bp
from utils.audit import ActivityLog
from utils.auth import DemoAuthenticator
from utils.errors import DashboardError
from utils.records import InstitutionStore
from utils.seed import load_reference_data
from utils.session import SessionController


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)

    # Load configuration from Config (falls back to sensible defaults inside Config)
    app.config.from_object(config_object)
    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")), logging.INFO))

    limiter.init_app(app)

    authenticator = DemoAuthenticator.from_config(app.config)
    store = InstitutionStore(grade_scale_max=app.config.get("GRADE_SCALE_MAX", GRADE_SCALE_MAX))
    if app.config.get("SEED_REFERENCE_DATA", True):
        load_reference_data(store)

    app.extensions["dashboard_sessions"] = SessionRegistry(
        lambda: SessionController(authenticator),
        max_idle=app.permanent_session_lifetime.total_seconds(),
    )
    app.extensions["records"] = store
    app.extensions["activity_log"] = ActivityLog(app.config.get("ACTIVITY_LOG_SIZE", 50))

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(academic_bp)
    app.register_blueprint(fee_bp)

    @app.errorhandler(DashboardError)
    def _dashboard_error(err: DashboardError):
        return jsonify({"ok": False, "error": err.to_dict()}), err.http_status

    # Set modern security headers on every response
    @app.after_request
    def _set_security_headers(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        resp.headers.setdefault("Cache-Control", "no-store")
        # HSTS only when cookies marked secure (implies HTTPS)
        if app.config.get("SESSION_COOKIE_SECURE", False):
            resp.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return resp

    app.logger.info("%s ready (%d students loaded)", app.config.get("APP_NAME"), len(store.students()))
    return app


app = create_app()


if __name__ == "__main__":
    app.run(debug=False)
