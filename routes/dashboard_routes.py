from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from models import EnrollmentStatus, View
from utils import current_controller, error_response, request_data, view_required
from utils import aggregation, policy
from utils.audit import fetch_activity
from utils.errors import NotAuthenticated

dashboard_bp = Blueprint("dashboard", __name__)


def _store():
    return current_app.extensions["records"]


@dashboard_bp.route("/navigate", methods=["POST"])
def navigate():
    """Move the signed-in user to another view.

    Body: ``{"view": "...", "student_id": "..."}``. A rejected move returns
    the reason and leaves the current view unchanged.
    """
    controller = current_controller()
    if controller is None or not controller.is_authenticated:
        return error_response(NotAuthenticated())

    data = request_data()
    view = data.get("view")
    params = {}
    if data.get("student_id") not in (None, ""):
        params["student_id"] = str(data["student_id"])

    # The profile must exist, but only tell roles that are allowed to look
    decision = policy.authorize_navigation(controller.role, view, params)
    if decision.ok and decision.value is View.STUDENT_PROFILE:
        _store().get_student(params["student_id"])

    outcome = controller.navigate(view, params)
    if not outcome.ok:
        return error_response(outcome.error)
    return jsonify({"ok": True, "session": controller.snapshot()})


@dashboard_bp.route("/dashboard", methods=["GET"])
@view_required(View.DASHBOARD)
def dashboard():
    controller = current_controller()
    store = _store()
    students = store.students()
    summary = {
        "enrolled_students": sum(1 for s in students if s.enrollment_status is EnrollmentStatus.ACTIVE),
        "class_count": len(aggregation.group_stable(students, key=lambda s: (s.program, s.level))),
        "enrollment_by_year": aggregation.enrollment_by_year(students),
    }

    # Each panel only appears for roles that may open the page behind it
    if controller.can_access(View.ACADEMIC_RECORDS):
        rows = aggregation.class_aggregates(students, store.grades(), current_app.config.get("PASS_MARK", 10.0))
        summary["academics"] = aggregation.metric(aggregation.academic_overview, rows)
    if controller.can_access(View.FEES):
        records = store.fee_records()
        distribution = aggregation.metric(aggregation.fee_status_distribution, records)
        if distribution["value"] is not None:
            distribution["value"] = [share.to_dict() for share in distribution["value"]]
        summary["fees"] = {
            "collection_rate": aggregation.metric(aggregation.collection_rate, records),
            "distribution": distribution,
        }

    return jsonify(
        {
            "ok": True,
            "session": controller.snapshot(),
            "summary": summary,
            "recent_activity": fetch_activity(10),
        }
    )
