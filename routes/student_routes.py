from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from models import Action, View
from routes.fee_routes import fee_row
from utils import current_controller, request_data, view_required
from utils import aggregation, reports, search
from utils.audit import log_event

student_bp = Blueprint("students", __name__, url_prefix="/students")


def _store():
    return current_app.extensions["records"]


def _distinct(values):
    # Filter dropdown options in first-seen order
    return list(dict.fromkeys(values))


def _filtered(students):
    args = request.args
    return search.filter_students(
        students,
        query=args.get("q"),
        program=args.get("program"),
        level=args.get("level"),
        status=args.get("status"),
    )


@student_bp.route("", methods=["GET"])
@view_required(View.STUDENTS)
def view_students():
    students = _store().students()
    matches = _filtered(students)
    return jsonify(
        {
            "ok": True,
            "count": len(matches),
            "students": [s.to_dict() for s in matches],
            "programs": _distinct(s.program for s in students),
            "levels": sorted(_distinct(s.level for s in students)),
        }
    )


@student_bp.route("", methods=["POST"])
@view_required(View.STUDENTS, Action.CREATE_STUDENT)
def add_student():
    record = _store().create_student(request_data())
    log_event("student_created", target=record.matriculation_number, detail=record.full_name)
    return jsonify({"ok": True, "message": "Student added successfully", "student": record.to_dict()}), 201


@student_bp.route("/<student_id>", methods=["GET"])
@view_required(View.STUDENT_PROFILE)
def student_profile(student_id):
    store = _store()
    student = store.get_student(student_id)
    grades = store.grades_for(student.id)
    places = current_app.config.get("AVERAGE_PRECISION", 2)
    pass_mark = current_app.config.get("PASS_MARK", 10.0)

    profile = {
        "student": student.to_dict(),
        "grades": [
            dict(g.to_dict(), band=aggregation.grade_band(g.score, pass_mark)) for g in grades
        ],
        "term_averages": aggregation.term_averages(grades, places) if grades else {},
        "overall_average": aggregation.metric(aggregation.overall_average, grades, places),
    }
    if current_controller().can_access(View.FEES):
        profile["fees"] = [fee_row(r) for r in store.fee_records_for(student.id)]
    return jsonify({"ok": True, **profile})


@student_bp.route("/<student_id>", methods=["PUT", "PATCH"])
@view_required(View.STUDENTS, Action.EDIT_STUDENT)
def edit_student(student_id):
    record = _store().update_student(student_id, request_data())
    log_event("student_updated", target=record.matriculation_number, detail=record.full_name)
    return jsonify({"ok": True, "message": "Student updated successfully", "student": record.to_dict()})


@student_bp.route("/<student_id>", methods=["DELETE"])
@view_required(View.STUDENTS, Action.DELETE_STUDENT)
def delete_student(student_id):
    record = _store().delete_student(student_id)
    log_event("student_deleted", target=record.matriculation_number, detail=record.full_name)
    return jsonify({"ok": True, "message": f"Student {record.full_name} deleted"})


@student_bp.route("/export", methods=["GET"])
@view_required(View.STUDENTS, Action.EXPORT_REPORT)
def export_students():
    fmt = reports.check_format(request.args.get("format"), current_app.config.get("EXPORT_FORMATS", ("csv",)))
    payload = reports.student_report(_filtered(_store().students()), fmt)
    log_event("report_exported", target="students", detail=fmt)
    return jsonify({"ok": True, "report": payload})


@student_bp.route("/<student_id>/transcript", methods=["GET"])
@view_required(View.STUDENT_PROFILE, Action.EXPORT_REPORT)
def export_transcript(student_id):
    store = _store()
    fmt = reports.check_format(request.args.get("format"), current_app.config.get("EXPORT_FORMATS", ("csv",)))
    student = store.get_student(student_id)
    payload = reports.transcript_report(
        student,
        store.grades_for(student.id),
        fmt,
        pass_mark=current_app.config.get("PASS_MARK", 10.0),
        places=current_app.config.get("AVERAGE_PRECISION", 2),
    )
    log_event("report_exported", target=student.matriculation_number, detail=f"transcript {fmt}")
    return jsonify({"ok": True, "report": payload})
