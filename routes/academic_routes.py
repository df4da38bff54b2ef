from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from models import Action, View
from utils import view_required
from utils import aggregation, reports, search
from utils.audit import log_event

academic_bp = Blueprint("academic", __name__, url_prefix="/academic-records")


def _class_rows():
    store = current_app.extensions["records"]
    return aggregation.class_aggregates(
        store.students(),
        store.grades(),
        pass_mark=current_app.config.get("PASS_MARK", 10.0),
    )


def _filtered(rows):
    args = request.args
    return search.filter_class_aggregates(
        rows,
        query=args.get("q"),
        term=args.get("term"),
        program=args.get("program"),
        level=args.get("level"),
    )


@academic_bp.route("", methods=["GET"])
@view_required(View.ACADEMIC_RECORDS)
def academic_records():
    rows = _class_rows()
    return jsonify(
        {
            "ok": True,
            "classes": [r.to_dict() for r in _filtered(rows)],
            # Headline figures cover every class, whatever the filters
            "overview": aggregation.metric(aggregation.academic_overview, rows),
            "terms": list(dict.fromkeys(r.term for r in rows)),
        }
    )


@academic_bp.route("/export", methods=["GET"])
@view_required(View.ACADEMIC_RECORDS, Action.EXPORT_REPORT)
def export_records():
    fmt = reports.check_format(request.args.get("format"), current_app.config.get("EXPORT_FORMATS", ("csv",)))
    payload = reports.class_report(_filtered(_class_rows()), fmt)
    log_event("report_exported", target="academic-records", detail=fmt)
    return jsonify({"ok": True, "report": payload})
