from __future__ import annotations

from datetime import date

from flask import Blueprint, current_app, jsonify, request

from models import Action, FeeRecord, FeeStatus, View
from utils import request_data, view_required
from utils import aggregation, reports, search
from utils.audit import log_event
from utils.records import parse_date

fee_bp = Blueprint("fees", __name__, url_prefix="/fees")


def _store():
    return current_app.extensions["records"]


def fee_row(record: FeeRecord) -> dict:
    row = record.to_dict()
    row["remaining"] = aggregation.remaining_amount(record)
    row["payment_progress"] = aggregation.metric(aggregation.payment_progress, record)
    return row


def _filtered(records):
    args = request.args
    return search.filter_fee_records(
        records,
        query=args.get("q"),
        status=args.get("status"),
        program=args.get("program"),
        level=args.get("level"),
    )


@fee_bp.route("", methods=["GET"])
@view_required(View.FEES)
def list_fees():
    records = _store().fee_records()
    distribution = aggregation.metric(aggregation.fee_status_distribution, records)
    if distribution["value"] is not None:
        distribution["value"] = [share.to_dict() for share in distribution["value"]]

    # Labels that no longer match the balance, for staff to review
    mismatches = [
        {"id": r.id, "status": r.status.value, "derived_status": derived.value}
        for r, derived in aggregation.status_mismatches(records, date.today())
    ]
    return jsonify(
        {
            "ok": True,
            "currency": current_app.config.get("CURRENCY", "XOF"),
            "records": [fee_row(r) for r in _filtered(records)],
            "totals": aggregation.fee_totals(records),
            "collection_rate": aggregation.metric(aggregation.collection_rate, records),
            "distribution": distribution,
            "status_mismatches": mismatches,
            "statuses": [s.value for s in FeeStatus],
        }
    )


@fee_bp.route("/<fee_id>/payments", methods=["POST"])
@view_required(View.FEES, Action.RECORD_PAYMENT)
def record_payment(fee_id):
    data = request_data()
    paid_on = parse_date(data.get("payment_date"), "payment_date")
    updated = _store().record_payment(fee_id, data.get("amount"), paid_on)
    log_event("payment_recorded", target=updated.matriculation_number, detail=f"{data.get('amount')} {updated.student_name}")
    return jsonify(
        {"ok": True, "message": f"Payment recorded for {updated.student_name}", "record": fee_row(updated)}
    ), 201


@fee_bp.route("/export", methods=["GET"])
@view_required(View.FEES, Action.EXPORT_REPORT)
def export_fees():
    fmt = reports.check_format(request.args.get("format"), current_app.config.get("EXPORT_FORMATS", ("csv",)))
    payload = reports.fee_report(_filtered(_store().fee_records()), fmt)
    log_event("report_exported", target="fees", detail=fmt)
    return jsonify({"ok": True, "report": payload})
