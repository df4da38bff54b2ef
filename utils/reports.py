"""Report payloads handed to the export collaborator.

A payload is plain data: a list of column names, one list of values per row
and a summary block. Turning it into CSV, XLSX or PDF happens elsewhere.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from models import ClassAggregate, FeeRecord, GradeEntry, StudentRecord
from utils import aggregation
from utils.errors import InvalidValue

STUDENT_COLUMNS = ["matriculation_number", "last_name", "first_name", "email", "program", "level", "enrollment_status"]
CLASS_COLUMNS = ["class_name", "term", "student_count", "average_grade", "pass_rate"]
FEE_COLUMNS = [
    "matriculation_number",
    "student_name",
    "program",
    "level",
    "total_due",
    "amount_paid",
    "remaining",
    "payment_progress",
    "status",
    "due_date",
]
TRANSCRIPT_COLUMNS = ["subject_name", "score", "weight", "term", "band"]


def check_format(fmt: Optional[str], allowed: Sequence[str]) -> str:
    value = (fmt or "").strip().lower()
    if not value:
        return allowed[0] if allowed else "csv"
    if value not in allowed:
        raise InvalidValue("format", f"Unsupported export format '{value}'. Use one of: {', '.join(allowed)}.")
    return value


def _payload(kind: str, fmt: str, columns: List[str], rows: List[list], summary: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "kind": kind,
        "format": fmt,
        "generated_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "columns": columns,
        "rows": rows,
        "summary": summary,
    }


def student_report(students: Iterable[StudentRecord], fmt: str) -> Dict[str, Any]:
    rows = [[s.to_dict()[c] for c in STUDENT_COLUMNS] for s in students]
    return _payload("students", fmt, STUDENT_COLUMNS, rows, {"count": len(rows)})


def class_report(aggregates: Sequence[ClassAggregate], fmt: str) -> Dict[str, Any]:
    rows = [[a.to_dict()[c] for c in CLASS_COLUMNS] for a in aggregates]
    summary = aggregation.metric(aggregation.academic_overview, aggregates)
    return _payload("academic-records", fmt, CLASS_COLUMNS, rows, {"count": len(rows), "overview": summary})


def fee_report(records: Sequence[FeeRecord], fmt: str) -> Dict[str, Any]:
    rows = []
    for r in records:
        rows.append(
            [
                r.matriculation_number,
                r.student_name,
                r.program,
                r.level,
                r.total_due,
                r.amount_paid,
                aggregation.remaining_amount(r),
                aggregation.metric(aggregation.payment_progress, r)["value"],
                r.status.value,
                r.due_date.isoformat(),
            ]
        )
    summary = dict(aggregation.fee_totals(records))
    summary["collection_rate"] = aggregation.metric(aggregation.collection_rate, records)
    return _payload("fees", fmt, FEE_COLUMNS, rows, summary)


def transcript_report(
    student: StudentRecord,
    grades: Sequence[GradeEntry],
    fmt: str,
    pass_mark: float = aggregation.PASS_MARK,
    places: int = 2,
) -> Dict[str, Any]:
    rows = [[g.subject_name, g.score, g.weight, g.term, aggregation.grade_band(g.score, pass_mark)] for g in grades]
    summary = {
        "student": student.to_dict(),
        "term_averages": aggregation.term_averages(grades, places) if grades else {},
        "overall_average": aggregation.metric(aggregation.overall_average, grades, places),
    }
    return _payload("transcript", fmt, TRANSCRIPT_COLUMNS, rows, summary)
