from __future__ import annotations

from typing import Iterable, List, Optional

from models import ClassAggregate, FeeRecord, StudentRecord

# Filter values the UI sends for "no filter"
ANY_CHOICE = ("", "all")


def matches_text(query: Optional[str], *fields: Optional[str]) -> bool:
    """Case-insensitive substring search across ``fields``; blank query matches."""
    q = (query or "").strip().casefold()
    if not q:
        return True
    return any(q in (f or "").casefold() for f in fields)


def matches_choice(value, choice: Optional[str]) -> bool:
    if choice is None or str(choice).strip().lower() in ANY_CHOICE:
        return True
    # Enum members compare by their value
    return str(getattr(value, "value", value)) == str(choice).strip()


def filter_students(
    students: Iterable[StudentRecord],
    query: Optional[str] = None,
    program: Optional[str] = None,
    level: Optional[str] = None,
    status: Optional[str] = None,
) -> List[StudentRecord]:
    return [
        s
        for s in students
        if not s.deleted
        and matches_text(query, s.first_name, s.last_name, s.full_name, s.matriculation_number, s.email)
        and matches_choice(s.program, program)
        and matches_choice(s.level, level)
        and matches_choice(s.enrollment_status, status)
    ]


def filter_fee_records(
    records: Iterable[FeeRecord],
    query: Optional[str] = None,
    status: Optional[str] = None,
    program: Optional[str] = None,
    level: Optional[str] = None,
) -> List[FeeRecord]:
    return [
        r
        for r in records
        if matches_text(query, r.student_name, r.matriculation_number)
        and matches_choice(r.status, status)
        and matches_choice(r.program, program)
        and matches_choice(r.level, level)
    ]


def filter_class_aggregates(
    rows: Iterable[ClassAggregate],
    query: Optional[str] = None,
    term: Optional[str] = None,
    program: Optional[str] = None,
    level: Optional[str] = None,
) -> List[ClassAggregate]:
    return [
        r
        for r in rows
        if matches_text(query, r.class_name, r.program)
        and matches_choice(r.term, term)
        and matches_choice(r.program, program)
        and matches_choice(r.level, level)
    ]
