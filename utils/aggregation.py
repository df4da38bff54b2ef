"""Derived statistics over student, grade and fee records.

All functions are pure: they read the collections they are given, never
mutate them, and return new values. Results are rounded half-up through
``Decimal`` so the same input always produces the same output.

Any computation with nothing to divide by raises ``NoData`` instead of
returning 0 or NaN, so callers can tell "no records" from "zero percent".
"""
from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from models import ClassAggregate, FeeRecord, FeeStatus, FeeStatusShare, GradeEntry, StudentRecord
from utils.errors import InvalidValue, NoData

T = TypeVar("T")

PASS_MARK = 10.0

# (lower bound, band) from best to worst; anything below the pass mark fails
GRADE_BANDS: Tuple[Tuple[float, str], ...] = (
    (16.0, "very_good"),
    (14.0, "good"),
    (12.0, "fairly_good"),
)


def round_half_up(value: float, places: int = 0):
    """Round like a report card does (2.5 -> 3), not like ``round`` (2.5 -> 2).

    Returns an ``int`` for ``places == 0`` and a ``float`` otherwise.
    """
    quantum = Decimal(1).scaleb(-places)
    d = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(d)
    return float(d)


def weighted_average(pairs: Iterable[Tuple[float, float]]) -> float:
    """Σ(score·weight) / Σ(weight) over ``(score, weight)`` pairs."""
    items = list(pairs)
    if not items:
        raise NoData("No scores to average.")
    total_weight = 0
    total_points = 0.0
    for score, weight in items:
        if weight < 0:
            raise InvalidValue("weight", f"weight cannot be negative, got {weight}.")
        total_weight += weight
        total_points += score * weight
    if total_weight == 0:
        raise NoData("The weights of the scores sum to zero.")
    return total_points / total_weight


def percentage(matching: float, total: float, places: int = 0):
    """``100 · matching / total`` rounded half-up to ``places`` decimals."""
    if total < 0 or matching < 0:
        raise InvalidValue("total", "percentages need non-negative counts.")
    if total == 0:
        raise NoData("Cannot compute a rate over an empty population.")
    return round_half_up(100.0 * matching / total, places)


def mean_rate(rates: Iterable[float], places: int = 0):
    """Average of already computed rates, e.g. the mean pass rate of classes."""
    values = list(rates)
    if not values:
        raise NoData("No rates to average.")
    return round_half_up(sum(values) / len(values), places)


def pass_rate(scores: Iterable[float], pass_mark: float = PASS_MARK) -> int:
    values = list(scores)
    return percentage(sum(1 for s in values if s >= pass_mark), len(values))


def grade_band(score: float, pass_mark: float = PASS_MARK) -> str:
    for lower, band in GRADE_BANDS:
        if score >= lower:
            return band
    return "pass" if score >= pass_mark else "fail"


def group_stable(items: Iterable[T], key: Callable[[T], Hashable]) -> Dict[Hashable, List[T]]:
    """Group ``items`` by ``key``; groups and members keep first-seen order."""
    groups: Dict[Hashable, List[T]] = {}
    for item in items:
        groups.setdefault(key(item), []).append(item)
    return groups


# --------------------------
# Grades
# --------------------------
def term_averages(grades: Sequence[GradeEntry], places: int = 2) -> Dict[str, float]:
    """Weighted average per term, in the order terms first appear."""
    return {
        term: round_half_up(weighted_average((g.score, g.weight) for g in entries), places)
        for term, entries in group_stable(grades, key=lambda g: g.term).items()
    }


def overall_average(grades: Sequence[GradeEntry], places: int = 2) -> float:
    return round_half_up(weighted_average((g.score, g.weight) for g in grades), places)


def class_aggregates(
    students: Iterable[StudentRecord],
    grades: Iterable[GradeEntry],
    pass_mark: float = PASS_MARK,
    places: int = 1,
) -> List[ClassAggregate]:
    """Build one row per (class, term) from individual grade entries.

    A class is a (program, level) pair. Each student's weighted term average
    counts once towards the class average and the pass rate. Grades of
    students that are unknown or deleted are left out.
    """
    by_id = {s.id: s for s in students if not s.deleted}
    known = (g for g in grades if g.student_id in by_id)
    groups = group_stable(
        known,
        key=lambda g: (by_id[g.student_id].program, by_id[g.student_id].level, g.term),
    )

    rows: List[ClassAggregate] = []
    for (program, level, term), entries in groups.items():
        per_student = group_stable(entries, key=lambda g: g.student_id)
        averages = [weighted_average((g.score, g.weight) for g in es) for es in per_student.values()]
        first = by_id[entries[0].student_id]
        rows.append(
            ClassAggregate(
                class_name=first.class_name,
                program=program,
                level=level,
                term=term,
                student_count=len(averages),
                average_grade=round_half_up(sum(averages) / len(averages), places),
                pass_rate=pass_rate(averages, pass_mark),
            )
        )
    return rows


def academic_overview(aggregates: Sequence[ClassAggregate]) -> Dict[str, Any]:
    """Headline numbers for the academic records page."""
    if not aggregates:
        raise NoData("No class results to summarise.")
    return {
        "total_students": sum(a.student_count for a in aggregates),
        "average_grade": round_half_up(sum(a.average_grade for a in aggregates) / len(aggregates), 1),
        "pass_rate": mean_rate(a.pass_rate for a in aggregates),
    }


# --------------------------
# Fees
# --------------------------
def remaining_amount(record: FeeRecord) -> float:
    return max(record.total_due - record.amount_paid, 0)


def payment_progress(record: FeeRecord) -> int:
    """Percent of the amount due that has been paid, from the amounts alone."""
    return percentage(record.amount_paid, record.total_due)


def collection_rate(records: Iterable[FeeRecord], places: int = 1) -> float:
    items = list(records)
    return percentage(
        sum(r.amount_paid for r in items),
        sum(r.total_due for r in items),
        places,
    )


def fee_totals(records: Iterable[FeeRecord]) -> Dict[str, Any]:
    """Money and head counts for the fees page.

    ``paid_count``/``unpaid_count`` follow the recorded labels (late counts
    as unpaid); ``settled_count`` looks at the amounts only.
    """
    items = list(records)
    collected = sum(r.amount_paid for r in items)
    expected = sum(r.total_due for r in items)
    return {
        "record_count": len(items),
        "collected": collected,
        "expected": expected,
        "outstanding": sum(remaining_amount(r) for r in items),
        "paid_count": sum(1 for r in items if r.status is FeeStatus.PAID),
        "unpaid_count": sum(1 for r in items if r.status in (FeeStatus.UNPAID, FeeStatus.LATE)),
        "settled_count": sum(1 for r in items if r.amount_paid >= r.total_due),
    }


def fee_status_distribution(records: Iterable[FeeRecord]) -> List[FeeStatusShare]:
    """Share of records per recorded status, in first-seen status order."""
    items = list(records)
    if not items:
        raise NoData("No fee records to distribute.")
    groups = group_stable(items, key=lambda r: r.status)
    return [
        FeeStatusShare(status=status, count=len(members), share=percentage(len(members), len(items)))
        for status, members in groups.items()
    ]


def derive_fee_status(record: FeeRecord, today: date) -> FeeStatus:
    """The status the amounts and due date imply.

    Settled -> paid; otherwise overdue -> late; otherwise something paid ->
    partial; otherwise unpaid.
    """
    if record.amount_paid >= record.total_due:
        return FeeStatus.PAID
    if record.due_date < today:
        return FeeStatus.LATE
    if record.amount_paid > 0:
        return FeeStatus.PARTIAL
    return FeeStatus.UNPAID


def status_mismatches(records: Iterable[FeeRecord], today: date) -> List[Tuple[FeeRecord, FeeStatus]]:
    """Records whose stored label disagrees with :func:`derive_fee_status`."""
    out = []
    for r in records:
        derived = derive_fee_status(r, today)
        if derived is not r.status:
            out.append((r, derived))
    return out


# --------------------------
# Students
# --------------------------
def enrollment_by_year(students: Iterable[StudentRecord]) -> List[Dict[str, int]]:
    counts: Dict[int, int] = {}
    for s in students:
        if s.deleted:
            continue
        counts[s.enrollment_date.year] = counts.get(s.enrollment_date.year, 0) + 1
    return [{"year": year, "students": counts[year]} for year in sorted(counts)]


def metric(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Dict[str, Optional[Any]]:
    """Wrap a computation for display: ``{"value": x}`` or an explicit no-data marker."""
    try:
        return {"value": fn(*args, **kwargs)}
    except NoData:
        return {"value": None, "error": NoData.code}
