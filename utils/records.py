"""In-memory institution records for the lifetime of the process.

Records are frozen dataclasses; edits replace them. Deleting a student only
flags it, so ids and matriculation numbers are never reused in a session.
"""
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional

from models import GRADE_SCALE_MAX, EnrollmentStatus, FeeRecord, GradeEntry, StudentRecord
from utils.aggregation import derive_fee_status
from utils.errors import InvalidValue, MissingRequiredParam, RecordNotFound

REQUIRED_STUDENT_FIELDS = ("matriculation_number", "first_name", "last_name", "email", "program", "level")
EDITABLE_STUDENT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "program",
    "level",
    "enrollment_status",
    "enrollment_date",
    "date_of_birth",
    "address",
    "nationality",
    "gender",
)


def parse_date(value: Any, field: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidValue(field, f"'{field}' must be a date in YYYY-MM-DD format.") from None


def parse_amount(value: Any, field: str = "amount") -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise InvalidValue(field, f"'{field}' must be a number.") from None
    if amount != amount or amount in (float("inf"), float("-inf")):
        raise InvalidValue(field, f"'{field}' must be a finite number.")
    return amount


def _status(value: Any) -> EnrollmentStatus:
    try:
        return EnrollmentStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidValue("enrollment_status", "enrollment_status must be 'active' or 'inactive'.") from None


def _clean_student_fields(data: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in EDITABLE_STUDENT_FIELDS:
        if key not in data:
            continue
        value = data[key]
        if key == "enrollment_status":
            out[key] = _status(value)
        elif key in ("enrollment_date", "date_of_birth"):
            out[key] = parse_date(value, key)
        else:
            out[key] = ("" if value is None else str(value)).strip()
    return out


class InstitutionStore:
    def __init__(self, grade_scale_max: float = GRADE_SCALE_MAX) -> None:
        self.grade_scale_max = float(grade_scale_max)
        self._students: Dict[str, StudentRecord] = {}
        self._grades: List[GradeEntry] = []
        self._fees: Dict[str, FeeRecord] = {}
        self._student_ids = itertools.count(1)

    # --------------------------
    # Students
    # --------------------------
    def students(self, include_deleted: bool = False) -> List[StudentRecord]:
        return [s for s in self._students.values() if include_deleted or not s.deleted]

    def get_student(self, student_id: str) -> StudentRecord:
        s = self._students.get(str(student_id))
        if s is None or s.deleted:
            raise RecordNotFound("student", str(student_id))
        return s

    def _next_student_id(self) -> str:
        while True:
            candidate = str(next(self._student_ids))
            if candidate not in self._students:
                return candidate

    def add_student(self, record: StudentRecord) -> StudentRecord:
        """Insert a fully built record (used when loading data)."""
        if record.id in self._students:
            raise InvalidValue("id", f"Student id '{record.id}' already exists.")
        self._check_matriculation_free(record.matriculation_number)
        self._students[record.id] = record
        return record

    def _check_matriculation_free(self, number: str) -> None:
        # Deleted students keep their number
        if any(s.matriculation_number == number for s in self._students.values()):
            raise InvalidValue("matriculation_number", f"Matriculation number '{number}' is already in use.")

    def create_student(self, data: Mapping[str, Any], today: Optional[date] = None) -> StudentRecord:
        for key in REQUIRED_STUDENT_FIELDS:
            if not str(data.get(key) or "").strip():
                raise MissingRequiredParam(key)
        fields = _clean_student_fields(data)
        number = str(data["matriculation_number"]).strip()
        self._check_matriculation_free(number)
        record = StudentRecord(
            id=self._next_student_id(),
            matriculation_number=number,
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            email=fields["email"],
            phone=fields.get("phone", ""),
            program=fields["program"],
            level=fields["level"],
            enrollment_status=fields.get("enrollment_status", EnrollmentStatus.ACTIVE),
            enrollment_date=fields.get("enrollment_date") or today or date.today(),
            date_of_birth=fields.get("date_of_birth"),
            address=fields.get("address", ""),
            nationality=fields.get("nationality", ""),
            gender=fields.get("gender", ""),
        )
        self._students[record.id] = record
        return record

    def update_student(self, student_id: str, changes: Mapping[str, Any]) -> StudentRecord:
        current = self.get_student(student_id)
        number = changes.get("matriculation_number")
        if number is not None and str(number).strip() != current.matriculation_number:
            raise InvalidValue("matriculation_number", "The matriculation number cannot be changed.")
        fields = _clean_student_fields(changes)
        for key in REQUIRED_STUDENT_FIELDS:
            if key in fields and not fields[key]:
                raise MissingRequiredParam(key)
        if "enrollment_date" in fields and fields["enrollment_date"] is None:
            raise MissingRequiredParam("enrollment_date")
        updated = replace(current, **fields)
        self._students[updated.id] = updated
        return updated

    def delete_student(self, student_id: str) -> StudentRecord:
        current = self.get_student(student_id)
        deleted = replace(current, deleted=True)
        self._students[deleted.id] = deleted
        return deleted

    # --------------------------
    # Grades
    # --------------------------
    def add_grades(self, entries: Iterable[GradeEntry]) -> None:
        items = list(entries)
        for e in items:
            if e.student_id not in self._students:
                raise RecordNotFound("student", e.student_id)
            if e.score > self.grade_scale_max:
                raise InvalidValue(
                    "score", f"score must be within 0..{self.grade_scale_max:g}, got {e.score}."
                )
        self._grades.extend(items)

    def grades(self) -> List[GradeEntry]:
        live = {s.id for s in self.students()}
        return [g for g in self._grades if g.student_id in live]

    def grades_for(self, student_id: str) -> List[GradeEntry]:
        self.get_student(student_id)
        return [g for g in self._grades if g.student_id == str(student_id)]

    # --------------------------
    # Fees
    # --------------------------
    def add_fee_record(self, record: FeeRecord) -> FeeRecord:
        if record.student_id not in self._students:
            raise RecordNotFound("student", record.student_id)
        if record.id in self._fees:
            raise InvalidValue("id", f"Fee record id '{record.id}' already exists.")
        self._fees[record.id] = record
        return record

    def fee_records(self) -> List[FeeRecord]:
        live = {s.id for s in self.students()}
        return [r for r in self._fees.values() if r.student_id in live]

    def get_fee_record(self, fee_id: str) -> FeeRecord:
        r = self._fees.get(str(fee_id))
        if r is None or r.student_id not in {s.id for s in self.students()}:
            raise RecordNotFound("fee record", str(fee_id))
        return r

    def fee_records_for(self, student_id: str) -> List[FeeRecord]:
        self.get_student(student_id)
        return [r for r in self._fees.values() if r.student_id == str(student_id)]

    def record_payment(
        self,
        fee_id: str,
        amount: Any,
        paid_on: Optional[date] = None,
        today: Optional[date] = None,
    ) -> FeeRecord:
        """Add a payment and relabel the record from its new balance.

        ``paid_on`` is only the date stamped on the payment; the label is
        derived as of ``today`` so a backdated payment on an overdue record
        still reads late.
        """
        current = self.get_fee_record(fee_id)
        value = Decimal(str(parse_amount(amount)))
        if value <= 0:
            raise InvalidValue("amount", "The payment amount must be greater than zero.")
        paid = Decimal(str(current.amount_paid))
        outstanding = max(Decimal(str(current.total_due)) - paid, Decimal(0))
        if value > outstanding:
            raise InvalidValue("amount", f"The payment exceeds the outstanding balance of {outstanding.normalize():f}.")
        today = today or date.today()
        updated = replace(current, amount_paid=float(paid + value), last_payment_date=paid_on or today)
        updated = replace(updated, status=derive_fee_status(updated, today))
        self._fees[updated.id] = updated
        return updated
