from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from utils.errors import InvalidValue

# Default top of the grading scale; the record store enforces the configured one
GRADE_SCALE_MAX = 20.0


class Role(str, Enum):
    ADMINISTRATOR = "administrator"
    ACADEMIC = "academic"
    FINANCIAL = "financial"


class View(str, Enum):
    DASHBOARD = "dashboard"
    STUDENTS = "students"
    STUDENT_PROFILE = "student-profile"
    ACADEMIC_RECORDS = "academic-records"
    FEES = "fees"


class Action(str, Enum):
    CREATE_STUDENT = "create_student"
    EDIT_STUDENT = "edit_student"
    DELETE_STUDENT = "delete_student"
    RECORD_PAYMENT = "record_payment"
    EXPORT_REPORT = "export_report"


class EnrollmentStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class FeeStatus(str, Enum):
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"
    LATE = "late"


@dataclass(frozen=True)
class Identity:
    id: str
    display_name: str
    role: Role
    email: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "role": self.role.value,
            "email": self.email,
        }


@dataclass(frozen=True)
class StudentRecord:
    id: str
    matriculation_number: str
    first_name: str
    last_name: str
    email: str
    phone: str
    program: str
    level: str
    enrollment_status: EnrollmentStatus
    enrollment_date: date
    date_of_birth: Optional[date] = None
    address: str = ""
    nationality: str = ""
    gender: str = ""
    deleted: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def class_name(self) -> str:
        # A class is one level of one program, e.g. "Licence 3 - Cybersécurité"
        return f"{self.level} - {self.program}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "matriculation_number": self.matriculation_number,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "full_name": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "program": self.program,
            "level": self.level,
            "class_name": self.class_name,
            "enrollment_status": self.enrollment_status.value,
            "enrollment_date": self.enrollment_date.isoformat(),
            "date_of_birth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "address": self.address,
            "nationality": self.nationality,
            "gender": self.gender,
        }


@dataclass(frozen=True)
class GradeEntry:
    student_id: str
    subject_name: str
    score: float
    weight: int
    term: str

    def __post_init__(self) -> None:
        if self.score < 0:
            raise InvalidValue("score", f"score cannot be negative, got {self.score}.")
        if isinstance(self.weight, bool) or not isinstance(self.weight, int) or self.weight <= 0:
            raise InvalidValue("weight", f"weight must be a positive integer, got {self.weight!r}.")

    def to_dict(self) -> dict:
        return {
            "subject_name": self.subject_name,
            "score": self.score,
            "weight": self.weight,
            "term": self.term,
        }


@dataclass(frozen=True)
class FeeRecord:
    """One billing cycle for one student.

    ``status`` is the label as recorded; it is not checked against the amounts
    here because imported data is known to drift (a ``late`` record with
    nothing paid, for instance). Use ``utils.aggregation.derive_fee_status``
    when the label must agree with the balance.
    """

    id: str
    student_id: str
    student_name: str
    matriculation_number: str
    program: str
    level: str
    total_due: float
    amount_paid: float
    status: FeeStatus
    due_date: date
    last_payment_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.total_due < 0:
            raise InvalidValue("total_due", "total_due cannot be negative.")
        if self.amount_paid < 0:
            raise InvalidValue("amount_paid", "amount_paid cannot be negative.")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "student_id": self.student_id,
            "student_name": self.student_name,
            "matriculation_number": self.matriculation_number,
            "program": self.program,
            "level": self.level,
            "total_due": self.total_due,
            "amount_paid": self.amount_paid,
            "status": self.status.value,
            "due_date": self.due_date.isoformat(),
            "last_payment_date": self.last_payment_date.isoformat() if self.last_payment_date else None,
        }


@dataclass(frozen=True)
class ClassAggregate:
    class_name: str
    program: str
    level: str
    term: str
    student_count: int
    average_grade: float
    pass_rate: int

    def to_dict(self) -> dict:
        return {
            "class_name": self.class_name,
            "program": self.program,
            "level": self.level,
            "term": self.term,
            "student_count": self.student_count,
            "average_grade": self.average_grade,
            "pass_rate": self.pass_rate,
        }


@dataclass(frozen=True)
class FeeStatusShare:
    status: FeeStatus
    count: int
    share: int

    def to_dict(self) -> dict:
        return {"status": self.status.value, "count": self.count, "share": self.share}
