import os
import sys
from dataclasses import replace

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from models import EnrollmentStatus
from utils import aggregation, search
from utils.seed import FEES, GRADES, STUDENTS


def test_matriculation_search_finds_exactly_one_student():
    found = search.filter_students(STUDENTS, query="2024001")
    assert [s.id for s in found] == ["1"]


def test_name_and_email_search_is_case_insensitive():
    assert [s.id for s in search.filter_students(STUDENTS, query="DIALLO")] == ["2"]
    assert [s.id for s in search.filter_students(STUDENTS, query="aicha.camara@")] == ["5"]
    assert [s.id for s in search.filter_students(STUDENTS, query="ibrahim koné")] == ["1"]


def test_blank_and_all_filters_match_everything():
    assert len(search.filter_students(STUDENTS)) == len(STUDENTS)
    assert len(search.filter_students(STUDENTS, query="  ", program="all", level="", status="ALL")) == len(STUDENTS)


def test_filters_combine_with_and():
    found = search.filter_students(STUDENTS, program="Réseaux et Télécommunications")
    assert [s.id for s in found] == ["1", "5"]
    found = search.filter_students(STUDENTS, program="Réseaux et Télécommunications", level="Master 2")
    assert [s.id for s in found] == ["5"]
    assert search.filter_students(STUDENTS, query="Koné", level="Master 2") == []


def test_status_filter_and_deleted_students():
    students = list(STUDENTS)
    students[1] = replace(students[1], enrollment_status=EnrollmentStatus.INACTIVE)
    students[2] = replace(students[2], deleted=True)
    assert [s.id for s in search.filter_students(students, status="inactive")] == ["2"]
    assert "3" not in [s.id for s in search.filter_students(students)]


def test_fee_search_by_status_and_name():
    assert [r.id for r in search.filter_fee_records(FEES, status="paid")] == ["1", "4"]
    assert [r.id for r in search.filter_fee_records(FEES, query="bah")] == ["3"]
    assert [r.id for r in search.filter_fee_records(FEES, query="20240", status="late")] == ["3"]


def test_class_search_by_term_and_program():
    rows = aggregation.class_aggregates(STUDENTS, GRADES)
    s2 = search.filter_class_aggregates(rows, term="Semestre 2")
    assert {r.term for r in s2} == {"Semestre 2"}
    assert len(s2) == 3
    cyber = search.filter_class_aggregates(rows, query="cyber")
    assert [r.level for r in cyber] == ["Licence 2"]
