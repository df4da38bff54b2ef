import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from models import Action, Role, View
from utils import policy


def test_access_table_matches_sidebar():
    assert policy.permitted_views(Role.ADMINISTRATOR) == frozenset(View)
    assert policy.permitted_views(Role.ACADEMIC) == {
        View.DASHBOARD,
        View.STUDENTS,
        View.STUDENT_PROFILE,
        View.ACADEMIC_RECORDS,
    }
    assert policy.permitted_views(Role.FINANCIAL) == {View.DASHBOARD, View.FEES}


@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("view", list(View))
def test_can_access_agrees_with_permitted_views(role, view):
    assert policy.can_access(role, view) == (view in policy.permitted_views(role))


def test_permitted_views_is_stable_across_calls():
    first = policy.permitted_views(Role.ACADEMIC)
    for _ in range(3):
        assert policy.permitted_views(Role.ACADEMIC) == first


def test_string_values_are_accepted_and_unknown_roles_get_nothing():
    assert policy.can_access("financial", "fees")
    assert not policy.can_access("financial", "students")
    assert policy.permitted_views("janitor") == frozenset()
    assert policy.permitted_views(None) == frozenset()
    assert not policy.can_access("administrator", "settings")


def test_profile_inherits_student_access():
    for role in Role:
        assert policy.can_access(role, View.STUDENT_PROFILE) == policy.can_access(role, View.STUDENTS)


def test_mutations_follow_read_access():
    assert policy.can_mutate(Role.ACADEMIC, View.STUDENTS, Action.DELETE_STUDENT)
    assert policy.can_mutate(Role.FINANCIAL, View.FEES, Action.RECORD_PAYMENT)
    assert not policy.can_mutate(Role.ACADEMIC, View.FEES, Action.RECORD_PAYMENT)
    assert not policy.can_mutate(Role.FINANCIAL, View.STUDENTS, Action.CREATE_STUDENT)
    # The view has to offer the action at all
    assert not policy.can_mutate(Role.ADMINISTRATOR, View.ACADEMIC_RECORDS, Action.RECORD_PAYMENT)
    assert not policy.can_mutate(Role.ADMINISTRATOR, View.DASHBOARD, Action.EXPORT_REPORT)


def test_denied_navigation_is_a_value_not_an_exception():
    outcome = policy.authorize_navigation(Role.FINANCIAL, View.ACADEMIC_RECORDS)
    assert not outcome.ok
    assert outcome.error.code == "denied"
    assert outcome.error.role is Role.FINANCIAL
    assert outcome.error.view is View.ACADEMIC_RECORDS


def test_profile_navigation_needs_a_student_id():
    assert policy.authorize_navigation(Role.ACADEMIC, View.STUDENT_PROFILE, {"student_id": "3"}).ok
    for params in (None, {}, {"student_id": ""}, {"student_id": "   "}):
        outcome = policy.authorize_navigation(Role.ACADEMIC, View.STUDENT_PROFILE, params)
        assert outcome.error.code == "missing_required_param"
        assert outcome.error.param == "student_id"


def test_access_is_checked_before_parameters():
    outcome = policy.authorize_navigation(Role.FINANCIAL, View.STUDENT_PROFILE, {})
    assert outcome.error.code == "denied"


def test_menu_for_role():
    assert [item["view"] for item in policy.menu_for(Role.FINANCIAL)] == ["dashboard", "fees"]
    assert [item["view"] for item in policy.menu_for(Role.ADMINISTRATOR)] == [
        "dashboard",
        "students",
        "academic-records",
        "fees",
    ]
    assert policy.role_label(Role.ACADEMIC) == "Academic Staff"
