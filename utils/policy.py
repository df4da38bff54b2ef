"""Role-based access policy for dashboard views and actions.

Everything that decides "may this role see/do this" lives in the tables
below; routes and the session controller only query them. A role admitted to
a view may perform every action that view offers; there is no per-action
grant table yet.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

from models import Action, Role, View
from utils.errors import Denied, MissingRequiredParam, Outcome

log = logging.getLogger(__name__)

ALL_ROLES: FrozenSet[Role] = frozenset(Role)

ACCESS_TABLE: Dict[View, FrozenSet[Role]] = {
    View.DASHBOARD: ALL_ROLES,
    View.STUDENTS: frozenset({Role.ADMINISTRATOR, Role.ACADEMIC}),
    View.ACADEMIC_RECORDS: frozenset({Role.ADMINISTRATOR, Role.ACADEMIC}),
    View.FEES: frozenset({Role.ADMINISTRATOR, Role.FINANCIAL}),
}
# The profile page is part of the student directory
ACCESS_TABLE[View.STUDENT_PROFILE] = ACCESS_TABLE[View.STUDENTS]

VIEW_ACTIONS: Dict[View, FrozenSet[Action]] = {
    View.DASHBOARD: frozenset(),
    View.STUDENTS: frozenset(
        {Action.CREATE_STUDENT, Action.EDIT_STUDENT, Action.DELETE_STUDENT, Action.EXPORT_REPORT}
    ),
    View.STUDENT_PROFILE: frozenset({Action.EXPORT_REPORT}),
    View.ACADEMIC_RECORDS: frozenset({Action.EXPORT_REPORT}),
    View.FEES: frozenset({Action.RECORD_PAYMENT, Action.EXPORT_REPORT}),
}

REQUIRED_PARAMS: Dict[View, tuple] = {
    View.STUDENT_PROFILE: ("student_id",),
}

# Sidebar order; the profile page is reached from the student list, not the menu
MENU: List[tuple] = [
    (View.DASHBOARD, "Dashboard"),
    (View.STUDENTS, "Student Management"),
    (View.ACADEMIC_RECORDS, "Academic Records"),
    (View.FEES, "Tuition Fees"),
]

ROLE_LABELS: Dict[Role, str] = {
    Role.ADMINISTRATOR: "Administrator",
    Role.ACADEMIC: "Academic Staff",
    Role.FINANCIAL: "Financial Staff",
}


def _coerce(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def permitted_views(role) -> FrozenSet[View]:
    """Return every view ``role`` may open. Unknown roles get nothing."""
    r = _coerce(Role, role)
    if r is None:
        return frozenset()
    return frozenset(view for view, roles in ACCESS_TABLE.items() if r in roles)


def can_access(role, view) -> bool:
    r = _coerce(Role, role)
    v = _coerce(View, view)
    if r is None or v is None:
        return False
    return r in ACCESS_TABLE.get(v, frozenset())


def can_mutate(role, view, action) -> bool:
    """True when ``role`` can read ``view`` and ``view`` offers ``action``."""
    a = _coerce(Action, action)
    v = _coerce(View, view)
    if a is None or v is None:
        return False
    return can_access(role, v) and a in VIEW_ACTIONS.get(v, frozenset())


def authorize_view(role, view) -> Outcome:
    v = _coerce(View, view)
    if v is None or not can_access(role, v):
        log.info("View denied: role=%s view=%s", _coerce(Role, role) or role, view)
        return Outcome.failure(Denied(_coerce(Role, role) or role, v or view))
    return Outcome.success(v)


def authorize_navigation(role, view, params: Optional[Mapping[str, Any]] = None) -> Outcome:
    """Check a navigation request without side effects.

    Returns ``Outcome.success(view)`` or an Outcome carrying ``Denied`` or
    ``MissingRequiredParam``. Access is checked before parameters so a role
    that cannot see profiles never learns which ids exist.
    """
    decision = authorize_view(role, view)
    if not decision.ok:
        return decision
    v = decision.value
    params = params or {}
    for name in REQUIRED_PARAMS.get(v, ()):
        value = params.get(name)
        if value is None or not str(value).strip():
            return Outcome.failure(MissingRequiredParam(name))
    return Outcome.success(v)


def authorize_action(role, view, action) -> Outcome:
    v = _coerce(View, view)
    a = _coerce(Action, action)
    if not can_mutate(role, v, a):
        log.info("Action denied: role=%s view=%s action=%s", _coerce(Role, role) or role, view, action)
        return Outcome.failure(Denied(_coerce(Role, role) or role, v or view, a or action))
    return Outcome.success(a)


def menu_for(role) -> List[dict]:
    allowed = permitted_views(role)
    return [{"view": view.value, "label": label} for view, label in MENU if view in allowed]


def role_label(role) -> str:
    r = _coerce(Role, role)
    return ROLE_LABELS.get(r, "") if r else ""
