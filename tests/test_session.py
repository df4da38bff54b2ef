import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import pytest

from models import Role, View
from utils.auth import DEMO_USERS, DemoAuthenticator
from utils.errors import Outcome
from utils.session import AUTHENTICATED, UNAUTHENTICATED, SessionController


@pytest.fixture
def controller():
    return SessionController(DemoAuthenticator("password"))


def _login(controller, username, password="password"):
    return asyncio.run(controller.login(username, password))


def test_starts_signed_out(controller):
    assert controller.state == UNAUTHENTICATED
    assert controller.identity is None
    assert controller.current_view is None


def test_login_lands_on_dashboard(controller):
    outcome = _login(controller, "Academic")
    assert outcome.ok
    assert controller.state == AUTHENTICATED
    assert controller.identity.role is Role.ACADEMIC
    assert controller.current_view is View.DASHBOARD
    assert dict(controller.view_params) == {}


@pytest.mark.parametrize(
    "username,password,code",
    [("admin", "wrong", "invalid_credentials"), ("dean", "password", "invalid_credentials"), ("", "password", "missing_fields"), ("admin", "", "missing_fields")],
)
def test_failed_login_stays_signed_out(controller, username, password, code):
    outcome = _login(controller, username, password)
    assert outcome.error.code == code
    assert controller.state == UNAUTHENTICATED


def test_failed_login_keeps_existing_session(controller):
    _login(controller, "financial")
    assert not _login(controller, "admin", "nope").ok
    assert controller.identity.role is Role.FINANCIAL


def test_denied_navigation_leaves_view_untouched(controller):
    _login(controller, "financial")
    controller.navigate(View.FEES)
    for view in (View.STUDENTS, View.ACADEMIC_RECORDS, View.STUDENT_PROFILE, "no-such-view"):
        outcome = controller.navigate(view, {"student_id": "1"})
        assert outcome.error.code == "denied"
        assert controller.current_view is View.FEES


def test_profile_navigation_requires_student_id(controller):
    _login(controller, "academic")
    controller.navigate(View.STUDENTS)
    outcome = controller.navigate(View.STUDENT_PROFILE)
    assert outcome.error.code == "missing_required_param"
    assert controller.current_view is View.STUDENTS

    assert controller.navigate("student-profile", {"student_id": "2"}).ok
    assert controller.current_view is View.STUDENT_PROFILE
    assert controller.view_params["student_id"] == "2"


def test_navigation_replaces_params(controller):
    _login(controller, "admin")
    controller.navigate(View.STUDENT_PROFILE, {"student_id": "2"})
    controller.navigate(View.FEES)
    assert controller.current_view is View.FEES
    assert dict(controller.view_params) == {}


def test_navigation_requires_login(controller):
    outcome = controller.navigate(View.DASHBOARD)
    assert outcome.error.code == "not_authenticated"
    assert controller.current_view is None


def test_logout_clears_identity_and_params(controller):
    _login(controller, "admin")
    controller.navigate(View.STUDENT_PROFILE, {"student_id": "1"})
    controller.logout()
    assert controller.state == UNAUTHENTICATED
    assert controller.current_view is None
    assert dict(controller.view_params) == {}


def test_authorize_actions_against_current_view(controller):
    _login(controller, "academic")
    controller.navigate(View.STUDENTS)
    assert controller.authorize("delete_student").ok
    assert controller.authorize("record_payment", View.FEES).error.code == "denied"


def test_snapshot_lists_only_permitted_menu(controller):
    _login(controller, "financial")
    snap = controller.snapshot()
    assert snap["identity"]["display_name"] == "Mme. Aya Koffi"
    assert [m["view"] for m in snap["menu"]] == ["dashboard", "fees"]


class GatedAuthenticator:
    def __init__(self):
        self.gate = None
        self.calls = 0

    async def authenticate(self, identifier, secret):
        self.calls += 1
        await self.gate.wait()
        return Outcome.success(DEMO_USERS["admin"])


def test_only_one_login_in_flight():
    auth = GatedAuthenticator()
    controller = SessionController(auth)

    async def scenario():
        auth.gate = asyncio.Event()
        first = asyncio.ensure_future(controller.login("admin", "password"))
        await asyncio.sleep(0)
        assert controller.login_pending
        second = await controller.login("admin", "password")
        auth.gate.set()
        return await first, second

    first, second = asyncio.run(scenario())
    assert first.ok
    assert second.error.code == "login_pending"
    assert auth.calls == 1
    assert not controller.login_pending


def test_slow_authenticator_still_resolves():
    controller = SessionController(DemoAuthenticator("password", delay=0.01))
    assert _login(controller, "admin").ok


@pytest.mark.parametrize("username,password", [(123, "password"), ("admin", ["password"]), ({"u": 1}, "x")])
def test_non_text_credentials_are_rejected(controller, username, password):
    outcome = _login(controller, username, password)
    assert outcome.error.code == "invalid_credentials"
    assert controller.state == UNAUTHENTICATED
