from __future__ import annotations

from src.models.usuario import UserProfile, UserRole
from src.services.route_guard import GuardDecision, RouteGuard
from tests.conftest import FakeNavigator


def _guard(session, route="/employees"):
    nav = FakeNavigator(route)
    return RouteGuard(session, nav, "/login", "/dashboard"), nav


def test_unauthenticated_goes_to_login(session):
    guard, nav = _guard(session)

    assert guard.check() is GuardDecision.LOGIN
    assert guard.enforce() is False
    assert nav.visited == ["/login"]


def test_authenticated_without_role_requirement_is_allowed(session):
    session.set_auth("tok", UserProfile(email="e@kmt.com", role="employee"))
    guard, nav = _guard(session)

    assert guard.enforce() is True
    assert nav.visited == []


def test_missing_role_is_denied(session):
    session.set_auth("tok", UserProfile(email="e@kmt.com", role="employee"))
    guard, nav = _guard(session)

    assert guard.check([UserRole.HR_MANAGER]) is GuardDecision.DENY
    assert guard.enforce([UserRole.HR_MANAGER]) is False
    assert nav.visited == ["/dashboard"]


def test_matching_role_is_allowed(session):
    session.set_auth("tok", UserProfile(email="g@kmt.com", role="Super Admin"))
    guard, _ = _guard(session)

    assert guard.check(["hr_manager"]) is GuardDecision.ALLOW


def test_token_with_corrupted_user_is_a_logged_out_session(session, kv_store):
    kv_store.set("kmt_token", "tok")
    kv_store.set("kmt_user", "{broken")
    guard, nav = _guard(session, "/dashboard")

    assert guard.check() is GuardDecision.LOGIN
    assert kv_store.get("kmt_token") is None
    assert kv_store.get("kmt_user") is None

    assert guard.enforce() is False
    assert nav.visited == ["/login"]


def test_token_without_user_goes_to_login_even_for_role_routes(session, kv_store):
    kv_store.set("kmt_token", "tok")
    guard, _ = _guard(session)

    assert guard.check(["team_leader"]) is GuardDecision.LOGIN
    assert session.get_token() is None


def test_half_session_on_login_view_stays_on_login(session, kv_store):
    kv_store.set("kmt_token", "tok")
    guard, _ = _guard(session, "/login")

    assert guard.login_route_target() is None
    assert session.get_token() is None


def test_login_view_redirects_when_already_authenticated(session):
    guard, _ = _guard(session, "/login")
    assert guard.login_route_target() is None

    session.set_auth("tok", UserProfile(email="e@kmt.com"))
    assert guard.login_route_target() == "/dashboard"
