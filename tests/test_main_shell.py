from __future__ import annotations

import httpx
import pytest

import main as shell
from src.data.kv_store import KVStore
from src.models.usuario import UserProfile
from src.services.api_client import ApiClient
from src.services.auth_service import SessionExpiredHandler
from src.services.kmt_api import KMTApi
from src.services.session_store import SessionStore
from tests.conftest import BASE_URL, Recorder


class FakePage:
    """Só o que o main() usa do ft.Page; go() dispara o on_route_change na hora, como o Flet"""

    def __init__(self):
        self.route = "/"
        self.views = []
        self.controls = []
        self.title = None
        self.theme_mode = None
        self.on_route_change = None
        self.on_view_pop = None

    def go(self, route):
        self.route = route
        if self.on_route_change:
            self.on_route_change(route)

    def update(self):
        pass

    def add(self, *controls):
        self.controls.extend(controls)


@pytest.fixture
def session_db(tmp_path, monkeypatch):
    path = str(tmp_path / "shell.db")
    monkeypatch.setenv("KMT_SESSION_DB", path)
    monkeypatch.setenv("KMT_LOGIN_ROUTE", "/login")
    monkeypatch.setenv("KMT_HOME_ROUTE", "/dashboard")
    return path


def _start(monkeypatch, responder):
    recorder = Recorder(responder)

    def build_api(config, session, navigator):
        http_client = httpx.Client(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
        client = ApiClient(http_client, session)
        client.add_error_handler(SessionExpiredHandler(session, navigator, config.login_route))
        return KMTApi(client)

    monkeypatch.setattr(shell, "build_api", build_api)
    page = FakePage()
    shell.main(page)
    return page, recorder


def _routes(page):
    return [view.route for view in page.views]


def test_without_session_opens_login(session_db, monkeypatch):
    page, recorder = _start(monkeypatch, lambda r: httpx.Response(200, json=[]))

    assert page.route == "/login"
    assert _routes(page) == ["/login"]
    assert recorder.requests == []


def test_dashboard_is_rendered_for_valid_session(session_db, monkeypatch):
    SessionStore(KVStore(session_db)).set_auth("tok", UserProfile(email="e@kmt.com", role="employee"))

    page, _ = _start(monkeypatch, lambda r: httpx.Response(200, json=[{"id": 1, "name": "RH"}]))

    assert page.route == "/dashboard"
    assert _routes(page) == ["/dashboard"]


def test_expired_token_while_loading_ends_on_login_view(session_db, monkeypatch):
    SessionStore(KVStore(session_db)).set_auth("tok", UserProfile(email="g@kmt.com", role="Super Admin"))

    page, recorder = _start(monkeypatch, lambda r: httpx.Response(401, text="expired"))

    assert page.route == "/login"
    assert _routes(page) == ["/login"]
    # Depois do primeiro 401 as outras abas não voltam a chamar a API
    assert len(recorder.requests) == 1
    assert SessionStore(KVStore(session_db)).get_token() is None
