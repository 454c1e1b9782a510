from __future__ import annotations

from typing import Callable, List

import httpx
import pytest

from src.data.kv_store import KVStore
from src.services.api_client import ApiClient
from src.services.auth_service import SessionExpiredHandler
from src.services.kmt_api import KMTApi
from src.services.session_store import SessionStore

BASE_URL = "http://kmt.test/api"


class FakeNavigator:
    """Faz o papel do ft.Page: guarda a rota atual e o histórico de go()"""

    def __init__(self, route: str = "/dashboard"):
        self.route = route
        self.visited: List[str] = []

    def go(self, route: str):
        self.visited.append(route)
        self.route = route


class Recorder:
    """Handler do httpx.MockTransport que grava as requisições recebidas"""

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def kv_store(tmp_path):
    return KVStore(str(tmp_path / "session.db"))


@pytest.fixture
def session(kv_store):
    return SessionStore(kv_store)


@pytest.fixture
def navigator():
    return FakeNavigator()


@pytest.fixture
def make_api(session, navigator):
    """Monta KMTApi sobre um MockTransport, com o interceptor de 401 ligado"""

    def factory(responder: Callable[[httpx.Request], httpx.Response]):
        recorder = Recorder(responder)
        http_client = httpx.Client(transport=httpx.MockTransport(recorder), base_url=BASE_URL)
        client = ApiClient(http_client, session)
        client.add_error_handler(SessionExpiredHandler(session, navigator, "/login"))
        return KMTApi(client), recorder

    return factory
