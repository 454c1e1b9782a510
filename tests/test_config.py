from __future__ import annotations

from src.config import DEFAULT_API_BASE_URL, get_config
from src.services.api_client import create_http_client


def test_defaults(monkeypatch):
    for name in ("KMT_API_BASE_URL", "KMT_TIMEOUT_SECONDS", "KMT_LOGIN_ROUTE", "KMT_HOME_ROUTE"):
        monkeypatch.delenv(name, raising=False)

    config = get_config()

    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.timeout_seconds is None
    assert config.login_route == "/login"
    assert config.home_route == "/dashboard"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("KMT_API_BASE_URL", "https://kmt.example.com/api")
    monkeypatch.setenv("KMT_TIMEOUT_SECONDS", "2.5")

    config = get_config()
    client = create_http_client(config)

    assert config.timeout_seconds == 2.5
    assert str(client.base_url) == "https://kmt.example.com/api/"
    assert client.timeout.read == 2.5
    client.close()
