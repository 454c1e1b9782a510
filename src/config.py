import os
from typing import Optional
from dotenv import load_dotenv

# Carrega as variáveis do arquivo .env (se existir)
load_dotenv()

DEFAULT_API_BASE_URL = "http://localhost:5114/api"


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return float(raw)


class Config:
    """Configuração do cliente KMT, lida do ambiente no momento da criação."""

    def __init__(self):
        self.api_base_url = os.getenv("KMT_API_BASE_URL", DEFAULT_API_BASE_URL)
        # None = usa o timeout padrão do transporte (httpx)
        self.timeout_seconds = _optional_float("KMT_TIMEOUT_SECONDS")
        self.session_db = os.getenv("KMT_SESSION_DB", "kmt_session.db")
        self.login_route = os.getenv("KMT_LOGIN_ROUTE", "/login")
        self.home_route = os.getenv("KMT_HOME_ROUTE", "/dashboard")


def get_config() -> Config:
    return Config()
