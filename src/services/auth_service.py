import logging
from typing import Optional, Protocol

from pydantic import ValidationError

from src.config import Config
from src.models.kmt import LoginPayload
from src.models.usuario import UserProfile
from src.services.api_client import ApiClient, create_http_client
from src.services.errors import ApiError, LoginError, UnauthorizedError
from src.services.kmt_api import KMTApi
from src.services.session_store import SessionStore

logger = logging.getLogger("AuthService")


class Navigator(Protocol):
    """Qualquer objeto com `route` e `go(route)` (ex.: ft.Page)"""
    route: str

    def go(self, route: str): ...


class SessionExpiredHandler:
    """
    Interceptor de erros do ApiClient.
    Só reage a 401: limpa a sessão e manda para o login (se ainda não estiver lá).
    """

    def __init__(self, session: SessionStore, navigator: Navigator, login_route: str = "/login"):
        self.session = session
        self.navigator = navigator
        self.login_route = login_route

    def __call__(self, error: ApiError):
        if not isinstance(error, UnauthorizedError):
            return
        logger.info("Autenticação expirada, limpando sessão")
        self.session.clear_auth()
        if self.navigator.route != self.login_route:
            self.navigator.go(self.login_route)


class AuthService:
    def __init__(self, api: KMTApi, session: SessionStore):
        self.api = api
        self.session = session

    def login(self, email: str, password: str) -> UserProfile:
        """
        Autentica no KMT e persiste a sessão.
        Aceita {token, user}, só {token} (usuário sintetizado a partir do e-mail)
        ou o token em accessToken/access_token.
        """
        data = self.api.login(email, password)
        if not isinstance(data, dict):
            raise LoginError(f"Resposta de login inesperada: {data!r}", url="/Auth/login")

        # Alguns backends omitem o e-mail no objeto user
        user_data = data.get("user")
        if isinstance(user_data, dict) and not user_data.get("email"):
            data = {**data, "user": {**user_data, "email": email}}

        try:
            payload = LoginPayload.model_validate(data)
        except ValidationError as e:
            raise LoginError(f"Resposta de login inválida: {e}", url="/Auth/login") from e

        token = payload.resolved_token()
        if not token:
            raise LoginError("Resposta de login sem token", url="/Auth/login")

        user = payload.user or UserProfile.from_email(email)
        self.session.set_auth(token, user)
        logger.info(f"Login OK: {user.email} ({user.role})")
        return user

    def logout(self):
        """Best-effort no servidor; a sessão local é limpa de qualquer forma"""
        try:
            self.api.logout()
        except ApiError as e:
            logger.warning(f"Logout remoto falhou, limpando sessão local mesmo assim: {e}")
        finally:
            self.session.clear_auth()

    def restore(self) -> Optional[UserProfile]:
        return self.session.restore()

    def get_current_user(self) -> Optional[UserProfile]:
        return self.session.get_user()


def build_api(config: Config, session: SessionStore, navigator: Navigator) -> KMTApi:
    """Monta cliente HTTP + gateway + interceptor de 401"""
    client = ApiClient(create_http_client(config), session)
    client.add_error_handler(SessionExpiredHandler(session, navigator, config.login_route))
    return KMTApi(client)
