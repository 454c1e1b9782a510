import logging
from enum import Enum
from typing import Iterable, Optional

from src.services.auth_service import Navigator
from src.services.session_store import SessionStore

logger = logging.getLogger("RouteGuard")


class GuardDecision(str, Enum):
    ALLOW = "allow"
    LOGIN = "login"    # sem sessão
    DENY = "deny"      # logado, mas sem o papel exigido


class RouteGuard:
    """Decide se uma view autenticada pode ser renderizada."""

    def __init__(
        self,
        session: SessionStore,
        navigator: Navigator,
        login_route: str = "/login",
        home_route: str = "/dashboard",
    ):
        self.session = session
        self.navigator = navigator
        self.login_route = login_route
        self.home_route = home_route

    def check(self, required_roles: Optional[Iterable] = None) -> GuardDecision:
        # Token sem usuário (ou o contrário) conta como deslogado: restore() apaga as duas chaves
        user = self.session.restore()
        if user is None:
            return GuardDecision.LOGIN
        if required_roles is None:
            return GuardDecision.ALLOW
        if self.session.has_role(user, required_roles):
            return GuardDecision.ALLOW
        return GuardDecision.DENY

    def enforce(self, required_roles: Optional[Iterable] = None) -> bool:
        """Aplica a decisão: redireciona e devolve False quando a view não deve aparecer"""
        decision = self.check(required_roles)
        if decision is GuardDecision.ALLOW:
            return True

        target = self.login_route if decision is GuardDecision.LOGIN else self.home_route
        logger.info(f"Acesso a {self.navigator.route} negado ({decision.value}), indo para {target}")
        if self.navigator.route != target:
            self.navigator.go(target)
        return False

    def login_route_target(self) -> Optional[str]:
        """Na tela de login já autenticado: para onde ir (None = fica no login)"""
        if self.session.restore() is not None:
            return self.home_route
        return None
