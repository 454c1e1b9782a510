import logging
import sqlite3
from typing import FrozenSet, Iterable, Optional
from pydantic import ValidationError

from src.data.kv_store import KVStore
from src.models.usuario import UserProfile
from src.services import permissions
from src.services.permissions import Capability

logger = logging.getLogger("SessionStore")

TOKEN_KEY = "kmt_token"
USER_KEY = "kmt_user"

class SessionStore:
    """
    Fonte única de "quem está logado": token + snapshot do usuário.
    Persistido no KVStore (sobrevive ao reinício, não sobrevive ao logout).
    Erros de leitura/parse nunca sobem: são tratados como "deslogado".
    """

    def __init__(self, kv_store: KVStore):
        self.kv_store = kv_store

    def set_auth(self, token: str, user: UserProfile):
        """Grava token e usuário juntos, substituindo qualquer sessão anterior"""
        self.kv_store.set_many({
            TOKEN_KEY: token,
            USER_KEY: user.model_dump_json(by_alias=True),
        })

    def get_token(self) -> Optional[str]:
        try:
            return self.kv_store.get(TOKEN_KEY)
        except sqlite3.Error as e:
            logger.error(f"Erro lendo token da sessão: {e}")
            return None

    def get_user(self) -> Optional[UserProfile]:
        try:
            raw = self.kv_store.get(USER_KEY)
        except sqlite3.Error as e:
            logger.error(f"Erro lendo usuário da sessão: {e}")
            return None

        if not raw or raw == "undefined":
            return None

        try:
            return UserProfile.model_validate_json(raw)
        except ValidationError as e:
            logger.error(f"Dados de usuário corrompidos, removendo: {e}")
            self._discard(USER_KEY)
            return None

    def is_authenticated(self) -> bool:
        """Só confere presença do token (não valida assinatura nem expiração)"""
        return self.get_token() is not None

    def clear_auth(self):
        self._discard(TOKEN_KEY, USER_KEY)

    def restore(self) -> Optional[UserProfile]:
        """
        Checagem de bootstrap: token e usuário devem existir juntos.
        Metade de uma sessão é tratada como sessão nenhuma (apaga as duas chaves).
        """
        token = self.get_token()
        user = self.get_user()
        if token and user:
            return user
        if token or user:
            logger.warning("Sessão inconsistente encontrada, limpando")
            self.clear_auth()
        return None

    def has_role(self, user: Optional[UserProfile], required_roles: Iterable) -> bool:
        return permissions.has_role(user, required_roles)

    def get_permissions(self, user: Optional[UserProfile]) -> FrozenSet[Capability]:
        return permissions.get_permissions(user)

    def _discard(self, *keys: str):
        try:
            self.kv_store.delete(*keys)
        except sqlite3.Error as e:
            logger.error(f"Erro limpando sessão: {e}")
