from typing import Any, Dict, Optional, Union
from datetime import datetime
from enum import Enum
from .base import KMTModel, utc_now

class UserRole(str, Enum):
    """
    Papéis reconhecidos pelo console.
    EMPLOYEE é o papel padrão (sem privilégios além da leitura básica).
    """
    GENERAL_MANAGER = "general_manager"   # Acesso total
    HR_MANAGER = "hr_manager"             # RH: funcionários, políticas, aprovações
    TEAM_LEADER = "team_leader"           # Escopo da própria equipe
    EMPLOYEE = "employee"

# Rótulos antigos que o backend ainda pode enviar
LEGACY_ROLE_LABELS = {
    "Super Admin": UserRole.GENERAL_MANAGER,
    "General Manager": UserRole.GENERAL_MANAGER,
    "Admin": UserRole.HR_MANAGER,
    "HR Manager": UserRole.HR_MANAGER,
    "Manager": UserRole.TEAM_LEADER,
    "Team Leader": UserRole.TEAM_LEADER,
    "Employee": UserRole.EMPLOYEE,
}

def normalize_role(raw: Optional[str]) -> UserRole:
    """Converte o papel recebido (novo ou legado) para UserRole; desconhecido vira EMPLOYEE"""
    if raw is None:
        return UserRole.EMPLOYEE
    if isinstance(raw, UserRole):
        return raw
    try:
        return UserRole(raw)
    except ValueError:
        return LEGACY_ROLE_LABELS.get(raw, UserRole.EMPLOYEE)

class UserProfile(KMTModel):
    """Snapshot do usuário logado guardado junto com o token."""

    id: Optional[Union[int, str]] = None
    name: str = ""
    email: str
    # Mantido como string crua: o backend pode mandar "Super Admin", "hr_manager", ...
    role: str = UserRole.EMPLOYEE.value
    department: Optional[Union[str, Dict[str, Any]]] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def normalized_role(self) -> UserRole:
        return normalize_role(self.role)

    @classmethod
    def from_email(cls, email: str) -> "UserProfile":
        """
        Usuário mínimo quando o login devolve só o token.
        Nome = parte local do e-mail, papel padrão.
        """
        return cls(
            id=email,
            name=email.split("@")[0],
            email=email,
            role=UserRole.EMPLOYEE.value,
            is_active=True,
            created_at=utc_now(),
        )
