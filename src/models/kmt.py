from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from .base import KMTModel
from .usuario import UserProfile

Identifier = Union[int, str]

# Chaves permitidas no envelope {data, message, success}
ENVELOPE_KEYS = frozenset({"data", "message", "success", "errors"})
# Metadados de paginação que podem acompanhar o envelope de listas
PAGINATION_META_KEYS = frozenset({"totalCount", "pageNumber", "pageSize", "totalPages"})

class ApiEnvelope(KMTModel):
    """Envelope padrão de algumas respostas do KMT. O chamador recebe só `data`."""

    data: Any = None
    message: Optional[str] = None
    success: Optional[bool] = None
    errors: Optional[Any] = None

    @staticmethod
    def matches(body: Any) -> bool:
        """
        Um objeto JSON é envelope se tem `data` e nenhuma chave fora do envelope
        (metadados de paginação são aceitos).
        Um registro comum que por acaso tenha um campo `data` continua sendo payload.
        """
        return (
            isinstance(body, dict)
            and "data" in body
            and set(body.keys()) <= ENVELOPE_KEYS | PAGINATION_META_KEYS
        )

class LoginPayload(KMTModel):
    """Formatos aceitos na resposta do /Auth/login."""

    token: Optional[str] = None
    access_token: Optional[str] = None
    user: Optional[UserProfile] = None

    def resolved_token(self) -> Optional[str]:
        return self.token or self.access_token

# --- Schemas de resposta por recurso ---
# Só `id` é obrigatório: o restante varia entre versões do backend.

class Resource(KMTModel):
    id: Identifier
    created_at: Optional[datetime] = None

class Department(Resource):
    name: str = ""
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None
    user_count: Optional[int] = None

class Title(Resource):
    name: str = ""
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None

class Role(Resource):
    name: str = ""
    description: Optional[str] = None
    permissions: List[str] = []

class Permission(KMTModel):
    id: Optional[Identifier] = None
    name: str

class User(Resource):
    username: Optional[str] = None
    name: Optional[str] = None
    email: str
    phone_number: Optional[str] = None
    role: Optional[str] = None
    department: Optional[Union[str, Dict[str, Any]]] = None
    title: Optional[Union[str, Dict[str, Any]]] = None
    is_active: Optional[bool] = None

class LeaveType(Resource):
    name: str = ""
    name_ar: Optional[str] = None
    description: Optional[str] = None
    description_ar: Optional[str] = None
    max_days: Optional[int] = None
    carry_over: bool = False
    requires_approval: bool = True
    color: Optional[str] = None

class LeaveRequest(Resource):
    user_id: Optional[Identifier] = None
    leave_type_id: Optional[Identifier] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_hourly_leave: bool = False
    status: Optional[str] = None
    comments: Optional[str] = None

class LeaveBalance(Resource):
    user_id: Optional[Identifier] = None
    leave_type_id: Optional[Identifier] = None
    year: Optional[int] = None
    allocated_days: Optional[float] = None
    used_days: Optional[float] = None

class Mission(Resource):
    description: Optional[str] = None
    description_ar: Optional[str] = None
    mission_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None

class Attendance(Resource):
    user_id: Optional[Identifier] = None
    date: Optional[str] = None
    check_in: Optional[str] = None
    check_out: Optional[str] = None
    status: Optional[str] = None

class Policy(Resource):
    type: Optional[str] = None
    name: str = ""
    description: Optional[str] = None
    rules: Optional[Any] = None
    is_active: Optional[bool] = None

class Compensation(Resource):
    """Bônus, penalidades e folha compartilham o mesmo formato básico"""
    user_id: Optional[Identifier] = None
    amount: Optional[float] = None
    reason: Optional[str] = None
    date: Optional[str] = None
    status: Optional[str] = None

class Overtime(Resource):
    user_id: Optional[Identifier] = None
    date: Optional[str] = None
    hours: Optional[float] = None
    reason: Optional[str] = None
    status: Optional[str] = None

class LateArrival(Resource):
    user_id: Optional[Identifier] = None
    date: Optional[str] = None
    minutes_late: Optional[int] = None
    reason: Optional[str] = None
