from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Type

from src.models.base import KMTModel
from src.models.kmt import (
    Attendance,
    Compensation,
    Department,
    Identifier,
    LateArrival,
    LeaveBalance,
    LeaveRequest,
    LeaveType,
    Mission,
    Overtime,
    Permission,
    Policy,
    Role,
    Title,
    User,
)
from src.services.api_client import ApiClient

Mapper = Callable[[Dict[str, Any]], Dict[str, Any]]


def _as_dict(payload: Any) -> Dict[str, Any]:
    if isinstance(payload, KMTModel):
        return payload.to_wire()
    return dict(payload)


# --- Mapeamentos formulário -> DTO do backend KMT ---
# Reproduzem campo a campo o que o backend espera.

def map_create_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "username": user.get("username"),
        "email": user.get("email"),
        "phoneNumber": user.get("phoneNumber"),
        "password": user.get("password"),
        "titleId": user.get("titleId") or None,
        "departmentId": user.get("departmentId") or None,
        "hireDate": user.get("hireDate") or datetime.now(timezone.utc).isoformat(),
        "priorWorkExperienceMonths": user.get("priorWorkExperienceMonths") or 0,
        "gender": user.get("gender") or 1,  # 1 = Masculino quando não informado
    }


def map_create_mission(mission: Dict[str, Any]) -> Dict[str, Any]:
    request = {
        "Description": mission.get("description"),
        "DescriptionAr": mission.get("descriptionAr"),
        "MissionDate": mission.get("missionDate"),
        "StartTime": mission.get("startTime"),
    }
    if mission.get("endTime"):
        request["EndTime"] = mission["endTime"]
    request["Location"] = mission.get("location")
    return request


def map_create_leave_request(request: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "leaveTypeId": request.get("leaveTypeId"),
        "startDate": request.get("startDate"),
        "endDate": request.get("endDate"),
        "isHourlyLeave": request.get("isHourlyLeave") or False,
        # TimeSpan do .NET; o horário exato ainda não é enviado
        "startTime": {"ticks": 0} if request.get("startTime") else None,
    }


class ResourceEndpoint:
    """CRUD fino sobre um caminho fixo (ex.: /Department)."""

    def __init__(
        self,
        api: ApiClient,
        path: str,
        model: Type[KMTModel],
        create_mapper: Optional[Mapper] = None,
    ):
        self.api = api
        self.path = path
        self.model = model
        self.create_mapper = create_mapper

    def list(self, **filters) -> List[KMTModel]:
        return self.api.request(self.path, params=filters, response_model=self.model)

    def get(self, entity_id: Identifier) -> KMTModel:
        return self.api.request(f"{self.path}/{entity_id}", response_model=self.model)

    def create(self, payload) -> Any:
        body = _as_dict(payload)
        if self.create_mapper:
            body = self.create_mapper(body)
        return self.api.request(self.path, method="POST", body=body)

    def update(self, entity_id: Identifier, payload) -> Any:
        return self.api.request(f"{self.path}/{entity_id}", method="PUT", body=_as_dict(payload))

    def delete(self, entity_id: Identifier) -> Any:
        return self.api.request(f"{self.path}/{entity_id}", method="DELETE")


class KMTApi:
    """Helpers por recurso sobre o ApiClient genérico."""

    def __init__(self, client: ApiClient):
        self.client = client

        self.users = ResourceEndpoint(client, "/User", User, create_mapper=map_create_user)
        self.employees = self.users
        self.departments = ResourceEndpoint(client, "/Department", Department)
        self.roles = ResourceEndpoint(client, "/Role", Role)
        self.titles = ResourceEndpoint(client, "/Title", Title)
        self.attendance = ResourceEndpoint(client, "/Attendance", Attendance)
        self.leave_requests = ResourceEndpoint(
            client, "/LeaveRequest", LeaveRequest, create_mapper=map_create_leave_request
        )
        self.leave_types = ResourceEndpoint(client, "/LeaveType", LeaveType)
        self.leave_balances = ResourceEndpoint(client, "/LeaveBalance", LeaveBalance)
        self.missions = ResourceEndpoint(client, "/Mission", Mission, create_mapper=map_create_mission)
        self.policies = ResourceEndpoint(client, "/Policy", Policy)
        self.bonuses = ResourceEndpoint(client, "/Bonus", Compensation)
        self.penalties = ResourceEndpoint(client, "/Penalty", Compensation)
        self.payrolls = ResourceEndpoint(client, "/Payroll", Compensation)
        self.overtime = ResourceEndpoint(client, "/Overtime", Overtime)
        self.late_arrivals = ResourceEndpoint(client, "/LateArrival", LateArrival)

    # --- Autenticação ---

    def login(self, email: str, password: str) -> Any:
        return self.client.request(
            "/Auth/login", method="POST", body={"email": email, "password": password}
        )

    def logout(self) -> Any:
        return self.client.request("/Auth/logout", method="POST")

    # --- Usuários ---

    def list_users(
        self,
        search: Optional[str] = None,
        department: Optional[Identifier] = None,
        status: Optional[str] = None,
        page_number: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> List[User]:
        return self.users.list(
            search=search,
            departmentId=department,
            status=status,
            pageNumber=page_number,
            pageSize=page_size,
        )

    def get_user_roles(self, user_id: Identifier) -> Any:
        return self.client.request(f"/User/{user_id}/Roles")

    def assign_user_roles(self, user_id: Identifier, role_ids: Iterable[Identifier]) -> Any:
        return self.client.request(
            f"/User/{user_id}/Roles", method="PUT", body={"roleIds": list(role_ids)}
        )

    def change_password(self, user_id: Identifier, current_password: str, new_password: str) -> Any:
        return self.client.request(
            f"/User/{user_id}/Password",
            method="PUT",
            body={"currentPassword": current_password, "newPassword": new_password},
        )

    # --- Permissões ---

    def get_permissions_catalog(self) -> List[Permission]:
        return self.client.request("/Permission", response_model=Permission)

    def assign_permission(self, role_id: Identifier, permission: str) -> Any:
        return self.client.request(f"/Role/{role_id}/permissions/{permission}", method="PUT")

    def remove_permission(self, role_id: Identifier, permission: str) -> Any:
        return self.client.request(f"/Role/{role_id}/permissions/{permission}", method="DELETE")

    # --- Férias / ausências ---

    def approve_leave_request(self, request_id: Identifier, comments: Optional[str] = None) -> Any:
        return self.client.request(
            f"/LeaveRequest/{request_id}/Approve", method="PATCH", body={"comments": comments}
        )

    def reject_leave_request(self, request_id: Identifier, comments: Optional[str] = None) -> Any:
        return self.client.request(
            f"/LeaveRequest/{request_id}/Reject", method="PATCH", body={"comments": comments}
        )

    def get_leave_balance(self, user_id: Identifier, year: Optional[int] = None) -> List[LeaveBalance]:
        return self.client.request(
            f"/LeaveBalance/user/{user_id}", params={"year": year}, response_model=LeaveBalance
        )

    def reset_leave_balances(self, year: int) -> Any:
        return self.client.request("/LeaveBalance/reset", method="POST", body={"year": year})

    # --- Ponto ---

    def approve_attendance(self, attendance_id: Identifier) -> Any:
        return self.client.request(f"/Attendance/{attendance_id}/approve", method="PATCH")

    def check_in(self, payload: Dict[str, Any]) -> Any:
        return self.client.request("/Attendance/check-in", method="POST", body=payload)

    def check_out(self, payload: Dict[str, Any]) -> Any:
        return self.client.request("/Attendance/check-out", method="POST", body=payload)

    # --- Missões ---

    def get_mission_assignments(self, mission_id: Identifier) -> Any:
        return self.client.request(f"/Mission/{mission_id}/assignments")

    def assign_mission(self, mission_id: Identifier, user_ids: Iterable[Identifier]) -> Any:
        return self.client.request(
            f"/Mission/{mission_id}/assignments", method="POST", body={"userIds": list(user_ids)}
        )

    def update_mission_transportation(self, mission_id: Identifier, details: Dict[str, Any]) -> Any:
        return self.client.request(
            f"/Mission/{mission_id}/transportation", method="PATCH", body=details
        )

    # --- Horas extras e folha ---

    def approve_overtime(self, overtime_id: Identifier, comments: Optional[str] = None) -> Any:
        return self.client.request(
            f"/Overtime/{overtime_id}/approve", method="PATCH", body={"comments": comments}
        )

    def reject_overtime(self, overtime_id: Identifier, comments: Optional[str] = None) -> Any:
        return self.client.request(
            f"/Overtime/{overtime_id}/reject", method="PATCH", body={"comments": comments}
        )

    def update_payroll_amount(self, payroll_id: Identifier, amount: float) -> Any:
        return self.client.request(
            f"/Payroll/{payroll_id}/amount", method="PATCH", body={"amount": amount}
        )
