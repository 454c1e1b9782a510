import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session, select

from backend.database import build_engine, get_session, init_db
from backend.models import AccessToken, ResourceRecord

logger = logging.getLogger("KMTMock")

# --- RECURSOS EXPOSTOS ---
# Nome na URL (igual ao backend KMT real) -> todos gravados em ResourceRecord
RESOURCES = {
    "User", "Department", "Role", "Title", "Attendance",
    "LeaveRequest", "LeaveType", "LeaveBalance", "Mission", "Policy",
    "Bonus", "Penalty", "Payroll", "Overtime", "LateArrival",
}

PERMISSION_CATALOG = [
    "canManageEmployees", "canManagePolicies", "canViewAnalytics", "canApproveAll",
    "canAssignMissions", "canManageDepartments", "canManageRoles", "canViewReports",
    "canDeleteRecords", "canApproveLeave", "canManageAttendance",
]

# Ações PATCH simples: segmento da URL -> status gravado no registro
STATUS_ACTIONS = {"approve": "approved", "reject": "rejected"}

PAGINATION_KEYS = {"pageNumber", "pageSize", "search"}


def envelope(data: Any, message: str = "OK") -> Dict[str, Any]:
    return {"data": data, "message": message, "success": True}


def camel_key(key: str) -> str:
    """O KMT (.NET) aceita chaves em qualquer caixa; o mock guarda em camelCase"""
    return key[:1].lower() + key[1:]


def serialize(record: ResourceRecord) -> Dict[str, Any]:
    return {
        **record.payload,
        "id": record.id,
        "createdAt": record.created_at.isoformat(),
    }


def ensure_resource(resource_name: str):
    if resource_name not in RESOURCES:
        raise HTTPException(status_code=404, detail=f"Recurso '{resource_name}' desconhecido.")


def load_record(session: Session, resource_name: str, item_id: int) -> ResourceRecord:
    ensure_resource(resource_name)
    record = session.get(ResourceRecord, item_id)
    if not record or record.resource != resource_name:
        raise HTTPException(status_code=404, detail=f"{resource_name} {item_id} não encontrado.")
    return record


def save_payload(session: Session, record: ResourceRecord, changes: Dict[str, Any]) -> ResourceRecord:
    # Reatribui o dict inteiro: a coluna JSON não rastreia mutação in-place
    record.payload = {**record.payload, **{camel_key(k): v for k, v in changes.items()}}
    session.add(record)
    session.commit()
    session.refresh(record)
    return record


def require_token(
    authorization: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
) -> AccessToken:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Token ausente")
    token = session.get(AccessToken, authorization[len("Bearer "):])
    if not token:
        raise HTTPException(status_code=401, detail="Token inválido")
    return token


def create_app(database_url: str = None) -> FastAPI:
    app = FastAPI(title="KMT Mock - Servidor de Desenvolvimento")
    app.state.engine = build_engine(database_url)
    init_db(app.state.engine)

    # --- AUTENTICAÇÃO ---

    @app.post("/api/Auth/login")
    def login(credentials: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        email = credentials.get("email")
        password = credentials.get("password")
        if not email or not password:
            return JSONResponse(status_code=401, content={"message": "Invalid credentials"})

        token = AccessToken(token=uuid.uuid4().hex, email=email)
        session.add(token)
        session.commit()

        return {
            "token": token.token,
            "user": {
                "id": 1,
                "name": "Admin User",
                "email": email,
                "role": "Super Admin",
                "department": "Administration",
                "isActive": True,
            },
        }

    @app.post("/api/Auth/logout")
    def logout(
        authorization: Optional[str] = Header(default=None),
        session: Session = Depends(get_session),
    ):
        if authorization and authorization.startswith("Bearer "):
            token = session.get(AccessToken, authorization[len("Bearer "):])
            if token:
                session.delete(token)
                session.commit()
        return {"message": "Logged out successfully"}

    # --- ENDPOINTS ESPECÍFICOS (antes das rotas genéricas) ---

    @app.get("/api/Permission", dependencies=[Depends(require_token)])
    def list_permissions():
        return envelope([{"id": i + 1, "name": p} for i, p in enumerate(PERMISSION_CATALOG)])

    @app.put("/api/Role/{role_id}/permissions/{permission}", dependencies=[Depends(require_token)])
    def add_role_permission(role_id: int, permission: str, session: Session = Depends(get_session)):
        record = load_record(session, "Role", role_id)
        current = list(record.payload.get("permissions", []))
        if permission not in current:
            current.append(permission)
        return envelope(serialize(save_payload(session, record, {"permissions": current})))

    @app.delete("/api/Role/{role_id}/permissions/{permission}", dependencies=[Depends(require_token)])
    def remove_role_permission(role_id: int, permission: str, session: Session = Depends(get_session)):
        record = load_record(session, "Role", role_id)
        current = [p for p in record.payload.get("permissions", []) if p != permission]
        return envelope(serialize(save_payload(session, record, {"permissions": current})))

    @app.get("/api/User/{user_id}/Roles", dependencies=[Depends(require_token)])
    def get_user_roles(user_id: int, session: Session = Depends(get_session)):
        record = load_record(session, "User", user_id)
        return envelope(record.payload.get("roleIds", []))

    @app.put("/api/User/{user_id}/Roles", dependencies=[Depends(require_token)])
    def set_user_roles(user_id: int, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        record = load_record(session, "User", user_id)
        return envelope(serialize(save_payload(session, record, {"roleIds": body.get("roleIds", [])})))

    @app.put("/api/User/{user_id}/Password", dependencies=[Depends(require_token)])
    def change_password(user_id: int, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        load_record(session, "User", user_id)
        if not body.get("newPassword"):
            raise HTTPException(status_code=400, detail="newPassword é obrigatório")
        return envelope(None, "Password changed")

    @app.get("/api/Mission/{mission_id}/assignments", dependencies=[Depends(require_token)])
    def get_assignments(mission_id: int, session: Session = Depends(get_session)):
        record = load_record(session, "Mission", mission_id)
        return envelope(record.payload.get("assignedUserIds", []))

    @app.post("/api/Mission/{mission_id}/assignments", dependencies=[Depends(require_token)])
    def assign_mission(mission_id: int, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        record = load_record(session, "Mission", mission_id)
        assigned = list(record.payload.get("assignedUserIds", []))
        for user_id in body.get("userIds", []):
            if user_id not in assigned:
                assigned.append(user_id)
        return envelope(serialize(save_payload(session, record, {"assignedUserIds": assigned})))

    @app.patch("/api/Mission/{mission_id}/transportation", dependencies=[Depends(require_token)])
    def update_transportation(mission_id: int, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        record = load_record(session, "Mission", mission_id)
        return envelope(serialize(save_payload(session, record, {"transportationDetails": body})))

    @app.patch("/api/Payroll/{payroll_id}/amount", dependencies=[Depends(require_token)])
    def update_payroll_amount(payroll_id: int, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        record = load_record(session, "Payroll", payroll_id)
        return envelope(serialize(save_payload(session, record, {"amount": body.get("amount")})))

    @app.get("/api/LeaveBalance/user/{user_id}", dependencies=[Depends(require_token)])
    def leave_balance_for_user(user_id: str, year: Optional[int] = None, session: Session = Depends(get_session)):
        records = session.exec(
            select(ResourceRecord).where(ResourceRecord.resource == "LeaveBalance")
        ).all()
        items = [
            serialize(r) for r in records
            if str(r.payload.get("userId")) == user_id
            and (year is None or r.payload.get("year") == year)
        ]
        return envelope(items)

    @app.post("/api/LeaveBalance/reset", dependencies=[Depends(require_token)])
    def reset_leave_balances(body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        year = body.get("year")
        records = session.exec(
            select(ResourceRecord).where(ResourceRecord.resource == "LeaveBalance")
        ).all()
        count = 0
        for record in records:
            if record.payload.get("year") == year:
                save_payload(session, record, {"usedDays": 0})
                count += 1
        return envelope({"reset": count}, "Leave balances reset")

    @app.post("/api/Attendance/{direction}", dependencies=[Depends(require_token)])
    def check_in_out(direction: str, body: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        if direction not in ("check-in", "check-out"):
            raise HTTPException(status_code=404, detail=f"Ação '{direction}' desconhecida.")
        record = ResourceRecord(
            resource="Attendance",
            payload={**{camel_key(k): v for k, v in body.items()}, "type": direction, "status": "pending"},
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        return envelope(serialize(record), f"{direction} registrado")

    @app.patch("/api/{resource_name}/{item_id}/{action}", dependencies=[Depends(require_token)])
    def status_action(resource_name: str, item_id: int, action: str,
                      body: Optional[Dict[str, Any]] = Body(default=None),
                      session: Session = Depends(get_session)):
        """approve/reject (em qualquer caixa) de LeaveRequest, Attendance, Overtime..."""
        status = STATUS_ACTIONS.get(action.lower())
        if not status:
            raise HTTPException(status_code=404, detail=f"Ação '{action}' desconhecida.")
        record = load_record(session, resource_name, item_id)
        changes = {"status": status}
        if body and body.get("comments") is not None:
            changes["comments"] = body["comments"]
        return envelope(serialize(save_payload(session, record, changes)))

    # --- CRUD GENÉRICO ---

    @app.get("/api/{resource_name}", dependencies=[Depends(require_token)])
    def list_generic(resource_name: str, request: Request, session: Session = Depends(get_session)):
        """
        Lista QUALQUER recurso. `search` filtra por nome/descrição,
        pageNumber/pageSize paginam e os demais parâmetros filtram por igualdade.
        """
        ensure_resource(resource_name)
        params = dict(request.query_params)

        records = session.exec(
            select(ResourceRecord)
            .where(ResourceRecord.resource == resource_name)
            .order_by(ResourceRecord.id)
        ).all()
        items = [serialize(r) for r in records]

        search = params.get("search")
        if search:
            needle = search.lower()
            items = [
                i for i in items
                if any(needle in str(i.get(k, "")).lower() for k in ("name", "username", "email", "description"))
            ]

        for key, value in params.items():
            if key not in PAGINATION_KEYS:
                items = [i for i in items if str(i.get(key)) == value]

        if "pageSize" in params:
            size = int(params["pageSize"])
            page = int(params.get("pageNumber", 1))
            body = envelope(items[(page - 1) * size: page * size])
            body.update({"totalCount": len(items), "pageNumber": page, "pageSize": size})
            return body

        return envelope(items)

    @app.post("/api/{resource_name}", dependencies=[Depends(require_token)])
    def create_generic(resource_name: str, payload: Dict[str, Any] = Body(...), session: Session = Depends(get_session)):
        ensure_resource(resource_name)

        if resource_name == "User" and not payload.get("username"):
            return JSONResponse(status_code=400, content={
                "errors": {"Username": ["The Username field is required."]},
                "title": "One or more validation errors occurred.",
                "status": 400,
            })

        record = ResourceRecord(
            resource=resource_name,
            payload={camel_key(k): v for k, v in payload.items() if k.lower() != "password"},
        )
        session.add(record)
        session.commit()
        session.refresh(record)
        logger.info(f"{resource_name} criado: {record.id}")
        return envelope(serialize(record), f"{resource_name} created")

    @app.get("/api/{resource_name}/{item_id}", dependencies=[Depends(require_token)])
    def get_generic(resource_name: str, item_id: int, session: Session = Depends(get_session)):
        return envelope(serialize(load_record(session, resource_name, item_id)))

    @app.put("/api/{resource_name}/{item_id}", dependencies=[Depends(require_token)])
    def update_generic(resource_name: str, item_id: int, payload: Dict[str, Any] = Body(...),
                       session: Session = Depends(get_session)):
        record = load_record(session, resource_name, item_id)
        changes = {k: v for k, v in payload.items() if k not in ("id", "createdAt")}
        return envelope(serialize(save_payload(session, record, changes)), f"{resource_name} updated")

    @app.delete("/api/{resource_name}/{item_id}", dependencies=[Depends(require_token)])
    def delete_generic(resource_name: str, item_id: int, session: Session = Depends(get_session)):
        record = load_record(session, resource_name, item_id)
        session.delete(record)
        session.commit()
        return envelope(None, f"{resource_name} deleted")

    return app


app = create_app()
