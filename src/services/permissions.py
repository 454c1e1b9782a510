from enum import Enum
from typing import FrozenSet, Iterable, Optional
from src.models.usuario import UserProfile, UserRole, normalize_role

class Capability(str, Enum):
    VIEW_DASHBOARD = "canViewDashboard"
    VIEW_ATTENDANCE = "canViewAttendance"
    VIEW_LEAVE = "canViewLeave"
    VIEW_MISSIONS = "canViewMissions"

    MANAGE_EMPLOYEES = "canManageEmployees"
    MANAGE_POLICIES = "canManagePolicies"
    VIEW_ANALYTICS = "canViewAnalytics"
    APPROVE_ALL = "canApproveAll"
    ASSIGN_MISSIONS = "canAssignMissions"
    MANAGE_DEPARTMENTS = "canManageDepartments"
    MANAGE_ROLES = "canManageRoles"
    VIEW_REPORTS = "canViewReports"
    DELETE_RECORDS = "canDeleteRecords"

    APPROVE_LEAVE = "canApproveLeave"
    MANAGE_ATTENDANCE = "canManageAttendance"

    APPROVE_TEAM_ATTENDANCE = "canApproveTeamAttendance"
    APPROVE_TEAM_LEAVE = "canApproveTeamLeave"
    VIEW_TEAM_DATA = "canViewTeamData"
    MANAGE_TEAM_MEMBERS = "canManageTeamMembers"

# Conjunto somente-leitura que todo papel recebe
BASE_CAPABILITIES: FrozenSet[Capability] = frozenset({
    Capability.VIEW_DASHBOARD,
    Capability.VIEW_ATTENDANCE,
    Capability.VIEW_LEAVE,
    Capability.VIEW_MISSIONS,
})

ROLE_CAPABILITIES = {
    UserRole.GENERAL_MANAGER: BASE_CAPABILITIES | {
        Capability.MANAGE_EMPLOYEES,
        Capability.MANAGE_POLICIES,
        Capability.VIEW_ANALYTICS,
        Capability.APPROVE_ALL,
        Capability.ASSIGN_MISSIONS,
        Capability.MANAGE_DEPARTMENTS,
        Capability.MANAGE_ROLES,
        Capability.VIEW_REPORTS,
        Capability.DELETE_RECORDS,
    },
    UserRole.HR_MANAGER: BASE_CAPABILITIES | {
        Capability.MANAGE_EMPLOYEES,
        Capability.MANAGE_POLICIES,
        Capability.VIEW_ANALYTICS,
        Capability.APPROVE_LEAVE,
        Capability.MANAGE_ATTENDANCE,
        Capability.MANAGE_DEPARTMENTS,
        Capability.VIEW_REPORTS,
    },
    UserRole.TEAM_LEADER: BASE_CAPABILITIES | {
        Capability.APPROVE_TEAM_ATTENDANCE,
        Capability.APPROVE_TEAM_LEAVE,
        Capability.VIEW_TEAM_DATA,
        Capability.MANAGE_TEAM_MEMBERS,
    },
    UserRole.EMPLOYEE: BASE_CAPABILITIES,
}

# Compatibilidade: rótulo legado -> papéis que ele satisfaz
LEGACY_ROLE_GRANTS = {
    "Super Admin": {"general_manager", "hr_manager", "team_leader"},
    "Admin": {"hr_manager", "team_leader"},
    "HR Manager": {"hr_manager"},
    "Team Leader": {"team_leader"},
    "Manager": {"hr_manager"},
    "Employee": set(),
}

def _role_value(role) -> str:
    return role.value if isinstance(role, UserRole) else role

def has_role(user: Optional[UserProfile], required_roles: Iterable) -> bool:
    """
    Verdadeiro se o usuário existe e o papel dele está entre os exigidos.
    Sem usuário é sempre falso, independente dos papéis.
    """
    if user is None:
        return False

    required = {_role_value(r) for r in required_roles}
    if user.role in required:
        return True

    granted = LEGACY_ROLE_GRANTS.get(user.role, set())
    return bool(granted & required)

def get_permissions(user: Optional[UserProfile]) -> FrozenSet[Capability]:
    """Capacidades derivadas do papel. Papel desconhecido recebe só o conjunto base."""
    if user is None:
        return frozenset()
    return frozenset(ROLE_CAPABILITIES.get(normalize_role(user.role), BASE_CAPABILITIES))
