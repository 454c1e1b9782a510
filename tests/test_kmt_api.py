from __future__ import annotations

import json

import httpx

from src.models.kmt import Department, LeaveBalance, User
from src.services.kmt_api import map_create_leave_request, map_create_mission, map_create_user


def _ok(data=None):
    return lambda r: httpx.Response(200, json={"data": data, "message": "OK", "success": True})


def _sent(recorder):
    return json.loads(recorder.last.content) if recorder.last.content else None


def test_departments_crud_paths(make_api):
    api, recorder = make_api(_ok([]))

    api.departments.list()
    assert (recorder.last.method, recorder.last.url.path) == ("GET", "/api/Department")

    api.departments.create({"name": "Eng", "nameAr": "هندسة", "description": "d", "descriptionAr": "د"})
    assert (recorder.last.method, recorder.last.url.path) == ("POST", "/api/Department")
    assert _sent(recorder)["nameAr"] == "هندسة"

    api.departments.update(4, {"name": "Eng 2"})
    assert (recorder.last.method, recorder.last.url.path) == ("PUT", "/api/Department/4")

    api.departments.delete(4)
    assert (recorder.last.method, recorder.last.url.path) == ("DELETE", "/api/Department/4")


def test_list_returns_typed_records(make_api):
    api, _ = make_api(_ok([{"id": 1, "name": "RH", "userCount": 3}]))

    departments = api.departments.list()

    assert isinstance(departments[0], Department)
    assert departments[0].user_count == 3


def test_list_users_maps_filters_and_omits_empty(make_api):
    api, recorder = make_api(_ok([]))

    api.list_users(search="ana", department="d1", status="", page_number=2, page_size=20)

    assert dict(recorder.last.url.params) == {
        "search": "ana",
        "departmentId": "d1",
        "pageNumber": "2",
        "pageSize": "20",
    }


def test_employees_is_an_alias_of_users(make_api):
    api, recorder = make_api(_ok({"id": 9, "email": "e@kmt.com"}))

    employee = api.employees.get(9)

    assert recorder.last.url.path == "/api/User/9"
    assert isinstance(employee, User)


def test_create_user_sends_kmt_dto(make_api):
    api, recorder = make_api(_ok({"id": 1}))

    api.users.create({"username": "ana", "email": "ana@kmt.com", "password": "x", "extra": "ignored"})

    sent = _sent(recorder)
    assert set(sent) == {
        "username", "email", "phoneNumber", "password", "titleId", "departmentId",
        "hireDate", "priorWorkExperienceMonths", "gender",
    }
    assert sent["titleId"] is None
    assert sent["priorWorkExperienceMonths"] == 0
    assert sent["gender"] == 1


def test_map_create_user_keeps_given_values():
    dto = map_create_user({"username": "u", "hireDate": "2024-01-01", "gender": 2, "departmentId": "d9"})
    assert dto["hireDate"] == "2024-01-01"
    assert dto["gender"] == 2
    assert dto["departmentId"] == "d9"


def test_map_create_mission_uses_pascal_case_and_optional_end_time():
    form = {
        "description": "Visita",
        "descriptionAr": "زيارة",
        "missionDate": "2025-05-01",
        "startTime": "09:00",
        "location": "Cairo",
    }
    dto = map_create_mission(form)
    assert dto == {
        "Description": "Visita",
        "DescriptionAr": "زيارة",
        "MissionDate": "2025-05-01",
        "StartTime": "09:00",
        "Location": "Cairo",
    }

    assert map_create_mission({**form, "endTime": "17:00"})["EndTime"] == "17:00"


def test_map_create_leave_request_defaults():
    dto = map_create_leave_request({"leaveTypeId": 2, "startDate": "2025-01-01", "endDate": "2025-01-03"})
    assert dto == {
        "leaveTypeId": 2,
        "startDate": "2025-01-01",
        "endDate": "2025-01-03",
        "isHourlyLeave": False,
        "startTime": None,
    }
    assert map_create_leave_request({"startTime": "10:00"})["startTime"] == {"ticks": 0}


def test_action_endpoints(make_api):
    api, recorder = make_api(_ok())

    api.approve_leave_request(5, "ok")
    assert (recorder.last.method, recorder.last.url.path) == ("PATCH", "/api/LeaveRequest/5/Approve")
    assert _sent(recorder) == {"comments": "ok"}

    api.reject_leave_request(5)
    assert recorder.last.url.path == "/api/LeaveRequest/5/Reject"

    api.assign_mission(3, ["u1", "u2"])
    assert (recorder.last.method, recorder.last.url.path) == ("POST", "/api/Mission/3/assignments")
    assert _sent(recorder) == {"userIds": ["u1", "u2"]}

    api.assign_user_roles("u1", [1, 2])
    assert (recorder.last.method, recorder.last.url.path) == ("PUT", "/api/User/u1/Roles")

    api.change_password("u1", "old", "new")
    assert recorder.last.url.path == "/api/User/u1/Password"
    assert _sent(recorder) == {"currentPassword": "old", "newPassword": "new"}

    api.assign_permission(7, "canViewReports")
    assert (recorder.last.method, recorder.last.url.path) == ("PUT", "/api/Role/7/permissions/canViewReports")

    api.remove_permission(7, "canViewReports")
    assert recorder.last.method == "DELETE"

    api.approve_attendance(11)
    assert (recorder.last.method, recorder.last.url.path) == ("PATCH", "/api/Attendance/11/approve")
    assert recorder.last.content == b""

    api.update_payroll_amount(2, 1500.5)
    assert _sent(recorder) == {"amount": 1500.5}

    api.approve_overtime(4, "feriado")
    assert (recorder.last.method, recorder.last.url.path) == ("PATCH", "/api/Overtime/4/approve")
    assert _sent(recorder) == {"comments": "feriado"}

    api.reject_overtime(4)
    assert recorder.last.url.path == "/api/Overtime/4/reject"
    assert _sent(recorder) == {"comments": None}


def test_leave_balance_query(make_api):
    api, recorder = make_api(_ok([{"id": 1, "userId": "u1", "year": 2025, "allocatedDays": 21}]))

    balances = api.get_leave_balance("u1", 2025)

    assert recorder.last.url.path == "/api/LeaveBalance/user/u1"
    assert dict(recorder.last.url.params) == {"year": "2025"}
    assert isinstance(balances[0], LeaveBalance)
    assert balances[0].allocated_days == 21
