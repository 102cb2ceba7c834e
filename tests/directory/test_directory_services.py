from __future__ import annotations

import pytest

from grandpass.core.exceptions import ValidationError
from grandpass.directory.http_directory_repository import (
    HttpOfficeRepository,
    HttpProfessorRepository,
    HttpServiceRepository,
    HttpUserAccountRepository,
)
from grandpass.directory.service import (
    CatalogService,
    OfficeService,
    ProfessorService,
    ProfileService,
    professor_username,
    temp_password,
)

PROFESSOR_FORM = {
    "first_name": "Ben",
    "middle_name": "Cruz",
    "last_name": "Santos",
    "birth_date": "1980-04-01",
    "phone": "09170000000",
    "email": "ben@example.edu",
    "position": "Instructor",
    "department": "5",
}


@pytest.fixture
def professor_service(backend):
    return ProfessorService(HttpProfessorRepository(backend), HttpUserAccountRepository(backend))


def test_username_and_temp_password():
    assert professor_username("Mary Ann", "Dela Cruz") == "maryann.delacruz"
    password = temp_password()
    assert len(password) == 8
    assert password.isalnum()


def test_office_crud_uses_department_field(backend, fake_session):
    fake_session.on("POST", "/api/offices", {"id": 9})
    fake_session.on("PUT", "/api/offices/9", {"ok": True})
    fake_session.on("DELETE", "/api/offices/9", {})
    service = OfficeService(HttpOfficeRepository(backend))

    service.create("  Registrar ")
    service.rename(9, "Records")
    service.delete(9)

    assert fake_session.calls_to("POST", "/api/offices")[0]["json"] == {"department": "Registrar"}
    assert fake_session.calls_to("PUT", "/api/offices/9")[0]["json"] == {"department": "Records"}
    assert len(fake_session.calls_to("DELETE", "/api/offices/9")) == 1


def test_office_name_is_required(backend, fake_session):
    with pytest.raises(ValidationError, match="Office name is required"):
        OfficeService(HttpOfficeRepository(backend)).create("  ")

    assert fake_session.calls == []


def test_professors_by_department_drops_other_departments(backend, fake_session):
    fake_session.on(
        "GET",
        "/api/professors/department/5",
        [
            {"id": 1, "first_name": "Ben", "last_name": "Santos", "department": 5},
            {"id": 2, "first_name": "Lia", "last_name": "Tan", "department": 7},
            {"id": 3, "name": "Dr. Cruz"},
        ],
    )
    service = ProfessorService(HttpProfessorRepository(backend), HttpUserAccountRepository(backend))

    assert [p.name for p in service.list_professors("5")] == ["Ben Santos", "Dr. Cruz"]


def test_create_professor_then_account(professor_service, fake_session):
    fake_session.on("POST", "/api/professors", {"id": 42})
    fake_session.on("POST", "/api/users", {"id": 100})

    created = professor_service.create(PROFESSOR_FORM)

    professor_body = fake_session.calls_to("POST", "/api/professors")[0]["json"]
    assert professor_body["department"] == 5
    account = fake_session.calls_to("POST", "/api/users")[0]["json"]
    assert account["username"] == "ben.santos"
    assert account["prof_id"] == 42
    assert account["dept_id"] == 5
    assert account["password"] == created.temp_password
    assert (created.professor_id, created.username, created.account_error) == (42, "ben.santos", None)


def test_account_failure_keeps_professor(professor_service, fake_session, make_response):
    fake_session.on("POST", "/api/professors", {"created": {"id": 43}})
    fake_session.on("POST", "/api/users", make_response(409, {"message": "Username taken"}))

    created = professor_service.create(PROFESSOR_FORM)

    assert created.professor_id == 43
    assert created.temp_password is None
    assert created.account_error == "Username taken"


def test_professor_fields_are_all_required(professor_service, fake_session):
    with pytest.raises(ValidationError, match="All fields are required"):
        professor_service.create({**PROFESSOR_FORM, "position": ""})
    with pytest.raises(ValidationError, match="valid department"):
        professor_service.create({**PROFESSOR_FORM, "department": "Registrar"})

    assert fake_session.calls == []


def test_profile_save_builds_nested_body(backend, fake_session):
    fake_session.on("PUT", "/api/professor-users/by-professor/42", {"ok": True})
    service = ProfileService(HttpProfessorRepository(backend))

    service.save(42, {"email": "ben@example.com", "phone": "0917", "prof_email": "ben@example.edu"})

    body = fake_session.calls_to("PUT", "/api/professor-users/by-professor/42")[0]["json"]
    assert body == {
        "user": {"email": "ben@example.com", "phone": "0917"},
        "professor": {"email": "ben@example.edu"},
    }


def test_profile_save_errors(backend, fake_session, make_response):
    fake_session.on("PUT", "/api/professor-users/by-professor/42", make_response(400, {"message": "Email in use"}))
    service = ProfileService(HttpProfessorRepository(backend))

    with pytest.raises(ValidationError, match="Nothing to update"):
        service.save(42, {})
    with pytest.raises(ValidationError, match="Email in use"):
        service.save(42, {"email": "x@example.com"})
    with pytest.raises(ValidationError, match="No professor"):
        service.load(None)


def test_services_catalog(backend, fake_session):
    fake_session.on("GET", "/api/services", [{"id": 1, "srvc_name": "Transcript", "dept_id": 5}])
    fake_session.on("POST", "/api/services", {"id": 2})
    fake_session.on("PUT", "/api/services/1", {"ok": True})
    service = CatalogService(HttpServiceRepository(backend))

    assert [s.name for s in service.list_services()] == ["Transcript"]
    service.create("Enrollment", "5")
    service.update(1, "Transcript of Records", 5, "Printed copy")

    assert fake_session.calls_to("POST", "/api/services")[0]["json"] == {"srvc_name": "Enrollment", "dept_id": 5}
    assert fake_session.calls_to("PUT", "/api/services/1")[0]["json"] == {
        "srvc_name": "Transcript of Records",
        "dept_id": 5,
        "description": "Printed copy",
    }


def test_service_needs_office(backend):
    with pytest.raises(ValidationError, match="choose an office"):
        CatalogService(HttpServiceRepository(backend)).create("Enrollment", "")


def test_department_professors_require_department(professor_service, fake_session):
    with pytest.raises(ValidationError, match="No department"):
        professor_service.department_professors(None)

    assert fake_session.calls == []
