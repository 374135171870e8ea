"""Tests for staff management endpoints."""

from edurank.models.user import Role
from tests.conftest import API, auth_headers


def test_create_subject_teacher(client, admin_headers):
    response = client.post(
        f"{API}/staff",
        json={
            "name": "Meena Kumari",
            "username": "meena",
            "password": "teach1",
            "role": "SUBJECT_TEACHER",
            "assigned_class": "7",
            "teaching_assignments": [
                {"class_level": "9", "subjects": ["Math", "sci", "math"]},
                {"class_level": "6", "subjects": ["agri"]},
            ],
        },
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "SUBJECT_TEACHER"
    # Only class incharges keep an assigned class
    assert data["assigned_class"] is None
    assignments = {a["class_level"]: a["subjects"] for a in data["teaching_assignments"]}
    assert assignments == {"9": ["math", "sci"], "6": ["agri"]}

    login = client.post(f"{API}/auth/login", json={"username": "meena", "password": "teach1"})
    assert login.status_code == 200


def test_class_incharge_needs_assigned_class(client, admin_headers):
    response = client.post(
        f"{API}/staff",
        json={"name": "Raj", "username": "raj", "password": "teach1", "role": "CLASS_INCHARGE"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_teaching_assignment_subject_must_exist_in_class(client, admin_headers):
    response = client.post(
        f"{API}/staff",
        json={
            "name": "Raj",
            "username": "raj",
            "password": "teach1",
            "role": "SUBJECT_TEACHER",
            "teaching_assignments": [{"class_level": "6", "subjects": ["pbi_a"]}],
        },
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_student_role_is_not_a_staff_role(client, admin_headers):
    response = client.post(
        f"{API}/staff",
        json={"name": "Raj", "username": "raj", "password": "teach1", "role": "STUDENT"},
        headers=admin_headers,
    )
    assert response.status_code == 422


def test_duplicate_username(client, admin_headers):
    payload = {"name": "Raj", "username": "admin", "password": "teach1", "role": "ADMIN"}

    response = client.post(f"{API}/staff", json=payload, headers=admin_headers)

    assert response.status_code == 422
    assert response.json()["error"]["message"] == "Username already registered"


def test_list_get_and_delete_staff(client, admin_headers, make_staff):
    teacher = make_staff("teacher1")
    make_staff("incharge7", role=Role.CLASS_INCHARGE, assigned_class="7")

    listed = client.get(f"{API}/staff", headers=admin_headers).json()
    assert {s["username"] for s in listed} == {"admin", "teacher1", "incharge7"}

    incharges = client.get(f"{API}/staff", params={"role": "CLASS_INCHARGE"}, headers=admin_headers).json()
    assert [s["username"] for s in incharges] == ["incharge7"]

    fetched = client.get(f"{API}/staff/{teacher.id}", headers=admin_headers)
    assert fetched.json()["username"] == "teacher1"

    deleted = client.delete(f"{API}/staff/{teacher.id}", headers=admin_headers)
    assert deleted.status_code == 200
    assert client.get(f"{API}/staff/{teacher.id}", headers=admin_headers).status_code == 404


def test_admin_cannot_delete_self(client, admin_user, admin_headers):
    response = client.delete(f"{API}/staff/{admin_user.id}", headers=admin_headers)
    assert response.status_code == 422


def test_staff_endpoints_are_admin_only(client, make_staff):
    incharge = make_staff("incharge7", role=Role.CLASS_INCHARGE, assigned_class="7")

    response = client.get(f"{API}/staff", headers=auth_headers(incharge))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "PERMISSION_DENIED"
