"""Tests for audit log endpoints."""

from edurank.models.audit import AuditAction
from edurank.services.audit import AuditService
from tests.conftest import API, auth_headers


def test_audit_logs_are_admin_only(client, make_staff):
    teacher = make_staff("teacher1")
    response = client.get(f"{API}/audit-logs", headers=auth_headers(teacher))
    assert response.status_code == 403


def test_actions_are_logged_with_user(client, admin_user, admin_headers):
    client.post(f"{API}/auth/login", json={"username": "admin", "password": "admin123"})
    client.post(
        f"{API}/students",
        json={"roll_no": "1", "name": "Asha", "class_level": "6"},
        headers=admin_headers,
    )

    response = client.get(f"{API}/audit-logs", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    # Newest first
    assert [item["action"] for item in data["items"]] == ["DATA_CREATED", "USER_LOGIN"]
    assert data["items"][0]["user_username"] == "admin"
    assert data["items"][0]["resource_type"] == "student"


def test_filter_and_paginate(client, db, admin_user, admin_headers):
    service = AuditService(db)
    for i in range(5):
        service.log(action=AuditAction.DATA_UPDATED, resource_type="student", resource_id=str(i), user_id=admin_user.id)
    service.log(action=AuditAction.USER_LOGIN, resource_type="user", user_id=admin_user.id)
    db.commit()

    first_page = client.get(
        f"{API}/audit-logs",
        params={"action": "DATA_UPDATED", "page": 1, "page_size": 2},
        headers=admin_headers,
    ).json()
    assert first_page["total"] == 5
    assert first_page["total_pages"] == 3
    assert [item["resource_id"] for item in first_page["items"]] == ["4", "3"]

    last_page = client.get(
        f"{API}/audit-logs",
        params={"action": "DATA_UPDATED", "page": 3, "page_size": 2},
        headers=admin_headers,
    ).json()
    assert [item["resource_id"] for item in last_page["items"]] == ["0"]

    by_type = client.get(f"{API}/audit-logs", params={"resource_type": "user"}, headers=admin_headers).json()
    assert by_type["total"] == 1


def test_page_size_is_bounded(client, admin_headers):
    response = client.get(f"{API}/audit-logs", params={"page_size": 500}, headers=admin_headers)
    assert response.status_code == 422


def test_student_actions_have_no_staff_user(client, admin_headers, make_student):
    make_student("5", "Asha", class_level="8", password="pass1")
    client.post(f"{API}/auth/student-login", json={"class_level": "8", "roll_no": "5", "password": "pass1"})

    response = client.get(f"{API}/audit-logs", params={"resource_type": "student"}, headers=admin_headers)

    item = response.json()["items"][0]
    assert item["action"] == "USER_LOGIN"
    assert item["user_id"] is None
    assert item["user_name"] is None
    assert item["user_username"] is None
