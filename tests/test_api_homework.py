"""Tests for homework tracking endpoints."""

from tests.conftest import API, auth_headers, student_headers


def create_task(client, headers, **overrides):
    payload = {"class_level": "7", "subject": "Math", "task_name": "Exercise 4.2", "assigned_on": "2026-04-01"}
    payload.update(overrides)
    return client.post(f"{API}/homework", json=payload, headers=headers)


def test_create_homework(client, admin_headers):
    response = create_task(client, admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["subject"] == "math"
    assert data["status"] == "Assigned"
    assert data["non_submitters"] == []


def test_create_rejects_subject_outside_class(client, admin_headers):
    response = create_task(client, admin_headers, subject="pbi_a")
    assert response.status_code == 422


def test_create_requires_edit_on_subject(client, make_staff):
    teacher = make_staff("teacher1", assignments={"7": ["math"]})
    headers = auth_headers(teacher)

    assert create_task(client, headers).status_code == 200
    assert create_task(client, headers, subject="sci").status_code == 403
    assert create_task(client, headers, class_level="8").status_code == 403


def test_update_status_and_non_submitters(client, admin_headers):
    task_id = create_task(client, admin_headers).json()["id"]

    response = client.patch(
        f"{API}/homework/{task_id}",
        json={"status": "Checking", "non_submitters": ["3", " 5", "3", ""]},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Checking"
    assert data["non_submitters"] == ["3", "5"]

    completed = client.patch(f"{API}/homework/{task_id}", json={"status": "Completed"}, headers=admin_headers)
    assert completed.json()["status"] == "Completed"
    assert completed.json()["non_submitters"] == ["3", "5"]


def test_list_homework_with_filters(client, admin_headers, make_student):
    first = create_task(client, admin_headers, assigned_on="2026-04-01").json()
    second = create_task(client, admin_headers, subject="sci", task_name="Lab record", assigned_on="2026-04-03").json()
    create_task(client, admin_headers, class_level="8")
    client.patch(f"{API}/homework/{first['id']}", json={"status": "Completed"}, headers=admin_headers)

    everything = client.get(f"{API}/homework", params={"class_level": "7"}, headers=admin_headers).json()
    assert [t["id"] for t in everything] == [second["id"], first["id"]]

    math_only = client.get(f"{API}/homework", params={"class_level": "7", "subject": "MATH"}, headers=admin_headers)
    assert [t["id"] for t in math_only.json()] == [first["id"]]

    open_tasks = client.get(f"{API}/homework", params={"class_level": "7", "status": "Assigned"}, headers=admin_headers)
    assert [t["id"] for t in open_tasks.json()] == [second["id"]]

    student = make_student("1", "Asha", class_level="7")
    assert client.get(f"{API}/homework", params={"class_level": "7"}, headers=student_headers(student)).status_code == 200


def test_teacher_cannot_change_other_subjects(client, admin_headers, make_staff):
    task_id = create_task(client, admin_headers, subject="sci").json()["id"]
    teacher = make_staff("teacher1", assignments={"7": ["math"]})

    response = client.patch(
        f"{API}/homework/{task_id}",
        json={"status": "Completed"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403
    assert client.delete(f"{API}/homework/{task_id}", headers=auth_headers(teacher)).status_code == 403


def test_delete_homework(client, admin_headers):
    task_id = create_task(client, admin_headers).json()["id"]

    assert client.delete(f"{API}/homework/{task_id}", headers=admin_headers).status_code == 200
    assert client.patch(f"{API}/homework/{task_id}", json={}, headers=admin_headers).status_code == 404
