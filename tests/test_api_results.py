"""Tests for result sheet, import and export endpoints."""

from io import BytesIO

from openpyxl import Workbook, load_workbook

from edurank.models.audit import AuditAction, AuditLog
from edurank.models.student import Student
from edurank.models.user import Role
from tests.conftest import API, auth_headers, student_headers


def seed_class_six(make_student):
    return [
        make_student("1", "Asha", marks={"final_hindi": 80, "final_math": 40}),
        make_student("2", "Ravi", marks={"final_hindi": 50, "final_math": 90}),
        make_student("3", "Kiran", marks={"final_hindi": 90, "final_math": 30}),
        make_student("4", "Meena", marks={"final_hindi": 10}),
        make_student("9", "Other", class_level="7", marks={"final_hindi": 100}),
    ]


def test_ranked_results(client, admin_headers, make_student):
    seed_class_six(make_student)

    response = client.get(f"{API}/results", params={"class_level": "6", "exam_type": "Final"}, headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["class_level"] == "6"
    results = data["results"]
    assert [r["name"] for r in results] == ["Ravi", "Asha", "Kiran", "Meena"]
    assert [r["total"] for r in results] == [140, 120, 120, 10]
    assert [r["rank"] for r in results] == [1, 2, 2, 4]
    assert results[0]["max_total"] == 700
    assert results[0]["percentage"] == 20.0
    assert results[0]["status"] == "Fail"


def test_results_sorted_by_subject(client, admin_headers, make_student):
    seed_class_six(make_student)

    response = client.get(
        f"{API}/results",
        params={"class_level": "6", "exam_type": "Final", "sort_key": "hindi"},
        headers=admin_headers,
    )

    results = response.json()["results"]
    assert [r["name"] for r in results] == ["Kiran", "Asha", "Ravi", "Meena"]
    assert [r["rank"] for r in results] == [1, 1, 3, 4]


def test_search_keeps_class_ranks(client, admin_headers, make_student):
    seed_class_six(make_student)

    response = client.get(
        f"{API}/results",
        params={"class_level": "6", "exam_type": "Final", "search": "kir"},
        headers=admin_headers,
    )

    results = response.json()["results"]
    assert [(r["name"], r["rank"]) for r in results] == [("Kiran", 2)]


def test_student_sees_only_own_row(client, make_student):
    students = seed_class_six(make_student)
    meena = students[3]

    response = client.get(
        f"{API}/results",
        params={"class_level": "6", "exam_type": "Final"},
        headers=student_headers(meena),
    )
    results = response.json()["results"]
    assert len(results) == 1
    assert results[0]["name"] == "Meena"
    assert results[0]["rank"] == 4

    other_class = client.get(
        f"{API}/results",
        params={"class_level": "7", "exam_type": "Final"},
        headers=student_headers(meena),
    )
    assert other_class.status_code == 403


def test_results_require_class_access(client, make_staff):
    teacher = make_staff("teacher1", assignments={"9": ["math"]})

    response = client.get(
        f"{API}/results",
        params={"class_level": "6", "exam_type": "Final"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403


def test_results_reject_unknown_exam_type(client, admin_headers):
    response = client.get(f"{API}/results", params={"class_level": "6", "exam_type": "Weekly"}, headers=admin_headers)
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_export_csv(client, admin_headers, make_student):
    seed_class_six(make_student)

    response = client.get(
        f"{API}/results/export",
        params={"class_level": "6", "exam_type": "Final"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "Class_6_Results_" in response.headers["content-disposition"]
    lines = response.text.split("\n")
    assert lines[0].startswith("Roll No,Name,Pbi,Hindi")
    assert lines[1] == '2,"Ravi",0,50,0,90,0,0,0,0,0,140,20%,1'
    assert len(lines) == 5


def test_export_of_empty_class(client, admin_headers):
    response = client.get(
        f"{API}/results/export",
        params={"class_level": "10", "exam_type": "Final"},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "No data to export"


def test_import_csv_creates_and_updates_students(client, db, admin_headers, make_student):
    make_student("1", "Asha", class_level="6", marks={"term_hindi": 60})
    content = "Roll No,Name,Hindi,Math\n1,Asha Rani,70,abc\n2,Ravi,95,50\n"

    response = client.post(
        f"{API}/results/import",
        data={"class_level": "6", "exam_type": "Term"},
        files={"file": ("marks.csv", content.encode(), "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["created"] == 1
    assert data["updated"] == 1
    assert data["errors"] == []

    db.expire_all()
    students = {s.roll_no: s for s in db.query(Student).filter(Student.class_level == "6")}
    assert students["1"].name == "Asha Rani"
    assert students["1"].marks["term_hindi"] == 70
    assert students["1"].marks["term_math"] == 0
    # Imported 95 is held to the Term maximum of 80
    assert students["2"].marks["term_hindi"] == 80

    log = db.query(AuditLog).filter(AuditLog.action == AuditAction.UPLOAD_COMPLETED).one()
    assert log.extra_data["created"] == 1


def test_import_csv_rejects_empty_file(client, admin_headers):
    response = client.post(
        f"{API}/results/import",
        data={"class_level": "6", "exam_type": "Term"},
        files={"file": ("marks.csv", b"Roll No,Name\n", "text/csv")},
        headers=admin_headers,
    )
    assert response.status_code == 422
    assert response.json()["error"]["message"] == "File is empty or missing data"


def test_import_rejects_wrong_extension(client, admin_headers):
    response = client.post(
        f"{API}/results/import",
        data={"class_level": "6", "exam_type": "Term"},
        files={"file": ("marks.txt", b"a,b\n1,2\n", "text/plain")},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "UPLOAD_FAILED"


def test_import_requires_admin_action(client, make_staff):
    teacher = make_staff("teacher1", assignments={"6": ["hindi"]})

    response = client.post(
        f"{API}/results/import",
        data={"class_level": "6", "exam_type": "Term"},
        files={"file": ("marks.csv", b"Roll No,Name\n1,Asha\n", "text/csv")},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403


def test_import_excel(client, db, make_staff):
    incharge = make_staff("incharge9", role=Role.CLASS_INCHARGE, assigned_class="9")
    wb = Workbook()
    ws = wb.active
    ws.append(["Roll", "Student", "Pbi A", "sci"])
    ws.append([1, "Asha", 70, 90])
    ws.append([2, None, 10, 10])
    output = BytesIO()
    wb.save(output)

    response = client.post(
        f"{API}/results/import-excel",
        data={"class_level": "9", "exam_type": "Final"},
        files={
            "file": (
                "marks.xlsx",
                output.getvalue(),
                "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            )
        },
        headers=auth_headers(incharge),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["created"] == 1
    assert data["total_rows"] == 2
    assert data["errors"][0]["row"] == 3

    db.expire_all()
    student = db.query(Student).filter(Student.class_level == "9").one()
    assert student.marks == {"final_pbi_a": 70, "final_sci": 90}


def test_download_template(client, admin_headers):
    response = client.get(f"{API}/results/template", params={"class_level": "6"}, headers=admin_headers)

    assert response.status_code == 200
    ws = load_workbook(BytesIO(response.content)).active
    assert [c.value for c in ws[1]][:4] == ["Roll No", "Name", "Pbi", "Hindi"]


def test_import_csv_reports_rows_without_roll_or_name(client, admin_headers):
    content = "Roll No,Name,Hindi\n1,Asha,40\n2,,50\n,Ravi,30\n3,   ,20\n"

    response = client.post(
        f"{API}/results/import",
        data={"class_level": "6", "exam_type": "Final"},
        files={"file": ("marks.csv", content.encode(), "text/csv")},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_rows"] == 4
    assert data["created"] == 1
    assert [e["row"] for e in data["errors"]] == [3, 4, 5]
    assert data["errors"][0]["error"].startswith("name:")
    assert data["errors"][1]["error"].startswith("roll_no:")

    listing = client.get(f"{API}/students", params={"class_level": "6"}, headers=admin_headers)
    assert listing.status_code == 200
    assert [s["name"] for s in listing.json()["items"]] == ["Asha"]
