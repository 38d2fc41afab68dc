from __future__ import annotations

import pytest


def _signup(client, email="faculty@example.com", password="secret1"):
    return client.post("/auth/signup", json={"full_name": "Faculty", "email": email, "password": password})


@pytest.fixture
def signed_in(client, students_repo):
    resp = _signup(client)
    assert resp.status_code == 201
    return resp.get_json()["user"]["user_id"]


def test_data_endpoints_require_sign_in(client):
    resp = client.get("/api/attendance/folders")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_signup_logout_login(client):
    assert _signup(client).status_code == 201
    assert client.get("/auth/me").status_code == 200

    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401

    bad = client.post("/auth/login", json={"email": "faculty@example.com", "password": "wrong"})
    assert bad.status_code == 401

    good = client.post("/auth/login", json={"email": "faculty@example.com", "password": "secret1"})
    assert good.status_code == 200
    assert client.get("/auth/me").get_json()["email"] == "faculty@example.com"


def test_short_password_is_rejected(client):
    resp = _signup(client, password="123")
    assert resp.status_code == 400
    assert "at least 6" in resp.get_json()["message"]


def test_password_recovery_flow(client):
    _signup(client)
    client.post("/auth/logout")

    token = client.post("/auth/recovery", json={"email": "faculty@example.com"}).get_json()["recovery_token"]
    verified = client.post("/auth/recovery/verify", json={"email": "faculty@example.com", "token": token})
    assert verified.get_json()["state"] == "PASSWORD_RECOVERY"
    # Recovery mode does not allow data access.
    assert client.get("/api/students").status_code == 401

    done = client.post("/auth/password", json={"password": "newpass"})
    assert done.get_json()["state"] == "AUTHENTICATED"
    assert client.get("/api/students").status_code == 200


def test_student_session_and_folder_flow(client, signed_in):
    for name, roll, dept in (("Asha", "R1", "CSE"), ("Bala", "R2", "ECE")):
        resp = client.post("/api/students", json={"name": name, "roll_no": roll, "department": dept})
        assert resp.status_code == 201
    students = client.get("/api/students").get_json()["students"]
    assert [s["attendance_percentage"] for s in students] == [100, 100]

    bala = students[1]["id"]
    saved = client.post(
        "/api/attendance/sessions",
        json={
            "subject": "Maths",
            "class_name": "II-A",
            "date": "2024-01-10",
            "periods": [1, 2],
            "marks": {str(bala): "Absent"},
            "global_note": "Lab day",
        },
    )
    assert saved.status_code == 201
    label = saved.get_json()["timestamp"]
    assert label.startswith("P1,2 - ")

    folders = client.get("/api/attendance/folders").get_json()["folders"]
    assert folders == [{"folder": "2024-01-10", "sessions": 1, "records": 2}]

    detail = client.get("/api/attendance/session", query_string={"folder": "2024-01-10", "session": label})
    body = detail.get_json()["session"]
    assert len(body["present"]) == 1 and len(body["absent"]) == 1
    assert body["metadata"]["global_note"] == "Lab day"

    edit = client.post("/api/attendance/edit", json={"folder": "2024-01-10", "session": label}).get_json()
    assert edit["draft"]["marks"][str(bala)] == "Absent"
    assert edit["editing"]["session"] == label

    updated = client.post(
        "/api/attendance/sessions",
        json={"subject": "Maths", "class_name": "II-A", "marks": {str(bala): "OD"}, "editing": edit["editing"]},
    )
    assert updated.status_code == 200
    assert updated.get_json()["timestamp"] == label

    board = client.get("/api/dashboard", query_string={"date": "2024-01-10"}).get_json()["dashboard"]
    assert board["summary"]["od"] == 1
    assert [d["name"] for d in board["departments"]] == ["CSE", "ECE"]

    deleted = client.delete("/api/attendance/folders/2024-01-10")
    assert deleted.get_json()["removed"] == 2
    assert client.get("/api/attendance/folders").get_json()["folders"] == []


def test_partial_edit_is_reported_as_bad_gateway(client, signed_in, attendance_repo):
    client.post("/api/students", json={"name": "Asha", "roll_no": "R1", "department": "CSE"})
    label = client.post(
        "/api/attendance/sessions",
        json={"subject": "Maths", "class_name": "II-A", "date": "2024-01-10", "periods": [1]},
    ).get_json()["timestamp"]
    session_id = attendance_repo.rows[0]["session_id"]
    client.post("/api/attendance/edit", json={"folder": "2024-01-10", "session": label})
    attendance_repo.fail_on.add("insert_batch")
    editing = {"folder": "2024-01-10", "session": label}

    resp = client.post("/api/attendance/sessions", json={"subject": "Maths", "class_name": "II-A", "editing": editing})

    assert resp.status_code == 502
    assert resp.get_json()["partial"] is True

    attendance_repo.fail_on.clear()
    retry = client.post("/api/attendance/sessions", json={"subject": "Maths", "class_name": "II-A", "editing": editing})
    assert retry.status_code == 200
    assert {r["session_id"] for r in attendance_repo.rows} == {session_id}


def test_unknown_session_is_404(client, signed_in):
    resp = client.get("/api/attendance/session", query_string={"folder": "2024-01-10", "session": "P1 - 09:00"})
    assert resp.status_code == 404


def test_day_notes_and_leads(client, signed_in):
    assert client.post("/api/day-notes", json={"date": "2024-01-26", "reason": "Holiday"}).status_code == 201
    assert client.post("/api/day-notes", json={"date": "26/01/2024", "reason": "Holiday"}).status_code == 400
    notes = client.get("/api/day-notes").get_json()["notes"]
    assert [n["reason"] for n in notes] == ["Holiday"]

    lead = client.post("/api/leads", json={"name": "Kiran", "phone": "999", "course": "Data Science"}).get_json()["lead"]
    client.post(f"/api/leads/{lead['id']}/notes", json={"note": "Called"})
    logged = client.post(f"/api/leads/{lead['id']}/notes", json={"note": "Sent brochure"}).get_json()["lead"]
    assert logged["notes"] == ["Sent brochure", "Called"]

    followup = client.post(f"/api/leads/{lead['id']}/followup").get_json()
    assert followup["message_text"] == "All good."


def test_assistant_ask(client, signed_in, generator):
    resp = client.post("/api/assistant/ask", json={"query": "Who is absent today?"})
    assert resp.get_json()["answer"] == "All good."

    generator.error = RuntimeError("offline")
    resp = client.post("/api/assistant/ask", json={"query": "Who is absent today?"})
    assert resp.get_json()["answer"].startswith("I'm having trouble connecting")


def test_csv_import_endpoint(client, signed_in):
    resp = client.post("/api/students/import", json={"csv": "Asha,R1\nBala,R2,ECE\n", "department": "CSE"})
    body = resp.get_json()
    assert body["imported"] == 2
    assert [s["department"] for s in client.get("/api/students").get_json()["students"]] == ["CSE", "ECE"]


def test_new_session_from_another_tab_does_not_replace_the_one_being_edited(app, client, signed_in):
    client.post("/api/students", json={"name": "Asha", "roll_no": "R1", "department": "CSE"})
    label = client.post(
        "/api/attendance/sessions",
        json={"subject": "Maths", "class_name": "II-A", "date": "2024-01-10", "periods": [1]},
    ).get_json()["timestamp"]
    client.post("/api/attendance/edit", json={"folder": "2024-01-10", "session": label})

    other_tab = app.test_client()
    other_tab.post("/auth/login", json={"email": "faculty@example.com", "password": "secret1"})
    created = other_tab.post(
        "/api/attendance/sessions",
        json={"subject": "Physics", "class_name": "II-A", "date": "2024-01-10", "periods": [4]},
    )
    assert created.status_code == 201
    assert created.get_json()["timestamp"].startswith("P4 - ")

    # The tab that opened the editor also saves new sessions as new ones.
    again = client.post(
        "/api/attendance/sessions",
        json={"subject": "Chemistry", "class_name": "II-A", "date": "2024-01-10", "periods": [6]},
    )
    assert again.status_code == 201

    folders = client.get("/api/attendance/folders").get_json()["folders"]
    assert folders == [{"folder": "2024-01-10", "sessions": 3, "records": 3}]


def test_editing_with_changed_periods_is_rejected(client, signed_in):
    client.post("/api/students", json={"name": "Asha", "roll_no": "R1", "department": "CSE"})
    label = client.post(
        "/api/attendance/sessions",
        json={"subject": "Maths", "class_name": "II-A", "date": "2024-01-10", "periods": [1]},
    ).get_json()["timestamp"]
    editing = client.post("/api/attendance/edit", json={"folder": "2024-01-10", "session": label}).get_json()["editing"]

    resp = client.post(
        "/api/attendance/sessions",
        json={"subject": "Maths", "class_name": "II-A", "periods": [2], "editing": editing},
    )

    assert resp.status_code == 400
    detail = client.get("/api/attendance/session", query_string={"folder": "2024-01-10", "session": label})
    assert detail.status_code == 200


def test_refresh_picks_up_writes_made_elsewhere(client, signed_in, students_repo):
    from src.academix.academix.students.model import NewStudent

    assert client.get("/api/students").get_json()["students"] == []
    students_repo.seed(NewStudent(roll_no="R9", name="Devi", department="CSE"), user_id=signed_in)

    resp = client.get("/api/refresh")

    assert resp.get_json()["students"] == 1
    assert [s["roll_no"] for s in client.get("/api/students").get_json()["students"]] == ["R9"]
