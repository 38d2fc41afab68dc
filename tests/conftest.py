from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import pytest

from src.academix.academix.assistant.generator import SamplingConfig
from src.academix.academix.attendance.model import AttendanceRecord, NewAttendanceRow
from src.academix.academix.auth.model import Account
from src.academix.academix.container import wire
from src.academix.academix.core.exceptions import NotFoundError, RemoteStoreError
from src.academix.academix.day_notes.model import DayNote
from src.academix.academix.leads.model import Lead, NewLead
from src.academix.academix.students.model import NewStudent, Student


class _Failing:
    """Records every call; raises RemoteStoreError for operations listed in ``fail_on``."""

    def __init__(self):
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _call(self, op: str) -> None:
        self.calls.append(op)
        if op in self.fail_on:
            raise RemoteStoreError(f"{op} failed", operation=op)


class InMemoryAttendance(_Failing):
    def __init__(self):
        super().__init__()
        self.rows: list[dict] = []
        self._id = 0

    def add_raw(self, user_id: int = 1, **row) -> dict:
        self._id += 1
        stored = {"id": self._id, "user_id": user_id, "session_id": None, "subject": "", "class": "", "remark": None}
        stored.update(row)
        self.rows.append(stored)
        return stored

    def get_all(self, user_id: int) -> Sequence[AttendanceRecord]:
        self._call("get_all")
        return [AttendanceRecord.from_row(r) for r in self.rows if r["user_id"] == user_id]

    def insert_batch(self, rows: Sequence[NewAttendanceRow], *, user_id: int) -> int:
        self._call("insert_batch")
        for r in rows:
            self.add_raw(**r.to_row(user_id))
        return len(rows)

    def delete_session(self, *, date: Optional[str], timestamp: Optional[str], user_id: int) -> int:
        self._call("delete_session")
        keep = [r for r in self.rows if not (r["user_id"] == user_id and r.get("date") == date and r.get("timestamp") == timestamp)]
        removed = len(self.rows) - len(keep)
        self.rows = keep
        return removed

    def delete_folder(self, *, date: Optional[str], user_id: int) -> int:
        self._call("delete_folder")
        keep = [r for r in self.rows if not (r["user_id"] == user_id and r.get("date") == date)]
        removed = len(self.rows) - len(keep)
        self.rows = keep
        return removed

    def delete_by_student(self, *, student_id: int, user_id: int) -> int:
        self._call("delete_by_student")
        keep = [r for r in self.rows if not (r["user_id"] == user_id and r["student_id"] == student_id)]
        removed = len(self.rows) - len(keep)
        self.rows = keep
        return removed


class InMemoryStudents(_Failing):
    def __init__(self):
        super().__init__()
        self.by_user: dict[int, list[Student]] = {}
        self._id = 0

    def seed(self, *students: NewStudent, user_id: int = 1) -> list[Student]:
        return list(self.create_batch(students, user_id=user_id))

    def get_all(self, user_id: int) -> Sequence[Student]:
        self._call("get_all")
        return list(self.by_user.get(user_id, []))

    def create(self, student: NewStudent, *, user_id: int) -> Student:
        return self.create_batch([student], user_id=user_id)[0]

    def create_batch(self, students: Sequence[NewStudent], *, user_id: int) -> Sequence[Student]:
        self._call("create")
        created = []
        for s in students:
            self._id += 1
            created.append(Student.from_row({"id": self._id, **s.to_row(user_id)}))
        self.by_user.setdefault(user_id, []).extend(created)
        return created

    def update(self, student_id: int, patch: dict, *, user_id: int) -> Student:
        self._call("update")
        roster = self.by_user.get(user_id, [])
        for i, s in enumerate(roster):
            if s.id == student_id:
                row = {"id": s.id, "roll_no": s.roll_no, "name": s.name, "department": s.department,
                       "year": s.year, "status": s.status.value}
                row.update(patch)
                roster[i] = Student.from_row(row)
                return roster[i]
        raise NotFoundError("Student not found")

    def delete(self, student_id: int, *, user_id: int) -> bool:
        self._call("delete")
        roster = self.by_user.get(user_id, [])
        self.by_user[user_id] = [s for s in roster if s.id != student_id]
        return len(roster) != len(self.by_user[user_id])


class InMemoryDayNotes(_Failing):
    def __init__(self):
        super().__init__()
        self.by_user: dict[int, list[DayNote]] = {}
        self._id = 0

    def get_all(self, user_id: int) -> Sequence[DayNote]:
        self._call("get_all")
        return sorted(self.by_user.get(user_id, []), key=lambda n: n.date, reverse=True)

    def create(self, *, date: str, reason: str, user_id: int) -> DayNote:
        self._call("create")
        self._id += 1
        note = DayNote(id=self._id, date=date, reason=reason, created_at=datetime(2024, 1, 1))
        self.by_user.setdefault(user_id, []).append(note)
        return note

    def delete(self, note_id: int, *, user_id: int) -> bool:
        self._call("delete")
        notes = self.by_user.get(user_id, [])
        self.by_user[user_id] = [n for n in notes if n.id != note_id]
        return len(notes) != len(self.by_user[user_id])


class InMemoryLeads(_Failing):
    def __init__(self):
        super().__init__()
        self.by_user: dict[int, list[Lead]] = {}
        self._id = 0

    def get_all(self, user_id: int) -> Sequence[Lead]:
        self._call("get_all")
        return list(reversed(self.by_user.get(user_id, [])))

    def create(self, lead: NewLead, *, user_id: int) -> Lead:
        self._call("create")
        self._id += 1
        created = Lead.from_row({"id": self._id, **lead.to_row(user_id)})
        self.by_user.setdefault(user_id, []).append(created)
        return created

    def update(self, lead_id: int, patch: dict, *, user_id: int) -> Lead:
        self._call("update")
        leads = self.by_user.get(user_id, [])
        for i, lead in enumerate(leads):
            if lead.id == lead_id:
                changes = dict(patch)
                if "notes" in changes:
                    changes["notes"] = tuple(changes["notes"])
                if "status" in changes:
                    changes["status"] = type(lead.status)(changes["status"])
                leads[i] = replace(lead, **changes)
                return leads[i]
        raise NotFoundError("Lead not found")

    def delete(self, lead_id: int, *, user_id: int) -> bool:
        self._call("delete")
        leads = self.by_user.get(user_id, [])
        self.by_user[user_id] = [x for x in leads if x.id != lead_id]
        return len(leads) != len(self.by_user[user_id])


class InMemoryAccounts:
    def __init__(self):
        self.accounts: dict[int, Account] = {}
        self._id = 0

    def get_by_id(self, user_id: int) -> Optional[Account]:
        return self.accounts.get(user_id)

    def get_by_email(self, email: str) -> Optional[Account]:
        return next((a for a in self.accounts.values() if a.email == email), None)

    def create(self, *, full_name: str, email: str, password_hash: str) -> int:
        self._id += 1
        self.accounts[self._id] = Account(user_id=self._id, full_name=full_name, email=email, password_hash=password_hash)
        return self._id

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        account = self.accounts.get(user_id)
        if not account:
            return False
        self.accounts[user_id] = replace(
            account, password_hash=password_hash, recovery_token_hash=None, recovery_expires_at=None
        )
        return True

    def set_recovery_token(self, user_id: int, *, token_hash: str, expires_at: datetime) -> bool:
        account = self.accounts.get(user_id)
        if not account:
            return False
        self.accounts[user_id] = replace(account, recovery_token_hash=token_hash, recovery_expires_at=expires_at)
        return True


class FakeGenerator:
    def __init__(self, reply: Optional[str] = "ok", error: Optional[Exception] = None):
        self.reply = reply
        self.error = error
        self.prompts: list[tuple[str, str, Optional[SamplingConfig]]] = []

    def generate(self, *, model: str, prompt: str, sampling: Optional[SamplingConfig] = None) -> Optional[str]:
        self.prompts.append((model, prompt, sampling))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def students_repo() -> InMemoryStudents:
    return InMemoryStudents()


@pytest.fixture
def day_notes_repo() -> InMemoryDayNotes:
    return InMemoryDayNotes()


@pytest.fixture
def leads_repo() -> InMemoryLeads:
    return InMemoryLeads()


@pytest.fixture
def accounts_repo() -> InMemoryAccounts:
    return InMemoryAccounts()


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator(reply="All good.")


@pytest.fixture
def container(accounts_repo, attendance_repo, students_repo, day_notes_repo, leads_repo, generator):
    return wire(
        accounts_repo=accounts_repo,
        attendance_repo=attendance_repo,
        students_repo=students_repo,
        day_notes_repo=day_notes_repo,
        leads_repo=leads_repo,
        generator=generator,
        departments=["CSE", "ECE"],
    )


@pytest.fixture
def roster(students_repo) -> list[Student]:
    return students_repo.seed(
        NewStudent(roll_no="R1", name="Asha", department="CSE"),
        NewStudent(roll_no="R2", name="Bala", department="CSE"),
        NewStudent(roll_no="R3", name="Chitra", department="ECE"),
    )


@pytest.fixture
def workspace(container, roster):
    return container.workspaces.open(1)


@pytest.fixture
def app(container):
    from src.academix.academix.main import create_app

    flask_app = create_app(container)
    flask_app.config.update(TESTING=True)
    return flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture(autouse=True)
def _testing_settings(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
