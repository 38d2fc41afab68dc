"""Per-user client state kept consistent with the remote store.

A :class:`Workspace` caches one user's attendance records, roster, day notes
and leads. After each mutation the caches are reconciled with the store:

* commit or edit of a session refetches all attendance records;
* deleting a session or folder filters the cache locally with the same
  predicate as the remote delete, without a refetch;
* student and lead writes patch the cache with the row the store echoed;
* deleting a student removes their attendance remotely first, then the
  student row, then both locally.

Remote failures propagate unchanged. Only the optimistic deletes, and the
partial-edit cleanup below, touch the cache without a refetch.

Edit mode is not kept here: every save names the session it replaces.
A workspace is shared by all clients of one user, so it holds only data
that any of them may see. There are no locks or version tokens: two
editors of the same session race at the store and the last write wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..assistant.service import AssistantService
from ..attendance.grouping import (
    DaySummary,
    DepartmentStats,
    SessionBreakdown,
    day_summary,
    department_breakdown,
    filter_students,
    group_by_folder,
    group_by_session,
    recent_sessions,
    session_breakdown,
    session_records,
    student_attendance_percentages,
)
from ..attendance.model import AttendanceRecord, SessionDraft, SessionKey, SessionMetadata
from ..attendance.repository import AttendanceRepository
from ..attendance.service import SessionService
from ..attendance.store import RecordStore
from ..auth.session_state import AuthSession
from ..common.datetime_utils import require_iso_date, today_iso
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_RECENT_SESSIONS
from ..core.enums import AuthState
from ..core.exceptions import NotFoundError, PartialSessionWriteError, ValidationError
from ..day_notes.model import DayNote
from ..day_notes.repository import DayNoteRepository
from ..leads.model import Lead
from ..leads.repository import LeadRepository
from ..leads.service import LeadService
from ..students.csv_import import ImportResult, drop_known_roll_numbers, parse_students_csv
from ..students.model import Student
from ..students.repository import StudentRepository
from ..students.service import StudentService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dashboard:
    summary: DaySummary
    departments: list[DepartmentStats]
    recent: list[AttendanceRecord]


@dataclass(frozen=True)
class EditTarget:
    """The session an editor was opened on.

    The client sends it back with the save, so one editor never replaces a
    session another editor (or a new-session form) is working on.
    """

    key: SessionKey
    session_id: Optional[str] = None


class Workspace:
    def __init__(
        self,
        auth: AuthSession,
        *,
        attendance: AttendanceRepository,
        students: StudentRepository,
        day_notes: DayNoteRepository,
        leads: LeadRepository,
        sessions: SessionService,
        assistant: Optional[AssistantService] = None,
        departments: Optional[Sequence[str]] = None,
        recent_limit: int = DEFAULT_RECENT_SESSIONS,
    ):
        self._auth = auth
        self._attendance = attendance
        self._students_repo = students
        self._day_notes_repo = day_notes
        self._leads_repo = leads
        self._sessions = sessions
        self._student_service = StudentService()
        self._lead_service = LeadService()
        self._assistant = assistant
        self._departments = list(departments) if departments else None
        self._recent_limit = recent_limit

        self._records = RecordStore()
        self._students: list[Student] = []
        self._day_notes: list[DayNote] = []
        self._leads: list[Lead] = []

        auth.subscribe(self._on_auth_change)

    # ---- auth gate ----

    @property
    def auth(self) -> AuthSession:
        return self._auth

    def _on_auth_change(self, previous: AuthState, current: AuthState) -> None:
        if current != AuthState.AUTHENTICATED:
            self.clear()

    def clear(self) -> None:
        self._records.clear()
        self._students = []
        self._day_notes = []
        self._leads = []

    # ---- fetch ----

    def refresh(self) -> None:
        """Load every collection; without a valid session the caches stay empty."""

        if not self._auth.can_fetch:
            self.clear()
            return
        user_id = self._auth.require_user()
        self._students = list(self._students_repo.get_all(user_id))
        self._records.replace_all(self._attendance.get_all(user_id))
        self._day_notes = list(self._day_notes_repo.get_all(user_id))
        self._leads = list(self._leads_repo.get_all(user_id))

    def refresh_records(self) -> None:
        if not self._auth.can_fetch:
            self._records.clear()
            return
        self._records.replace_all(self._attendance.get_all(self._auth.require_user()))

    @property
    def records(self) -> Sequence[AttendanceRecord]:
        return self._records.snapshot() if self._auth.can_fetch else ()

    @property
    def students(self) -> Sequence[Student]:
        return tuple(self._students) if self._auth.can_fetch else ()

    @property
    def day_notes(self) -> Sequence[DayNote]:
        return tuple(self._day_notes) if self._auth.can_fetch else ()

    @property
    def leads(self) -> Sequence[Lead]:
        return tuple(self._leads) if self._auth.can_fetch else ()

    # ---- browsing ----

    def folders(self) -> dict[str, list[AttendanceRecord]]:
        """Folders newest date first; the unknown-date folder sorts last."""

        folders = group_by_folder(self.records)
        dated = sorted((k for k in folders if k[:1].isdigit()), reverse=True)
        rest = [k for k in folders if not k[:1].isdigit()]
        return {k: folders[k] for k in [*dated, *rest]}

    def sessions(self, folder: str) -> dict[str, list[AttendanceRecord]]:
        return group_by_session(self.folders().get(folder, []))

    def session_detail(self, key: SessionKey) -> SessionBreakdown:
        records = session_records(self.records, key)
        if not records:
            raise NotFoundError("Session not found")
        return session_breakdown(records)

    def dashboard(self, date: Optional[str] = None) -> Dashboard:
        date = require_iso_date(date) if date else today_iso()
        records = self.records
        return Dashboard(
            summary=day_summary(self.students, records, date),
            departments=department_breakdown(self.students, records, date, departments=self._departments),
            recent=recent_sessions(records, self._recent_limit),
        )

    # ---- session edit protocol ----

    def begin_edit(self, key: SessionKey) -> tuple[EditTarget, SessionDraft]:
        """Open a session for editing: its target and a draft over the whole current roster.

        Nothing is remembered here; the caller hands the target back to
        :meth:`save_session`.
        """

        self._auth.require_user()
        if not key.date or not key.timestamp:
            raise ValidationError("Sessions without a date or label cannot be edited")
        records = session_records(self.records, key)
        if not records:
            raise NotFoundError("Session not found")

        first = records[0]
        metadata = SessionMetadata.from_records(records)
        target = EditTarget(key=key, session_id=self._session_id_of(key))
        draft = SessionDraft(
            subject=first.subject,
            class_name=first.class_name,
            date=key.date,
            periods=metadata.periods,
            marks={r.student_id: r.status for r in records},
            remarks={r.student_id: r.remark for r in records if r.remark},
            global_note=metadata.global_note,
        )
        return target, draft

    def _session_id_of(self, key: SessionKey) -> Optional[str]:
        return next((r.session_id for r in self.records if key.matches(r) and r.session_id), None)

    def save_session(
        self,
        draft: SessionDraft,
        *,
        edit: Optional[EditTarget] = None,
        now: Optional[datetime] = None,
    ) -> SessionKey:
        """Commit a new session, or replace exactly the session named by ``edit``.

        Records are refetched only after both remote writes succeed. When the
        insert fails after the delete, the session is dropped from the cache
        and the error propagates; saving again with the same target re-runs
        the protocol.
        """

        user_id = self._auth.require_user()
        students = self.students

        if edit is None:
            key = self._sessions.commit(user_id=user_id, draft=draft, students=students, now=now)
            self.refresh_records()
            return key

        try:
            key = self._sessions.edit(
                user_id=user_id,
                key=edit.key,
                draft=draft,
                students=students,
                session_id=edit.session_id or self._session_id_of(edit.key),
            )
        except PartialSessionWriteError:
            removed = self._records.remove_where(edit.key.matches)
            logger.warning("Dropped %d cached records of half-written session %s", removed, edit.key)
            raise

        self.refresh_records()
        return key

    def delete_session(self, key: SessionKey) -> int:
        user_id = self._auth.require_user()
        self._attendance.delete_session(date=key.date, timestamp=key.timestamp, user_id=user_id)
        return self._records.remove_where(key.matches)

    def delete_folder(self, date: Optional[str]) -> int:
        user_id = self._auth.require_user()
        self._attendance.delete_folder(date=date, user_id=user_id)
        return self._records.remove_where(lambda r: r.date == date)

    # ---- roster ----

    def student_percentages(self, term: str = "") -> list[tuple[Student, int]]:
        percentages = student_attendance_percentages(self.students, self.records)
        return [(s, percentages[s.id]) for s in filter_students(self.students, term)]

    def _student_index(self, student_id: int) -> int:
        for i, s in enumerate(self._students):
            if s.id == student_id:
                return i
        raise NotFoundError("Student not found")

    def add_student(self, **fields) -> Student:
        user_id = self._auth.require_user()
        new = self._student_service.new_student(roster=self._students, **fields)
        created = self._students_repo.create(new, user_id=user_id)
        self._students.append(created)
        return created

    def update_student(self, student_id: int, patch: dict) -> Student:
        user_id = self._auth.require_user()
        index = self._student_index(student_id)
        clean = self._student_service.clean_patch(roster=self._students, student_id=student_id, patch=patch)
        echoed = self._students_repo.update(student_id, clean, user_id=user_id)
        self._students[index] = echoed
        return echoed

    def delete_student(self, student_id: int) -> None:
        user_id = self._auth.require_user()
        self._student_index(student_id)
        self._attendance.delete_by_student(student_id=student_id, user_id=user_id)
        self._students_repo.delete(student_id, user_id=user_id)
        self._students = [s for s in self._students if s.id != student_id]
        self._records.remove_where(lambda r: r.student_id == student_id)

    def import_students(self, csv_text: str, *, default_department: Optional[str] = None) -> ImportResult:
        user_id = self._auth.require_user()
        kwargs = {"default_department": default_department} if default_department else {}
        parsed = parse_students_csv(csv_text, **kwargs)
        fresh = drop_known_roll_numbers(parsed.students, {s.roll_no for s in self._students})
        created: list[Student] = []
        if fresh.students:
            created = list(self._students_repo.create_batch(fresh.students, user_id=user_id))
            self._students.extend(created)
        logger.info("Imported %d students (%d skipped)", len(created), len(parsed.skipped) + len(fresh.skipped))
        return ImportResult(students=fresh.students, skipped=[*parsed.skipped, *fresh.skipped])

    # ---- day notes ----

    def add_day_note(self, *, date: str, reason: str) -> DayNote:
        user_id = self._auth.require_user()
        note = self._day_notes_repo.create(
            date=require_iso_date(date),
            reason=require_non_empty(reason, "Reason"),
            user_id=user_id,
        )
        self._day_notes = sorted([note, *self._day_notes], key=lambda n: n.date, reverse=True)
        return note

    def delete_day_note(self, note_id: int) -> None:
        user_id = self._auth.require_user()
        if not self._day_notes_repo.delete(note_id, user_id=user_id):
            raise NotFoundError("Day note not found")
        self._day_notes = [n for n in self._day_notes if n.id != note_id]

    # ---- leads ----

    def _lead(self, lead_id: int) -> Lead:
        for lead in self._leads:
            if lead.id == lead_id:
                return lead
        raise NotFoundError("Lead not found")

    def _replace_lead(self, lead: Lead) -> None:
        self._leads = [lead if x.id == lead.id else x for x in self._leads]

    def add_lead(self, **fields) -> Lead:
        user_id = self._auth.require_user()
        created = self._leads_repo.create(self._lead_service.new_lead(**fields), user_id=user_id)
        self._leads.insert(0, created)
        return created

    def update_lead(self, lead_id: int, patch: dict) -> Lead:
        user_id = self._auth.require_user()
        self._lead(lead_id)
        echoed = self._leads_repo.update(lead_id, self._lead_service.clean_patch(patch), user_id=user_id)
        self._replace_lead(echoed)
        return echoed

    def log_lead_note(self, lead_id: int, note: str) -> Lead:
        user_id = self._auth.require_user()
        lead = self._lead(lead_id)
        notes = self._lead_service.notes_with(lead, note)
        echoed = self._leads_repo.update(lead_id, {"notes": notes}, user_id=user_id)
        self._replace_lead(echoed)
        return echoed

    def delete_lead(self, lead_id: int) -> None:
        user_id = self._auth.require_user()
        self._lead(lead_id)
        self._leads_repo.delete(lead_id, user_id=user_id)
        self._leads = [x for x in self._leads if x.id != lead_id]

    # ---- assistant ----

    def _require_assistant(self) -> AssistantService:
        if self._assistant is None:
            raise ValidationError("Assistant is not configured")
        return self._assistant

    def lead_followup(self, lead_id: int) -> str:
        self._auth.require_user()
        return self._require_assistant().lead_followup(self._lead(lead_id))

    def ask(self, query: str, *, current_date: Optional[str] = None) -> str:
        self._auth.require_user()
        return self._require_assistant().ask(
            query,
            students=self.students,
            records=self.records,
            current_date=current_date or today_iso(),
        )

    def attendance_summary(self) -> str:
        self._auth.require_user()
        return self._require_assistant().summarize_attendance(students=self.students, records=self.records)
