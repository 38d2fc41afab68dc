from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import clock_label, now_local, require_iso_date
from ..common.validators import require_enum, require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import PartialSessionWriteError, RemoteStoreError, ValidationError
from ..students.model import Student
from .model import (
    NewAttendanceRow,
    SessionDraft,
    SessionKey,
    format_session_label,
    join_session_note,
    normalize_periods,
    parse_session_label,
)
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class SessionService:
    """Commit and edit attendance sessions.

    A session is stored as one row per student sharing ``(date, timestamp)``;
    there is no session row to update in place. Editing therefore deletes every
    row of the composite key and inserts the new set under the same label.
    The two writes are not transactional: if the insert fails after the
    delete, the session is left empty and :class:`PartialSessionWriteError`
    is raised so the caller can re-commit.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        *,
        session_id_factory: Optional[Callable[[], str]] = None,
    ):
        self._attendance = attendance
        self._new_session_id = session_id_factory or (lambda: str(uuid.uuid4()))

    def build_rows(
        self,
        draft: SessionDraft,
        students: Sequence[Student],
        *,
        date: str,
        timestamp: str,
        session_id: str,
    ) -> list[NewAttendanceRow]:
        if not students:
            raise ValidationError("No students on the roster to mark")

        roster_ids = {s.id for s in students}
        unknown = sorted(set(draft.marks) - roster_ids)
        if unknown:
            raise ValidationError(f"Unknown students in marks: {unknown}")

        subject = require_non_empty(draft.subject, "Subject")
        class_name = require_non_empty(draft.class_name, "Class")

        rows: list[NewAttendanceRow] = []
        for i, s in enumerate(students):
            status = require_enum(AttendanceStatus, draft.marks.get(s.id, AttendanceStatus.PRESENT), "Status")
            remark = draft.remarks.get(s.id)
            if i == 0:
                remark = join_session_note(draft.global_note, remark)
            rows.append(
                NewAttendanceRow(
                    date=date,
                    timestamp=timestamp,
                    student_id=s.id,
                    status=status,
                    subject=subject,
                    class_name=class_name,
                    remark=(remark or "").strip() or None,
                    session_id=session_id,
                )
            )
        return rows

    def commit(
        self,
        *,
        user_id: int,
        draft: SessionDraft,
        students: Sequence[Student],
        now: datetime | None = None,
    ) -> SessionKey:
        now = now or now_local()
        date = require_iso_date(draft.date or now.date().isoformat())
        label = format_session_label(draft.periods, clock_label(now))

        rows = self.build_rows(draft, students, date=date, timestamp=label, session_id=self._new_session_id())
        self._attendance.insert_batch(rows, user_id=user_id)
        logger.info("Committed session %s %s (%d records)", date, label, len(rows))
        return SessionKey(date, label)

    def edit(
        self,
        *,
        user_id: int,
        key: SessionKey,
        draft: SessionDraft,
        students: Sequence[Student],
        session_id: Optional[str] = None,
    ) -> SessionKey:
        if not key.date or not key.timestamp:
            raise ValidationError("Sessions without a date or label cannot be edited; delete and commit again")
        if draft.date and draft.date != key.date:
            raise ValidationError("An edited session keeps its date; delete it and commit on the new date")
        if draft.periods:
            label_periods, _ = parse_session_label(key.timestamp)
            if normalize_periods(draft.periods) != tuple(sorted(set(label_periods))):
                raise ValidationError("An edited session keeps its periods; delete it and commit with the new periods")

        # Validate before anything is deleted.
        rows = self.build_rows(
            draft,
            students,
            date=key.date,
            timestamp=key.timestamp,
            session_id=session_id or self._new_session_id(),
        )

        self._attendance.delete_session(date=key.date, timestamp=key.timestamp, user_id=user_id)
        try:
            self._attendance.insert_batch(rows, user_id=user_id)
        except RemoteStoreError as exc:
            logger.error("Session %s %s deleted but not re-inserted: %s", key.date, key.timestamp, exc)
            raise PartialSessionWriteError(
                "Session was cleared but the new marks were not saved; commit it again",
                date=key.date,
                timestamp=key.timestamp,
            ) from exc

        logger.info("Edited session %s %s (%d records)", key.date, key.timestamp, len(rows))
        return key
