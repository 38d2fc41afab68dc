from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from ..common.decoding import optional_str, require_field
from ..core.constants import AVAILABLE_PERIODS, SESSION_NOTE_TAG
from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError

_LABEL_RE = re.compile(r"^P(?P<periods>[\d,\s]*?)\s*-\s*(?P<hour>\d{1,2}):(?P<minute>\d{2})")
_NOTE_RE = re.compile(r"^\[" + SESSION_NOTE_TAG + r":\s*(?P<note>[^\]]*)\]\s*(?P<rest>.*)$", re.DOTALL)


@dataclass(frozen=True)
class SessionKey:
    """Composite identity of a session: all records sharing date and timestamp."""

    date: Optional[str]
    timestamp: Optional[str]

    def matches(self, record: "AttendanceRecord") -> bool:
        return record.date == self.date and record.timestamp == self.timestamp


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's mark in one session."""

    id: int
    date: Optional[str]
    timestamp: Optional[str]
    student_id: int
    status: AttendanceStatus
    subject: str = ""
    class_name: str = ""
    remark: Optional[str] = None
    session_note: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def key(self) -> SessionKey:
        return SessionKey(self.date, self.timestamp)

    @classmethod
    def from_row(cls, row: Mapping) -> "AttendanceRecord":
        status = require_field(row, "status")
        try:
            status = AttendanceStatus(status)
        except ValueError:
            raise ValidationError(f"unknown status {status!r}")

        note, remark = split_session_note(row.get("remark"))
        return cls(
            id=int(require_field(row, "id")),
            date=optional_str(row, "date") or None,
            timestamp=optional_str(row, "timestamp") or None,
            student_id=int(require_field(row, "student_id")),
            status=status,
            subject=row.get("subject") or "",
            class_name=row.get("class") or "",
            remark=remark,
            session_note=note,
            session_id=row.get("session_id") or None,
        )


@dataclass(frozen=True)
class NewAttendanceRow:
    """Row to insert; the backend assigns ``id``."""

    date: str
    timestamp: str
    student_id: int
    status: AttendanceStatus
    subject: str
    class_name: str
    remark: Optional[str] = None
    session_id: Optional[str] = None

    def to_row(self, user_id: int) -> dict:
        return {
            "user_id": user_id,
            "session_id": self.session_id,
            "date": self.date,
            "timestamp": self.timestamp,
            "student_id": self.student_id,
            "status": self.status.value,
            "subject": self.subject,
            "class": self.class_name,
            "remark": self.remark,
        }


@dataclass(frozen=True)
class SessionMetadata:
    """Session-wide fields that the stored rows only carry in-band."""

    label: Optional[str]
    periods: tuple[int, ...] = ()
    clock: Optional[str] = None
    global_note: Optional[str] = None

    @classmethod
    def from_label(cls, label: Optional[str], *, global_note: Optional[str] = None) -> "SessionMetadata":
        periods, clock = parse_session_label(label)
        return cls(label=label, periods=periods, clock=clock, global_note=global_note)

    @classmethod
    def from_records(cls, records: Sequence[AttendanceRecord]) -> "SessionMetadata":
        if not records:
            return cls(label=None)
        note = next((r.session_note for r in records if r.session_note), None)
        return cls.from_label(records[0].timestamp, global_note=note)


@dataclass(frozen=True)
class SessionDraft:
    """What the marking screen submits for a new or edited session.

    ``marks`` and ``remarks`` are keyed by student id. Students without a mark
    are recorded Present. For edits, ``date`` and ``periods`` may be omitted;
    when given they must match the session, which keeps its date and label.
    """

    subject: str
    class_name: str
    date: Optional[str] = None
    periods: tuple[int, ...] = ()
    marks: Mapping[int, AttendanceStatus] = field(default_factory=dict)
    remarks: Mapping[int, str] = field(default_factory=dict)
    global_note: Optional[str] = None


def normalize_periods(periods: Iterable[int]) -> tuple[int, ...]:
    out = sorted({int(p) for p in periods})
    if not out:
        raise ValidationError("Select at least one period")
    invalid = [p for p in out if p not in AVAILABLE_PERIODS]
    if invalid:
        raise ValidationError(f"Unknown periods: {invalid}")
    return tuple(out)


def format_session_label(periods: Iterable[int], clock: str) -> str:
    """``P1,2,3 - 09:15``"""
    return f"P{','.join(str(p) for p in normalize_periods(periods))} - {clock}"


def parse_session_label(label: Optional[str]) -> tuple[tuple[int, ...], Optional[str]]:
    """Periods and zero-padded clock of a label; empty values when it does not parse."""

    if not label:
        return (), None
    m = _LABEL_RE.match(label)
    if not m:
        return (), None
    periods = tuple(int(p) for p in m.group("periods").replace(" ", "").split(",") if p)
    clock = f"{int(m.group('hour')):02d}:{m.group('minute')}"
    return periods, clock


def split_session_note(remark: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Separate the ``[NOTE: ...]`` tag from a stored remark -> (note, remark)."""

    if not remark:
        return None, remark or None
    m = _NOTE_RE.match(remark)
    if not m:
        return None, remark
    note = m.group("note").strip() or None
    rest = m.group("rest").strip() or None
    return note, rest


def join_session_note(note: Optional[str], remark: Optional[str]) -> Optional[str]:
    """Inverse of :func:`split_session_note`."""

    remark = (remark or "").strip() or None
    note = (note or "").strip() or None
    if not note:
        return remark
    if "]" in note:
        raise ValidationError("Session note cannot contain ']'")
    tagged = f"[{SESSION_NOTE_TAG}: {note}]"
    return f"{tagged} {remark}" if remark else tagged
