"""Browsable structure and day statistics derived from the flat record list.

Every function here is pure: the input sequences are never mutated and empty
input gives an empty result.

Folders group records by ``date`` and sessions group a folder's records by
``timestamp``. Records with a missing key are kept under a sentinel label so
malformed data stays visible.

Recency of sessions within a day is decided by :func:`session_order_key`: the
clock time parsed from the label, then the raw label. Python's sort is stable,
so records of equal rank keep the order the backend returned them in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_RECENT_SESSIONS, UNKNOWN_DATE_LABEL, UNKNOWN_TIME_LABEL
from ..core.enums import AttendanceStatus
from ..students.model import Student
from .model import AttendanceRecord, SessionKey, SessionMetadata, parse_session_label

_COUNTED = (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.OD)


@dataclass(frozen=True)
class DepartmentStats:
    name: str
    present: int
    absent: int
    od: int
    total: int
    percentage: int


@dataclass(frozen=True)
class DaySummary:
    date: str
    total_students: int
    present: int
    absent: int
    od: int
    attendance_percentage: int


@dataclass(frozen=True)
class SessionBreakdown:
    metadata: SessionMetadata
    present: list[AttendanceRecord] = field(default_factory=list)
    absent: list[AttendanceRecord] = field(default_factory=list)
    od: list[AttendanceRecord] = field(default_factory=list)
    not_marked: list[AttendanceRecord] = field(default_factory=list)


def folder_label(date: Optional[str]) -> str:
    return date if date else UNKNOWN_DATE_LABEL


def session_label(timestamp: Optional[str]) -> str:
    return timestamp if timestamp else UNKNOWN_TIME_LABEL


def key_from_labels(folder: str, session: Optional[str] = None) -> SessionKey:
    """Map labels shown by the grouping functions back to stored key values."""

    date = None if folder == UNKNOWN_DATE_LABEL else folder
    timestamp = None if session in (None, UNKNOWN_TIME_LABEL) else session
    return SessionKey(date, timestamp)


def session_order_key(record: AttendanceRecord) -> tuple[str, str, str]:
    _, clock = parse_session_label(record.timestamp)
    return (record.date or "", clock or "", record.timestamp or "")


def group_by_folder(records: Iterable[AttendanceRecord]) -> dict[str, list[AttendanceRecord]]:
    folders: dict[str, list[AttendanceRecord]] = {}
    for r in records:
        folders.setdefault(folder_label(r.date), []).append(r)
    return folders


def group_by_session(folder_records: Iterable[AttendanceRecord]) -> dict[str, list[AttendanceRecord]]:
    sessions: dict[str, list[AttendanceRecord]] = {}
    for r in folder_records:
        sessions.setdefault(session_label(r.timestamp), []).append(r)
    return sessions


def sessions_in_folder(records: Iterable[AttendanceRecord], folder: str) -> dict[str, list[AttendanceRecord]]:
    return group_by_session(group_by_folder(records).get(folder, []))


def session_records(records: Iterable[AttendanceRecord], key: SessionKey) -> list[AttendanceRecord]:
    return [r for r in records if key.matches(r)]


def folder_session_count(folder_records: Iterable[AttendanceRecord]) -> int:
    return len({r.timestamp for r in folder_records})


def latest_status_per_student(records: Iterable[AttendanceRecord], date: str) -> dict[int, AttendanceStatus]:
    day = sorted((r for r in records if r.date == date), key=session_order_key)
    latest: dict[int, AttendanceStatus] = {}
    for r in day:
        latest[r.student_id] = r.status
    return latest


def recent_sessions(records: Iterable[AttendanceRecord], limit: int = DEFAULT_RECENT_SESSIONS) -> list[AttendanceRecord]:
    """One representative record per session, most recent first."""

    ordered = sorted(records, key=session_order_key, reverse=True)
    seen: set[SessionKey] = set()
    out: list[AttendanceRecord] = []
    for r in ordered:
        if len(out) >= limit:
            break
        if r.key in seen:
            continue
        seen.add(r.key)
        out.append(r)
    return out


def _round_percent(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    # Half-up, not banker's rounding.
    return int(math.floor(part / whole * 100 + 0.5))


def _count(statuses: Iterable[AttendanceStatus]) -> dict[AttendanceStatus, int]:
    counts = {s: 0 for s in AttendanceStatus}
    for s in statuses:
        counts[s] += 1
    return counts


def department_breakdown(
    students: Sequence[Student],
    records: Iterable[AttendanceRecord],
    date: str,
    *,
    departments: Optional[Sequence[str]] = None,
) -> list[DepartmentStats]:
    """Per-department counts of the day's latest statuses.

    The percentage divides by the students that have a Present/Absent/OD mark
    that day, not by the roster size. ``departments`` defaults to the roster's
    departments in first-seen order.
    """

    if departments is None:
        departments = list(dict.fromkeys(s.department for s in students))

    latest = latest_status_per_student(records, date)
    out: list[DepartmentStats] = []
    for dept in departments:
        roster = [s for s in students if s.department == dept]
        counts = _count(latest[s.id] for s in roster if s.id in latest)
        marked = sum(counts[s] for s in _COUNTED)
        out.append(
            DepartmentStats(
                name=dept,
                present=counts[AttendanceStatus.PRESENT],
                absent=counts[AttendanceStatus.ABSENT],
                od=counts[AttendanceStatus.OD],
                total=len(roster),
                percentage=_round_percent(counts[AttendanceStatus.PRESENT], marked),
            )
        )
    return out


def day_summary(students: Sequence[Student], records: Iterable[AttendanceRecord], date: str) -> DaySummary:
    counts = _count(latest_status_per_student(records, date).values())
    marked = sum(counts[s] for s in _COUNTED)
    return DaySummary(
        date=date,
        total_students=len(students),
        present=counts[AttendanceStatus.PRESENT],
        absent=counts[AttendanceStatus.ABSENT],
        od=counts[AttendanceStatus.OD],
        attendance_percentage=_round_percent(counts[AttendanceStatus.PRESENT], marked),
    )


def session_breakdown(session: Sequence[AttendanceRecord]) -> SessionBreakdown:
    breakdown = SessionBreakdown(metadata=SessionMetadata.from_records(session))
    buckets = {
        AttendanceStatus.PRESENT: breakdown.present,
        AttendanceStatus.ABSENT: breakdown.absent,
        AttendanceStatus.OD: breakdown.od,
        AttendanceStatus.NOT_MARKED: breakdown.not_marked,
    }
    for r in session:
        buckets[r.status].append(r)
    return breakdown


def student_attendance_percentages(
    students: Sequence[Student], records: Sequence[AttendanceRecord]
) -> dict[int, int]:
    """Present marks over the number of distinct sessions; 100 when nothing was recorded yet."""

    total_sessions = len({r.key for r in records})
    present: dict[int, int] = {}
    for r in records:
        if r.status == AttendanceStatus.PRESENT:
            present[r.student_id] = present.get(r.student_id, 0) + 1

    if total_sessions == 0:
        return {s.id: 100 for s in students}
    return {s.id: _round_percent(present.get(s.id, 0), total_sessions) for s in students}


def filter_students(students: Iterable[Student], term: str) -> list[Student]:
    term = (term or "").strip().lower()
    if not term:
        return list(students)
    return [
        s
        for s in students
        if term in (s.name or "").lower() or term in (s.roll_no or "").lower() or term in (s.department or "").lower()
    ]
