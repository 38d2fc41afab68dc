from __future__ import annotations

from typing import Optional, Sequence

from ..common.decoding import Quarantine, decode_rows
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord, NewAttendanceRow
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self.quarantine = Quarantine()

    def get_all(self, user_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory, operation="getAll attendance") as (_, cur):
            cur.execute(
                """
                SELECT id, session_id, date, timestamp, student_id, status, subject, `class`, remark
                FROM attendance_records
                WHERE user_id=%s
                ORDER BY id ASC
                """,
                (user_id,),
            )
            rows = fetchall(cur)
        return decode_rows(rows, AttendanceRecord.from_row, collection="attendance_records", quarantine=self.quarantine)

    def insert_batch(self, rows: Sequence[NewAttendanceRow], *, user_id: int) -> int:
        if not rows:
            return 0
        payload = [r.to_row(user_id) for r in rows]
        with db_cursor(self._conn_factory, operation="saveBatch attendance") as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(user_id, session_id, date, timestamp, student_id, status, subject, `class`, remark)
                VALUES(%(user_id)s, %(session_id)s, %(date)s, %(timestamp)s, %(student_id)s, %(status)s,
                       %(subject)s, %(class)s, %(remark)s)
                """,
                payload,
            )
            return len(payload)

    def delete_session(self, *, date: Optional[str], timestamp: Optional[str], user_id: int) -> int:
        # <=> so that sessions bucketed under the unknown labels stay deletable.
        with db_cursor(self._conn_factory, operation="deleteSession") as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE user_id=%s AND date <=> %s AND timestamp <=> %s",
                (user_id, date, timestamp),
            )
            return cur.rowcount

    def delete_folder(self, *, date: Optional[str], user_id: int) -> int:
        with db_cursor(self._conn_factory, operation="deleteFolder") as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE user_id=%s AND date <=> %s",
                (user_id, date),
            )
            return cur.rowcount

    def delete_by_student(self, *, student_id: int, user_id: int) -> int:
        with db_cursor(self._conn_factory, operation="deleteByStudentId") as (_, cur):
            cur.execute(
                "DELETE FROM attendance_records WHERE user_id=%s AND student_id=%s",
                (user_id, int(student_id)),
            )
            return cur.rowcount
