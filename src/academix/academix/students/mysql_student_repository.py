from __future__ import annotations

from typing import Sequence

from ..common.decoding import Quarantine, decode_rows
from ..core.exceptions import NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_patch, db_cursor, fetchall, fetchone
from .model import NewStudent, Student
from .repository import StudentRepository

_COLUMNS = "id, roll_no, name, department, year, status"
_UPDATABLE = ("roll_no", "name", "department", "year", "status")


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self.quarantine = Quarantine()

    def get_all(self, user_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory, operation="getAll students") as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE user_id=%s ORDER BY created_at ASC, id ASC",
                (user_id,),
            )
            rows = fetchall(cur)
        return decode_rows(rows, Student.from_row, collection="students", quarantine=self.quarantine)

    def _get(self, cur, student_id: int, user_id: int) -> Student:
        cur.execute(f"SELECT {_COLUMNS} FROM students WHERE id=%s AND user_id=%s", (student_id, user_id))
        row = fetchone(cur)
        if not row:
            raise NotFoundError("Student not found")
        return Student.from_row(row)

    def create(self, student: NewStudent, *, user_id: int) -> Student:
        return self.create_batch([student], user_id=user_id)[0]

    def create_batch(self, students: Sequence[NewStudent], *, user_id: int) -> Sequence[Student]:
        if not students:
            return []
        created: list[Student] = []
        with db_cursor(self._conn_factory, operation="create student") as (_, cur):
            for s in students:
                cur.execute(
                    """
                    INSERT INTO students(user_id, roll_no, name, department, year, status)
                    VALUES(%(user_id)s, %(roll_no)s, %(name)s, %(department)s, %(year)s, %(status)s)
                    """,
                    s.to_row(user_id),
                )
                created.append(self._get(cur, int(cur.lastrowid), user_id))
        return created

    def update(self, student_id: int, patch: dict, *, user_id: int) -> Student:
        assignments, params = build_patch(patch, _UPDATABLE)
        if not assignments:
            raise ValidationError("Nothing to update")
        with db_cursor(self._conn_factory, operation="update student") as (_, cur):
            cur.execute(
                f"UPDATE students SET {assignments} WHERE id=%s AND user_id=%s",
                (*params, int(student_id), user_id),
            )
            return self._get(cur, int(student_id), user_id)

    def delete(self, student_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory, operation="delete student") as (_, cur):
            cur.execute("DELETE FROM students WHERE id=%s AND user_id=%s", (int(student_id), user_id))
            return cur.rowcount > 0
