from __future__ import annotations

from typing import Sequence

from ..common.decoding import Quarantine, decode_rows
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import DayNote
from .repository import DayNoteRepository


class MySQLDayNoteRepository(DayNoteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self.quarantine = Quarantine()

    def get_all(self, user_id: int) -> Sequence[DayNote]:
        with db_cursor(self._conn_factory, operation="getAll day notes") as (_, cur):
            cur.execute(
                "SELECT id, date, reason, created_at FROM day_notes WHERE user_id=%s ORDER BY date DESC, id DESC",
                (user_id,),
            )
            rows = fetchall(cur)
        return decode_rows(rows, DayNote.from_row, collection="day_notes", quarantine=self.quarantine)

    def create(self, *, date: str, reason: str, user_id: int) -> DayNote:
        with db_cursor(self._conn_factory, operation="create day note") as (_, cur):
            cur.execute(
                "INSERT INTO day_notes(user_id, date, reason) VALUES(%s,%s,%s)",
                (user_id, date, reason),
            )
            cur.execute("SELECT id, date, reason, created_at FROM day_notes WHERE id=%s", (int(cur.lastrowid),))
            row = fetchone(cur)
            if not row:
                raise NotFoundError("Day note not found after insert")
            return DayNote.from_row(row)

    def delete(self, note_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory, operation="delete day note") as (_, cur):
            cur.execute("DELETE FROM day_notes WHERE id=%s AND user_id=%s", (int(note_id), user_id))
            return cur.rowcount > 0
