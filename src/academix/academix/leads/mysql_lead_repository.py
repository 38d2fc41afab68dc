from __future__ import annotations

import json
from typing import Sequence

from ..common.decoding import Quarantine, decode_rows
from ..core.exceptions import NotFoundError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_patch, db_cursor, fetchall, fetchone
from .model import Lead, NewLead
from .repository import LeadRepository

_COLUMNS = "id, name, phone, course, status, next_follow_up, notes"
_UPDATABLE = ("name", "phone", "course", "status", "next_follow_up", "notes")


class MySQLLeadRepository(LeadRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self.quarantine = Quarantine()

    def get_all(self, user_id: int) -> Sequence[Lead]:
        with db_cursor(self._conn_factory, operation="getAll leads") as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM leads WHERE user_id=%s ORDER BY created_at DESC, id DESC",
                (user_id,),
            )
            rows = fetchall(cur)
        return decode_rows(rows, Lead.from_row, collection="leads", quarantine=self.quarantine)

    def _get(self, cur, lead_id: int, user_id: int) -> Lead:
        cur.execute(f"SELECT {_COLUMNS} FROM leads WHERE id=%s AND user_id=%s", (lead_id, user_id))
        row = fetchone(cur)
        if not row:
            raise NotFoundError("Lead not found")
        return Lead.from_row(row)

    def create(self, lead: NewLead, *, user_id: int) -> Lead:
        with db_cursor(self._conn_factory, operation="create lead") as (_, cur):
            cur.execute(
                """
                INSERT INTO leads(user_id, name, phone, course, status, next_follow_up, notes)
                VALUES(%(user_id)s, %(name)s, %(phone)s, %(course)s, %(status)s, %(next_follow_up)s, %(notes)s)
                """,
                lead.to_row(user_id),
            )
            return self._get(cur, int(cur.lastrowid), user_id)

    def update(self, lead_id: int, patch: dict, *, user_id: int) -> Lead:
        patch = dict(patch)
        if "notes" in patch:
            patch["notes"] = json.dumps(list(patch["notes"]))
        assignments, params = build_patch(patch, _UPDATABLE)
        if not assignments:
            raise ValidationError("Nothing to update")
        with db_cursor(self._conn_factory, operation="update lead") as (_, cur):
            cur.execute(
                f"UPDATE leads SET {assignments} WHERE id=%s AND user_id=%s",
                (*params, int(lead_id), user_id),
            )
            return self._get(cur, int(lead_id), user_id)

    def delete(self, lead_id: int, *, user_id: int) -> bool:
        with db_cursor(self._conn_factory, operation="delete lead") as (_, cur):
            cur.execute("DELETE FROM leads WHERE id=%s AND user_id=%s", (int(lead_id), user_id))
            return cur.rowcount > 0
