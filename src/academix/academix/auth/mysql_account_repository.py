from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Account
from .repository import AccountRepository

_COLUMNS = "user_id, full_name, email, password_hash, recovery_token_hash, recovery_expires_at"


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[Account]:
        with db_cursor(self._conn_factory, operation="get account") as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE user_id=%s", (user_id,))
            row = fetchone(cur)
        return Account.from_row(row) if row else None

    def get_by_email(self, email: str) -> Optional[Account]:
        with db_cursor(self._conn_factory, operation="get account") as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM accounts WHERE email=%s", (email,))
            row = fetchone(cur)
        return Account.from_row(row) if row else None

    def create(self, *, full_name: str, email: str, password_hash: str) -> int:
        with db_cursor(self._conn_factory, operation="create account") as (_, cur):
            cur.execute(
                "INSERT INTO accounts(full_name, email, password_hash) VALUES(%s, %s, %s)",
                (full_name, email, password_hash),
            )
            return int(cur.lastrowid)

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        with db_cursor(self._conn_factory, operation="update password") as (_, cur):
            cur.execute(
                """
                UPDATE accounts
                SET password_hash=%s, recovery_token_hash=NULL, recovery_expires_at=NULL
                WHERE user_id=%s
                """,
                (password_hash, user_id),
            )
            return cur.rowcount > 0

    def set_recovery_token(self, user_id: int, *, token_hash: str, expires_at: datetime) -> bool:
        with db_cursor(self._conn_factory, operation="set recovery token") as (_, cur):
            cur.execute(
                "UPDATE accounts SET recovery_token_hash=%s, recovery_expires_at=%s WHERE user_id=%s",
                (token_hash, expires_at, user_id),
            )
            return cur.rowcount > 0
