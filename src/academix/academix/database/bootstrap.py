from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

_DATABASE_DIRECTIVE = re.compile(r"(?im)^\s*(CREATE\s+DATABASE|USE)\b[^;]*;\s*$")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def clean_schema(sql: str) -> str:
    """Drop comments and database directives so the file targets any configured database."""
    return _LINE_COMMENT.sub("", _DATABASE_DIRECTIVE.sub("", sql))


def split_statements(sql: str) -> Iterator[str]:
    # ';' inside quoted strings does not end a statement.
    start = 0
    quote = ""
    i = 0
    while i < len(sql):
        ch = sql[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = sql[start:i].strip()
            if stmt:
                yield stmt
            start = i + 1
        i += 1

    tail = sql[start:].strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> int:
    """Create the database if needed and run every statement of ``schema_path``.

    Returns the number of statements executed.
    """
    conn_factory = DatabaseConnection.from_dict(db_config)
    ensure_database_exists(conn_factory)

    statements = list(split_statements(clean_schema(Path(schema_path).read_text(encoding="utf-8"))))
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for stmt in statements:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()

    logger.info("applied %d schema statements to %s", len(statements), conn_factory.config.database)
    return len(statements)


def list_tables(db_config: dict) -> list[str]:
    conn = DatabaseConnection.from_dict(db_config).connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
