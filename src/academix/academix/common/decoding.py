"""Typed decoding of rows coming back from the remote store.

Repositories hand raw dict rows to :func:`decode_rows` together with a
per-entity decoder. Rows the decoder rejects are quarantined: logged and left
out of the result instead of failing the whole read.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Mapping, Optional, TypeVar

from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Quarantine:
    rows: list[dict] = field(default_factory=list)

    def add(self, row: Mapping[str, Any]) -> None:
        self.rows.append(dict(row))

    def __len__(self) -> int:
        return len(self.rows)


def decode_rows(
    rows: Iterable[Mapping[str, Any]],
    decoder: Callable[[Mapping[str, Any]], T],
    *,
    collection: str,
    quarantine: Optional[Quarantine] = None,
) -> list[T]:
    out: list[T] = []
    for row in rows:
        try:
            out.append(decoder(row))
        except (ValidationError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Quarantined %s row id=%r: %s", collection, row.get("id"), exc)
            if quarantine is not None:
                quarantine.add(row)
    return out


def require_field(row: Mapping[str, Any], name: str):
    value = row.get(name)
    if value is None or value == "":
        raise ValidationError(f"missing field {name!r}")
    return value


def optional_str(row: Mapping[str, Any], name: str) -> Optional[str]:
    value = row.get(name)
    if value is None:
        return None
    # DATE columns come back as datetime.date from mysql-connector.
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)
