from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from ..common.decoding import optional_str, require_field


@dataclass(frozen=True)
class DayNote:
    """Annotation for a day without attendance activity (holiday, event...)."""

    id: int
    date: str
    reason: str
    created_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping) -> "DayNote":
        return cls(
            id=int(require_field(row, "id")),
            date=optional_str(row, "date") or str(require_field(row, "date")),
            reason=str(require_field(row, "reason")),
            created_at=row.get("created_at"),
        )
