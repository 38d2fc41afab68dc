from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..common.decoding import optional_str, require_field
from ..core.enums import LeadStatus
from ..core.exceptions import ValidationError


def _decode_notes(value) -> tuple[str, ...]:
    if value is None or value == "":
        return ()
    if isinstance(value, (list, tuple)):
        notes = value
    else:
        notes = json.loads(value)
    if not isinstance(notes, list) or not all(isinstance(n, str) for n in notes):
        raise ValidationError("notes must be a list of strings")
    return tuple(notes)


@dataclass(frozen=True)
class Lead:
    """Admission enquiry. ``notes`` are ordered most recent first."""

    id: int
    name: str
    phone: str
    course: str
    status: LeadStatus = LeadStatus.NEW
    next_follow_up: Optional[str] = None
    notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def last_note(self) -> Optional[str]:
        return self.notes[0] if self.notes else None

    @classmethod
    def from_row(cls, row: Mapping) -> "Lead":
        status = row.get("status") or LeadStatus.NEW.value
        try:
            status = LeadStatus(status)
        except ValueError:
            raise ValidationError(f"unknown lead status {status!r}")
        return cls(
            id=int(require_field(row, "id")),
            name=str(require_field(row, "name")),
            phone=str(row.get("phone") or ""),
            course=str(row.get("course") or ""),
            status=status,
            next_follow_up=optional_str(row, "next_follow_up"),
            notes=_decode_notes(row.get("notes")),
        )


@dataclass(frozen=True)
class NewLead:
    name: str
    phone: str
    course: str
    status: LeadStatus = LeadStatus.NEW
    next_follow_up: Optional[str] = None
    notes: tuple[str, ...] = field(default_factory=tuple)

    def to_row(self, user_id: int) -> dict:
        return {
            "user_id": user_id,
            "name": self.name,
            "phone": self.phone,
            "course": self.course,
            "status": self.status.value,
            "next_follow_up": self.next_follow_up,
            "notes": json.dumps(list(self.notes)),
        }
