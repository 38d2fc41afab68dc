from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import require_iso_date
from ..common.validators import require_enum, require_non_empty
from ..core.enums import LeadStatus
from ..core.exceptions import ValidationError
from .model import Lead, NewLead


class LeadService:
    """Use case: validate lead desk input."""

    def new_lead(
        self,
        *,
        name: str,
        phone: str,
        course: str,
        status=LeadStatus.NEW,
        next_follow_up: Optional[str] = None,
        notes=(),
    ) -> NewLead:
        return NewLead(
            name=require_non_empty(name, "Name"),
            phone=require_non_empty(phone, "Phone"),
            course=require_non_empty(course, "Course"),
            status=require_enum(LeadStatus, status, "Status"),
            next_follow_up=require_iso_date(next_follow_up) if next_follow_up else None,
            notes=tuple(n.strip() for n in notes if n and n.strip()),
        )

    def clean_patch(self, patch: dict) -> dict:
        out: dict = {}
        for name in ("name", "phone", "course"):
            if name in patch:
                out[name] = require_non_empty(patch[name], name.capitalize())
        if "status" in patch:
            out["status"] = require_enum(LeadStatus, patch["status"], "Status").value
        if "next_follow_up" in patch:
            value = patch["next_follow_up"]
            out["next_follow_up"] = require_iso_date(value) if value else None
        if "notes" in patch:
            out["notes"] = [n.strip() for n in patch["notes"] if n and n.strip()]
        if not out:
            raise ValidationError("Nothing to update")
        return out

    def notes_with(self, lead: Lead, note: str) -> list[str]:
        """New note goes first: notes are kept most recent first."""
        return [require_non_empty(note, "Note"), *lead.notes]
