from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_enum, require_int, require_non_empty
from ..core.enums import StudentStatus
from ..core.exceptions import ValidationError
from .model import NewStudent, Student


class StudentService:
    """Use case: validate roster input before it reaches the remote store."""

    def new_student(
        self,
        *,
        roster: Sequence[Student],
        name: str,
        roll_no: str,
        department: str,
        year=1,
        status=StudentStatus.ACTIVE,
    ) -> NewStudent:
        roll_no = require_non_empty(roll_no, "Roll number")
        self._require_unique_roll(roster, roll_no)
        return NewStudent(
            roll_no=roll_no,
            name=require_non_empty(name, "Name"),
            department=require_non_empty(department, "Department"),
            year=require_int(year, "Year", minimum=1),
            status=require_enum(StudentStatus, status, "Status"),
        )

    def clean_patch(self, *, roster: Sequence[Student], student_id: int, patch: dict) -> dict:
        out: dict = {}
        if "name" in patch:
            out["name"] = require_non_empty(patch["name"], "Name")
        if "roll_no" in patch:
            out["roll_no"] = require_non_empty(patch["roll_no"], "Roll number")
            self._require_unique_roll(roster, out["roll_no"], ignore_id=student_id)
        if "department" in patch:
            out["department"] = require_non_empty(patch["department"], "Department")
        if "year" in patch:
            out["year"] = require_int(patch["year"], "Year", minimum=1)
        if "status" in patch:
            out["status"] = require_enum(StudentStatus, patch["status"], "Status").value
        if not out:
            raise ValidationError("Nothing to update")
        return out

    @staticmethod
    def _require_unique_roll(roster: Sequence[Student], roll_no: str, *, ignore_id: Optional[int] = None) -> None:
        for s in roster:
            if s.roll_no == roll_no and s.id != ignore_id:
                raise ValidationError(f"Roll number {roll_no} already exists")
