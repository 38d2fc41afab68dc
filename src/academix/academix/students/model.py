from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..common.decoding import require_field
from ..core.enums import StudentStatus
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Student:
    """Domain entity: a student on the user's roster.

    The attendance percentage is derived from attendance records and is not
    stored here.
    """

    id: int
    roll_no: str
    name: str
    department: str
    year: int = 1
    status: StudentStatus = StudentStatus.ACTIVE

    @classmethod
    def from_row(cls, row: Mapping) -> "Student":
        status = row.get("status") or StudentStatus.ACTIVE.value
        try:
            status = StudentStatus(status)
        except ValueError:
            raise ValidationError(f"unknown student status {status!r}")
        return cls(
            id=int(require_field(row, "id")),
            roll_no=str(require_field(row, "roll_no")),
            name=str(require_field(row, "name")),
            department=str(row.get("department") or ""),
            year=int(row.get("year") or 1),
            status=status,
        )


@dataclass(frozen=True)
class NewStudent:
    roll_no: str
    name: str
    department: str
    year: int = 1
    status: StudentStatus = StudentStatus.ACTIVE

    def to_row(self, user_id: int) -> dict:
        return {
            "user_id": user_id,
            "roll_no": self.roll_no,
            "name": self.name,
            "department": self.department,
            "year": self.year,
            "status": self.status.value,
        }
