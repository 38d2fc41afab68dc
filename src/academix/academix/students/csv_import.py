from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from typing import Sequence

from ..core.constants import DEFAULT_DEPARTMENTS
from .model import NewStudent

_HEADER_NAMES = {"name", "student name", "full name"}


@dataclass(frozen=True)
class ImportResult:
    students: list[NewStudent] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def parse_students_csv(text: str, *, default_department: str = DEFAULT_DEPARTMENTS[0]) -> ImportResult:
    """Parse ``name, roll_no[, department[, year]]`` lines into candidate students.

    A header row is skipped when its first cell looks like a column name.
    Lines with fewer than two cells, an empty name or roll number, or a
    non-numeric year are reported in ``skipped``.
    """

    result = ImportResult()
    reader = csv.reader(io.StringIO(text or ""))
    for line_no, cells in enumerate(reader, start=1):
        cells = [c.strip() for c in cells]
        if not any(cells):
            continue
        if line_no == 1 and cells[0].lower() in _HEADER_NAMES:
            continue
        if len(cells) < 2 or not cells[0] or not cells[1]:
            result.skipped.append(f"line {line_no}: expected name and roll number")
            continue

        department = cells[2] if len(cells) > 2 and cells[2] else default_department
        year = 1
        if len(cells) > 3 and cells[3]:
            if not cells[3].isdigit():
                result.skipped.append(f"line {line_no}: year must be a number")
                continue
            year = int(cells[3])

        result.students.append(NewStudent(roll_no=cells[1], name=cells[0], department=department, year=year))
    return result


def drop_known_roll_numbers(candidates: Sequence[NewStudent], known: set[str]) -> ImportResult:
    """Keep the first candidate per roll number that is not already on the roster."""

    result = ImportResult()
    seen = set(known)
    for s in candidates:
        if s.roll_no in seen:
            result.skipped.append(f"roll {s.roll_no}: already on the roster")
            continue
        seen.add(s.roll_no)
        result.students.append(s)
    return result
