from __future__ import annotations

from typing import Protocol, Sequence

from .model import NewStudent, Student


class StudentRepository(Protocol):
    """Remote ``students`` collection; every write echoes the stored row."""

    def get_all(self, user_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def create(self, student: NewStudent, *, user_id: int) -> Student:
        raise NotImplementedError

    def create_batch(self, students: Sequence[NewStudent], *, user_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def update(self, student_id: int, patch: dict, *, user_id: int) -> Student:
        raise NotImplementedError

    def delete(self, student_id: int, *, user_id: int) -> bool:
        raise NotImplementedError
