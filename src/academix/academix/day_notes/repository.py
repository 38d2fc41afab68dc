from __future__ import annotations

from typing import Protocol, Sequence

from .model import DayNote


class DayNoteRepository(Protocol):
    def get_all(self, user_id: int) -> Sequence[DayNote]:
        """Newest date first."""

        raise NotImplementedError

    def create(self, *, date: str, reason: str, user_id: int) -> DayNote:
        raise NotImplementedError

    def delete(self, note_id: int, *, user_id: int) -> bool:
        raise NotImplementedError
