from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendanceRow


class AttendanceRepository(Protocol):
    """Remote ``attendance_records`` collection, always scoped by ``user_id``.

    Note (DIP): services depend on this interface, not on a concrete store.
    """

    def get_all(self, user_id: int) -> Sequence[AttendanceRecord]:
        """Every record of the user in backend return order."""

        raise NotImplementedError

    def insert_batch(self, rows: Sequence[NewAttendanceRow], *, user_id: int) -> int:
        raise NotImplementedError

    def delete_session(self, *, date: Optional[str], timestamp: Optional[str], user_id: int) -> int:
        raise NotImplementedError

    def delete_folder(self, *, date: Optional[str], user_id: int) -> int:
        raise NotImplementedError

    def delete_by_student(self, *, student_id: int, user_id: int) -> int:
        raise NotImplementedError
