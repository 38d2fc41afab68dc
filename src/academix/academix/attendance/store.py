from __future__ import annotations

from typing import Callable, Iterable, Iterator, Sequence

from .model import AttendanceRecord


class RecordStore:
    """In-memory ordered cache of one user's attendance records.

    Holds no business logic: it is replaced wholesale after a refetch and
    filtered in place after optimistic deletes.
    """

    def __init__(self, records: Iterable[AttendanceRecord] = ()):
        self._records: list[AttendanceRecord] = list(records)

    def replace_all(self, records: Iterable[AttendanceRecord]) -> None:
        self._records = list(records)

    def remove_where(self, predicate: Callable[[AttendanceRecord], bool]) -> int:
        before = len(self._records)
        self._records = [r for r in self._records if not predicate(r)]
        return before - len(self._records)

    def clear(self) -> None:
        self._records = []

    def snapshot(self) -> Sequence[AttendanceRecord]:
        return tuple(self._records)

    def __iter__(self) -> Iterator[AttendanceRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)
