from __future__ import annotations

from typing import Protocol, Sequence

from .model import Lead, NewLead


class LeadRepository(Protocol):
    def get_all(self, user_id: int) -> Sequence[Lead]:
        """Newest lead first."""

        raise NotImplementedError

    def create(self, lead: NewLead, *, user_id: int) -> Lead:
        raise NotImplementedError

    def update(self, lead_id: int, patch: dict, *, user_id: int) -> Lead:
        raise NotImplementedError

    def delete(self, lead_id: int, *, user_id: int) -> bool:
        raise NotImplementedError
