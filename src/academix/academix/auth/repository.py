from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import Account


class AccountRepository(Protocol):
    def get_by_id(self, user_id: int) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def create(self, *, full_name: str, email: str, password_hash: str) -> int:
        raise NotImplementedError

    def update_password(self, user_id: int, *, password_hash: str) -> bool:
        """Store the new hash and clear any pending recovery token."""

        raise NotImplementedError

    def set_recovery_token(self, user_id: int, *, token_hash: str, expires_at: datetime) -> bool:
        raise NotImplementedError
