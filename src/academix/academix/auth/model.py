from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from ..common.decoding import require_field


@dataclass(frozen=True)
class Account:
    """Sign-in identity. Every other row in the store is scoped by ``user_id``."""

    user_id: int
    full_name: str
    email: str
    password_hash: str
    recovery_token_hash: Optional[str] = None
    recovery_expires_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Mapping) -> "Account":
        return cls(
            user_id=int(require_field(row, "user_id")),
            full_name=str(row.get("full_name") or ""),
            email=str(require_field(row, "email")),
            password_hash=str(require_field(row, "password_hash")),
            recovery_token_hash=row.get("recovery_token_hash") or None,
            recovery_expires_at=row.get("recovery_expires_at"),
        )


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    email: str
