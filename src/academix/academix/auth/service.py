from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from .model import Account, SessionUser
from .repository import AccountRepository

logger = logging.getLogger(__name__)

RECOVERY_TOKEN_TTL = timedelta(hours=1)


def _session_user(account: Account) -> SessionUser:
    return SessionUser(user_id=account.user_id, full_name=account.full_name, email=account.email)


def _check_hash(password_hash: Optional[str], value: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, value)
    except ValueError:
        # placeholder or corrupted hashes
        return False


class AuthService:
    """Use case: sign up, log in and recover a password.

    Hashing is delegated to werkzeug; nothing here is a custom scheme.
    """

    def __init__(self, accounts: AccountRepository, *, recovery_ttl: timedelta = RECOVERY_TOKEN_TTL):
        self._accounts = accounts
        self._recovery_ttl = recovery_ttl

    def sign_up(self, *, full_name: str, email: str, password: str) -> SessionUser:
        full_name = require_non_empty(full_name, "Full name")
        email = require_non_empty(email, "Email").lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._accounts.get_by_email(email):
            raise ValidationError("An account with this email already exists")

        user_id = self._accounts.create(
            full_name=full_name,
            email=email,
            password_hash=generate_password_hash(password),
        )
        logger.info("Account %s created", user_id)
        return SessionUser(user_id=user_id, full_name=full_name, email=email)

    def authenticate(self, email: str, password: str) -> SessionUser:
        account = self._accounts.get_by_email((email or "").strip().lower())
        if not account or not _check_hash(account.password_hash, password or ""):
            raise AuthenticationError("Invalid email or password")
        return _session_user(account)

    def begin_password_recovery(self, email: str) -> Optional[str]:
        """Issue a one-time recovery token.

        Returns ``None`` for unknown emails; callers answer the same way in
        both cases so account existence is not disclosed.
        """

        account = self._accounts.get_by_email(require_non_empty(email, "Email").lower())
        if not account:
            return None
        token = secrets.token_urlsafe(32)
        self._accounts.set_recovery_token(
            account.user_id,
            token_hash=generate_password_hash(token),
            expires_at=now_local() + self._recovery_ttl,
        )
        return token

    def verify_recovery_token(self, email: str, token: str) -> SessionUser:
        account = self._accounts.get_by_email(require_non_empty(email, "Email").lower())
        if not account or not _check_hash(account.recovery_token_hash, token or ""):
            raise AuthenticationError("Recovery link is invalid")
        expires_at: Optional[datetime] = account.recovery_expires_at
        if expires_at is None or expires_at < now_local():
            raise AuthenticationError("Recovery link has expired")
        return _session_user(account)

    def update_password(self, user_id: int, password: str) -> None:
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if not self._accounts.update_password(user_id, password_hash=generate_password_hash(password)):
            raise NotFoundError("Account not found")
        logger.info("Password updated for account %s", user_id)
