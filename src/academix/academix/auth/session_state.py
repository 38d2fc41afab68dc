"""Authentication lifecycle that gates every data fetch.

States and accepted events::

    UNAUTHENTICATED   --begin_sign_in-->           AUTHENTICATING
    AUTHENTICATING    --sign_in_succeeded-->       AUTHENTICATED
    AUTHENTICATING    --sign_in_failed-->          UNAUTHENTICATED
    UNAUTHENTICATED   --enter_password_recovery--> PASSWORD_RECOVERY
    AUTHENTICATED     --enter_password_recovery--> PASSWORD_RECOVERY
    PASSWORD_RECOVERY --recovery_completed-->      AUTHENTICATED
    any               --sign_out-->                UNAUTHENTICATED

Only AUTHENTICATED allows fetching. Any other event raises
:class:`InvalidTransitionError`.
"""

from __future__ import annotations

from typing import Callable, Mapping, Optional

from ..core.enums import AuthState
from ..core.exceptions import AuthenticationError, InvalidTransitionError

Listener = Callable[[AuthState, AuthState], None]


class AuthSession:
    def __init__(self, state: AuthState = AuthState.UNAUTHENTICATED, user_id: Optional[int] = None):
        if state in (AuthState.AUTHENTICATED, AuthState.PASSWORD_RECOVERY) and user_id is None:
            raise InvalidTransitionError(f"{state.value} requires a user")
        self._state = state
        self._user_id = user_id if state in (AuthState.AUTHENTICATED, AuthState.PASSWORD_RECOVERY) else None
        self._listeners: list[Listener] = []

    @classmethod
    def authenticated(cls, user_id: int) -> "AuthSession":
        return cls(AuthState.AUTHENTICATED, user_id)

    @classmethod
    def from_mapping(cls, data: Mapping) -> "AuthSession":
        """Restore from a Flask session; unknown or incomplete data means signed out."""

        try:
            state = AuthState(data.get("auth_state", AuthState.UNAUTHENTICATED.value))
        except ValueError:
            return cls()
        user_id = data.get("user_id")
        if state in (AuthState.AUTHENTICATED, AuthState.PASSWORD_RECOVERY) and user_id is None:
            return cls()
        return cls(state, int(user_id) if user_id is not None else None)

    def to_mapping(self) -> dict:
        return {"auth_state": self._state.value, "user_id": self._user_id}

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user_id(self) -> Optional[int]:
        return self._user_id

    @property
    def can_fetch(self) -> bool:
        return self._state == AuthState.AUTHENTICATED

    def require_user(self) -> int:
        if not self.can_fetch or self._user_id is None:
            raise AuthenticationError("Sign in to continue")
        return self._user_id

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _move(self, allowed: tuple[AuthState, ...], target: AuthState, event: str) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(f"Cannot {event} while {self._state.value}")
        previous = self._state
        self._state = target
        for listener in list(self._listeners):
            listener(previous, target)

    def begin_sign_in(self) -> None:
        self._move((AuthState.UNAUTHENTICATED,), AuthState.AUTHENTICATING, "begin sign in")

    def sign_in_succeeded(self, user_id: int) -> None:
        if self._state != AuthState.AUTHENTICATING:
            raise InvalidTransitionError(f"Cannot complete sign in while {self._state.value}")
        self._user_id = int(user_id)
        self._move((AuthState.AUTHENTICATING,), AuthState.AUTHENTICATED, "complete sign in")

    def sign_in_failed(self) -> None:
        self._move((AuthState.AUTHENTICATING,), AuthState.UNAUTHENTICATED, "fail sign in")
        self._user_id = None

    def enter_password_recovery(self, user_id: int) -> None:
        if self._state == AuthState.AUTHENTICATED and self._user_id != int(user_id):
            raise InvalidTransitionError("Recovery link belongs to another account")
        if self._state not in (AuthState.UNAUTHENTICATED, AuthState.AUTHENTICATED):
            raise InvalidTransitionError(f"Cannot enter password recovery while {self._state.value}")
        self._user_id = int(user_id)
        self._move(
            (AuthState.UNAUTHENTICATED, AuthState.AUTHENTICATED),
            AuthState.PASSWORD_RECOVERY,
            "enter password recovery",
        )

    def recovery_completed(self) -> None:
        self._move((AuthState.PASSWORD_RECOVERY,), AuthState.AUTHENTICATED, "complete recovery")

    def sign_out(self) -> None:
        self._move(tuple(AuthState), AuthState.UNAUTHENTICATED, "sign out")
        self._user_id = None
