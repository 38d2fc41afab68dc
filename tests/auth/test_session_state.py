from __future__ import annotations

import pytest

from src.academix.academix.auth.session_state import AuthSession
from src.academix.academix.core.enums import AuthState
from src.academix.academix.core.exceptions import AuthenticationError, InvalidTransitionError


def test_sign_in_flow():
    auth = AuthSession()
    assert not auth.can_fetch

    auth.begin_sign_in()
    assert auth.state is AuthState.AUTHENTICATING
    assert not auth.can_fetch

    auth.sign_in_succeeded(7)
    assert auth.state is AuthState.AUTHENTICATED
    assert auth.can_fetch
    assert auth.require_user() == 7


def test_failed_sign_in_returns_to_unauthenticated():
    auth = AuthSession()
    auth.begin_sign_in()
    auth.sign_in_failed()

    assert auth.state is AuthState.UNAUTHENTICATED
    assert auth.user_id is None


def test_success_without_begin_is_rejected():
    auth = AuthSession()
    with pytest.raises(InvalidTransitionError):
        auth.sign_in_succeeded(1)
    assert auth.user_id is None


def test_password_recovery_blocks_fetching_until_completed():
    auth = AuthSession()
    auth.enter_password_recovery(3)

    assert auth.state is AuthState.PASSWORD_RECOVERY
    assert not auth.can_fetch
    with pytest.raises(AuthenticationError):
        auth.require_user()

    auth.recovery_completed()
    assert auth.can_fetch
    assert auth.user_id == 3


def test_recovery_for_another_account_is_rejected():
    auth = AuthSession.authenticated(1)
    with pytest.raises(InvalidTransitionError):
        auth.enter_password_recovery(2)
    assert auth.state is AuthState.AUTHENTICATED


def test_sign_out_from_any_state_notifies_listeners():
    seen = []
    auth = AuthSession.authenticated(1)
    auth.subscribe(lambda prev, cur: seen.append((prev, cur)))

    auth.sign_out()

    assert seen == [(AuthState.AUTHENTICATED, AuthState.UNAUTHENTICATED)]
    assert auth.user_id is None


def test_round_trip_through_mapping():
    auth = AuthSession.authenticated(5)
    restored = AuthSession.from_mapping(auth.to_mapping())

    assert restored.state is AuthState.AUTHENTICATED
    assert restored.user_id == 5


@pytest.mark.parametrize(
    "data",
    [
        {},
        {"auth_state": "bogus", "user_id": 1},
        {"auth_state": "AUTHENTICATED"},
    ],
)
def test_incomplete_mapping_means_signed_out(data):
    assert AuthSession.from_mapping(data).state is AuthState.UNAUTHENTICATED
