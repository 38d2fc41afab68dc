from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from src.academix.academix.auth.service import AuthService
from src.academix.academix.core.exceptions import AuthenticationError, ValidationError


def test_sign_up_hashes_password_and_authenticates(accounts_repo):
    service = AuthService(accounts_repo)
    user = service.sign_up(full_name="Meera", email="Meera@Example.com", password="secret1")

    stored = accounts_repo.get_by_id(user.user_id)
    assert stored.email == "meera@example.com"
    assert stored.password_hash != "secret1"
    assert service.authenticate("meera@example.com", "secret1").user_id == user.user_id


def test_sign_up_rejects_short_password_and_duplicate_email(accounts_repo):
    service = AuthService(accounts_repo)
    with pytest.raises(ValidationError):
        service.sign_up(full_name="Meera", email="m@example.com", password="12345")

    service.sign_up(full_name="Meera", email="m@example.com", password="123456")
    with pytest.raises(ValidationError):
        service.sign_up(full_name="Other", email="m@example.com", password="123456")


def test_wrong_password_or_unknown_email(accounts_repo):
    service = AuthService(accounts_repo)
    service.sign_up(full_name="Meera", email="m@example.com", password="secret1")

    with pytest.raises(AuthenticationError):
        service.authenticate("m@example.com", "nope")
    with pytest.raises(AuthenticationError):
        service.authenticate("x@example.com", "secret1")


def test_placeholder_hash_never_authenticates(accounts_repo):
    service = AuthService(accounts_repo)
    user = service.sign_up(full_name="Meera", email="m@example.com", password="secret1")
    accounts_repo.accounts[user.user_id] = replace(accounts_repo.accounts[user.user_id], password_hash="CHANGE_ME")

    with pytest.raises(AuthenticationError):
        service.authenticate("m@example.com", "CHANGE_ME")


def test_recovery_token_then_update_password(accounts_repo):
    service = AuthService(accounts_repo)
    user = service.sign_up(full_name="Meera", email="m@example.com", password="secret1")

    token = service.begin_password_recovery("m@example.com")
    assert token
    assert service.verify_recovery_token("m@example.com", token).user_id == user.user_id
    with pytest.raises(AuthenticationError):
        service.verify_recovery_token("m@example.com", "wrong")

    service.update_password(user.user_id, "newpass")
    assert service.authenticate("m@example.com", "newpass").user_id == user.user_id
    # Used up with the password change.
    with pytest.raises(AuthenticationError):
        service.verify_recovery_token("m@example.com", token)


def test_recovery_for_unknown_email_issues_nothing(accounts_repo):
    assert AuthService(accounts_repo).begin_password_recovery("ghost@example.com") is None


def test_expired_recovery_token(accounts_repo):
    service = AuthService(accounts_repo)
    user = service.sign_up(full_name="Meera", email="m@example.com", password="secret1")
    token = service.begin_password_recovery("m@example.com")
    account = accounts_repo.accounts[user.user_id]
    accounts_repo.accounts[user.user_id] = replace(account, recovery_expires_at=datetime(2000, 1, 1))

    with pytest.raises(AuthenticationError):
        service.verify_recovery_token("m@example.com", token)


def test_update_password_enforces_minimum_length(accounts_repo):
    service = AuthService(accounts_repo)
    user = service.sign_up(full_name="Meera", email="m@example.com", password="secret1")
    with pytest.raises(ValidationError):
        service.update_password(user.user_id, "short")
