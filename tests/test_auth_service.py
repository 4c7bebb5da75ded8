"""Tests for AuthService registration and login rules."""

import pytest

from server.exceptions import InvalidCredentialsError, UserAlreadyExistsError, ValidationError
from server.security import hash_password, verify_password
from server.services.auth_service import AuthService


@pytest.fixture
def auth_service(user_repo):
    return AuthService(user_repo)


def test_register_hashes_password(auth_service, user_repo):
    user = auth_service.register_user("carol", "pw123")

    stored = user_repo.get_by_id(user.id)
    assert stored.password_hash != "pw123"
    assert stored.password_hash.startswith("$2")
    assert verify_password("pw123", stored.password_hash)


def test_register_then_login(auth_service):
    registered = auth_service.register_user("carol", "pw123")
    logged_in = auth_service.login_user("carol", "pw123")

    assert logged_in.id == registered.id
    assert logged_in.username == "carol"


def test_register_duplicate(auth_service):
    auth_service.register_user("carol", "pw123")

    with pytest.raises(UserAlreadyExistsError):
        auth_service.register_user("carol", "other")


@pytest.mark.parametrize("username,password", [
    (None, "pw123"),
    ("carol", None),
    ("", "pw123"),
    ("carol", ""),
])
def test_register_requires_both_fields(auth_service, username, password):
    with pytest.raises(ValidationError, match="required"):
        auth_service.register_user(username, password)


def test_register_minimum_lengths(auth_service):
    with pytest.raises(ValidationError, match="Username must be at least 3"):
        auth_service.register_user("ab", "pw123")
    with pytest.raises(ValidationError, match="Password must be at least 3"):
        auth_service.register_user("carol", "pw")


def test_register_rejects_overlong_password(auth_service):
    with pytest.raises(ValidationError, match="72 bytes"):
        auth_service.register_user("carol", "p" * 73)


def test_login_wrong_password(auth_service, alice):
    with pytest.raises(InvalidCredentialsError):
        auth_service.login_user("alice", "wrong")


def test_login_unknown_user(auth_service):
    with pytest.raises(InvalidCredentialsError):
        auth_service.login_user("ghost", "secret")


def test_login_requires_both_fields(auth_service):
    with pytest.raises(ValidationError):
        auth_service.login_user("alice", None)


def test_verify_password_rejects_malformed_hash():
    assert verify_password("secret", "not-a-bcrypt-hash") is False
    assert verify_password("secret", hash_password("secret")) is True
