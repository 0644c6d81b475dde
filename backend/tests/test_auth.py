"""Tests for tokens, the permission table and user accounts."""

import uuid

import pytest

from pvz.auth import OPERATION_ROLES, TokenIssuer, hash_password, is_allowed, verify_password
from pvz.config import Settings
from pvz.container import Container
from pvz.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidPassword,
    InvalidRole,
    InvalidToken,
    UserNotFound,
)
from pvz.models import User, UserRole


class TestPermissions:
    def test_moderator_creates_pickup_points(self):
        assert is_allowed("create_pickup_point", UserRole.MODERATOR)
        assert not is_allowed("create_pickup_point", UserRole.EMPLOYEE)

    @pytest.mark.parametrize(
        "operation",
        ["open_reception", "close_reception", "append_product", "remove_last_product"],
    )
    def test_employee_only_operations(self, operation):
        assert is_allowed(operation, "employee")
        assert not is_allowed(operation, "moderator")

    def test_listing_open_to_both_roles(self):
        for role in UserRole:
            assert is_allowed("list_pickup_points", role)
            assert is_allowed("list_all_pickup_points", role)

    def test_unknown_operation_or_role_denied(self):
        assert not is_allowed("drop_database", UserRole.MODERATOR)
        assert not is_allowed("list_pickup_points", "admin")

    def test_every_operation_has_roles(self):
        assert all(OPERATION_ROLES.values())


class TestTokens:
    def setup_method(self):
        self.tokens = TokenIssuer(Settings(jwt_secret_key="unit-secret", jwt_expire_hours=1))
        self.user = User(id=uuid.uuid4(), email="a@example.com", password_hash="", role="employee")

    def test_round_trip(self):
        token = self.tokens.issue(self.user)
        assert self.tokens.decode(token) == self.user.id

    def test_wrong_secret(self):
        other = TokenIssuer(Settings(jwt_secret_key="another-secret"))
        with pytest.raises(InvalidToken):
            other.decode(self.tokens.issue(self.user))

    def test_expired(self):
        expired = TokenIssuer(Settings(jwt_secret_key="unit-secret", jwt_expire_hours=-1))
        with pytest.raises(InvalidToken):
            self.tokens.decode(expired.issue(self.user))

    def test_garbage(self):
        with pytest.raises(InvalidToken):
            self.tokens.decode("not-a-token")


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("wrong", hashed)


# --- Accounts ---

@pytest.mark.asyncio
async def test_dummy_login_reuses_user(container: Container):
    first = await container.users.dummy_login("employee")
    second = await container.users.dummy_login(UserRole.EMPLOYEE)
    assert container.tokens.decode(first) == container.tokens.decode(second)

    user = await container.users.get_user(container.tokens.decode(first))
    assert user.email == "dummy.employee@example.com"
    assert user.role == "employee"


@pytest.mark.asyncio
async def test_dummy_login_invalid_role(container: Container):
    with pytest.raises(InvalidRole):
        await container.users.dummy_login("admin")


@pytest.mark.asyncio
async def test_register_and_login(container: Container):
    user, token = await container.users.register("mod@example.com", "secret123", "moderator")
    assert user.role == "moderator"
    assert user.password_hash != "secret123"
    assert container.tokens.decode(token) == user.id

    login_token = await container.users.login("mod@example.com", "secret123")
    assert container.tokens.decode(login_token) == user.id


@pytest.mark.asyncio
async def test_register_duplicate_email(container: Container):
    await container.users.register("dup@example.com", "secret123", "employee")
    with pytest.raises(EmailAlreadyRegistered):
        await container.users.register("dup@example.com", "secret456", "moderator")


@pytest.mark.asyncio
async def test_register_short_password(container: Container):
    with pytest.raises(InvalidPassword):
        await container.users.register("short@example.com", "123", "employee")


@pytest.mark.asyncio
async def test_login_failures(container: Container):
    await container.users.register("emp@example.com", "secret123", "employee")
    with pytest.raises(InvalidCredentials):
        await container.users.login("emp@example.com", "wrong-password")
    with pytest.raises(InvalidCredentials):
        await container.users.login("nobody@example.com", "secret123")


@pytest.mark.asyncio
async def test_dummy_user_cannot_password_login(container: Container):
    await container.users.dummy_login("employee")
    with pytest.raises(InvalidCredentials):
        await container.users.login("dummy.employee@example.com", "")


@pytest.mark.asyncio
async def test_get_missing_user(container: Container):
    with pytest.raises(UserNotFound):
        await container.users.get_user(uuid.uuid4())


@pytest.mark.asyncio
async def test_dummy_login_reuses_user_created_concurrently(container: Container, monkeypatch):
    first = await container.users.dummy_login("moderator")
    original = container.users._get_by_email
    calls = []

    async def miss_once(session, email):
        # The first lookup misses, as if another request inserted the user
        # right after it.
        calls.append(email)
        if len(calls) == 1:
            return None
        return await original(session, email)

    monkeypatch.setattr(container.users, "_get_by_email", miss_once)
    second = await container.users.dummy_login("moderator")

    assert len(calls) == 2
    assert container.tokens.decode(second) == container.tokens.decode(first)
