"""User accounts: registration, login and the dummy login used by testers."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pvz.auth import TokenIssuer, hash_password, verify_password
from pvz.exceptions import (
    EmailAlreadyRegistered,
    InvalidCredentials,
    InvalidPassword,
    InvalidRole,
    StoreError,
    UserNotFound,
)
from pvz.models import User, UserRole

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def parse_role(value: str | UserRole) -> UserRole:
    try:
        return UserRole(value)
    except ValueError:
        logger.warning("Invalid role: %r", value)
        raise InvalidRole() from None


class UserAccounts:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        tokens: TokenIssuer,
    ) -> None:
        self._session_factory = session_factory
        self._tokens = tokens

    async def _get_by_email(self, session: AsyncSession, email: str) -> User | None:
        result = await session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def dummy_login(self, role: str | UserRole) -> str:
        """Return a token for the shared test user of *role*, creating it once."""
        role = parse_role(role)
        email = f"dummy.{role.value}@example.com"

        try:
            async with self._session_factory() as session, session.begin():
                user = await self._get_by_email(session, email)
                if user is None:
                    user = User(id=uuid.uuid4(), email=email, password_hash="", role=role.value)
                    session.add(user)
                    await session.flush()
                    logger.info("Created dummy %s user %s", role.value, user.id)
        except IntegrityError:
            # Another request created the same dummy user first.
            logger.info("Dummy %s user created concurrently, reusing it", role.value)
            user = await self._reload_by_email(email)
        except SQLAlchemyError as exc:
            logger.error("Dummy login failed for role %s: %s", role.value, exc)
            raise StoreError("failed to create user") from exc

        return self._tokens.issue(user)

    async def _reload_by_email(self, email: str) -> User:
        try:
            async with self._session_factory() as session:
                user = await self._get_by_email(session, email)
        except SQLAlchemyError as exc:
            logger.error("Failed to get user by email: %s", exc)
            raise StoreError("failed to get user by email") from exc

        if user is None:
            raise StoreError("failed to create user")
        return user

    async def register(
        self, email: str, password: str, role: str | UserRole
    ) -> tuple[User, str]:
        role = parse_role(role)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidPassword()
        password_hash = hash_password(password)

        try:
            async with self._session_factory() as session, session.begin():
                if await self._get_by_email(session, email) is not None:
                    raise EmailAlreadyRegistered()
                user = User(
                    id=uuid.uuid4(),
                    email=email,
                    password_hash=password_hash,
                    role=role.value,
                )
                session.add(user)
                await session.flush()
        except IntegrityError as exc:
            raise EmailAlreadyRegistered() from exc
        except SQLAlchemyError as exc:
            logger.error("Failed to register %s: %s", email, exc)
            raise StoreError("failed to create user") from exc

        logger.info("Registered %s user %s", user.role, user.id)
        return user, self._tokens.issue(user)

    async def login(self, email: str, password: str) -> str:
        try:
            async with self._session_factory() as session:
                user = await self._get_by_email(session, email)
        except SQLAlchemyError as exc:
            logger.error("Failed to get user by email: %s", exc)
            raise StoreError("failed to get user by email") from exc

        if user is None or not user.password_hash or not verify_password(password, user.password_hash):
            logger.warning("Failed login for %s", email)
            raise InvalidCredentials()
        return self._tokens.issue(user)

    async def get_user(self, user_id: uuid.UUID) -> User:
        try:
            async with self._session_factory() as session:
                user = await session.get(User, user_id)
        except SQLAlchemyError as exc:
            logger.error("Failed to get user %s: %s", user_id, exc)
            raise StoreError("failed to get user by id") from exc

        if user is None:
            raise UserNotFound()
        return user
