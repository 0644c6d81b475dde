"""Password hashing, JWT creation/validation, and role-based access."""

import logging
import uuid
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from pvz.config import Settings
from pvz.exceptions import InvalidToken, UserNotFound
from pvz.models import User, UserRole

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

AUTH_COOKIE = "auth_token"

# Which roles may run which operation.
OPERATION_ROLES: dict[str, frozenset[UserRole]] = {
    "create_pickup_point": frozenset({UserRole.MODERATOR}),
    "open_reception": frozenset({UserRole.EMPLOYEE}),
    "close_reception": frozenset({UserRole.EMPLOYEE}),
    "append_product": frozenset({UserRole.EMPLOYEE}),
    "remove_last_product": frozenset({UserRole.EMPLOYEE}),
    "list_pickup_points": frozenset({UserRole.EMPLOYEE, UserRole.MODERATOR}),
    "list_all_pickup_points": frozenset({UserRole.EMPLOYEE, UserRole.MODERATOR}),
    "get_last_reception_status": frozenset({UserRole.EMPLOYEE, UserRole.MODERATOR}),
}


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def is_allowed(operation: str, role: str | UserRole) -> bool:
    """Unknown operations and roles are denied."""
    try:
        role = UserRole(role)
    except ValueError:
        return False
    return role in OPERATION_ROLES.get(operation, frozenset())


class TokenIssuer:
    """Signs and verifies access tokens with the configured secret."""

    def __init__(self, settings: Settings) -> None:
        self._secret = settings.jwt_secret_key
        self._algorithm = settings.jwt_algorithm
        self.expire = timedelta(hours=settings.jwt_expire_hours)

    def issue(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iat": now,
            "exp": now + self.expire,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> uuid.UUID:
        """Return the user id carried by *token*."""
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
            return uuid.UUID(payload["sub"])
        except (JWTError, KeyError, TypeError, ValueError):
            raise InvalidToken() from None


# ---------------------------------------------------------------------------
# FastAPI dependencies
# ---------------------------------------------------------------------------


def _extract_token(request: Request, credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is not None:
        return credentials.credentials
    token = request.cookies.get(AUTH_COOKIE)
    if token:
        return token
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="no authentication token found",
    )


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> User:
    """Require a valid JWT and return the authenticated user."""
    container = request.app.state.container
    token = _extract_token(request, credentials)
    try:
        user_id = container.tokens.decode(token)
        return await container.users.get_user(user_id)
    except (InvalidToken, UserNotFound) as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=exc.message)


def require_permission(operation: str):
    """Dependency factory: the current user must hold a role allowed for *operation*."""
    if operation not in OPERATION_ROLES:
        raise ValueError(f"Unknown operation: {operation}")

    async def dependency(user: User = Depends(get_current_user)) -> User:
        if not is_allowed(operation, user.role):
            logger.warning("Role %s not allowed to %s", user.role, operation)
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user

    return dependency
