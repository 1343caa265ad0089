"""AuthService — registration, login and JWT verification."""

import os
from datetime import datetime, timedelta, timezone

import bcrypt
import structlog
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.dao.user_dao import PROFILE_FIELDS, UserDAO
from worksheetweb.models.user import User
from worksheetweb.services import (
    AuthenticationError,
    ConflictError,
    ValidationError,
    pick_updates,
)

log = structlog.get_logger("worksheetweb.auth")

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def _hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=10)).decode()


def _verify_password(password: str, password_hash: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode(), password_hash.encode())


# ---------------------------------------------------------------------------
# JWT configuration
# ---------------------------------------------------------------------------

# Pre-computed bcrypt hash for timing-safe login (user-not-found path)
_DUMMY_HASH = bcrypt.hashpw(b"dummy", bcrypt.gensalt(rounds=10)).decode()

_ALGORITHM = "HS256"
_TOKEN_EXPIRE = timedelta(days=7)

_ENV_JWT_SECRET = "WORKSHEETWEB_JWT_SECRET"

# Unique constraint on users.email (named by the metadata naming convention).
_EMAIL_CONSTRAINT = "uq_users_email"


def _get_secret() -> str:
    """Read JWT secret from environment. Raises if not set."""
    secret = os.environ.get(_ENV_JWT_SECRET)
    if not secret:
        raise RuntimeError(f"{_ENV_JWT_SECRET} environment variable is required")
    return secret


class AuthResult:
    """Authenticated user plus the bearer token issued for them."""

    __slots__ = ("user", "token")

    def __init__(self, user: User, token: str) -> None:
        self.user = user
        self.token = token


# ---------------------------------------------------------------------------
# AuthService
# ---------------------------------------------------------------------------


class AuthService:
    """Stateless authentication service.

    Tokens are HS256 JWTs carrying the user's id (``sub``), email and role,
    valid for seven days. Logout is client-side: nothing is stored here.
    """

    def __init__(self, user_dao: UserDAO) -> None:
        self._user_dao = user_dao

    def issue_token(self, user: User) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": str(user.id),
                "email": user.email,
                "role": user.role,
                "exp": now + _TOKEN_EXPIRE,
            },
            _get_secret(),
            algorithm=_ALGORITHM,
        )

    async def register(
        self,
        session: AsyncSession,
        *,
        email: str,
        password: str,
        name: str,
        role: str,
        grade_level: str | None = None,
    ) -> AuthResult:
        """Create a user account and sign them in.

        Raises :class:`ConflictError` if the email is already registered.
        """
        if await self._user_dao.get_by_email(session, email) is not None:
            raise ConflictError("email already registered")

        try:
            user = await self._user_dao.create(
                session,
                email=email,
                password_hash=_hash_password(password),
                name=name,
                role=role,
                grade_level=grade_level,
            )
        except IntegrityError as exc:
            # A concurrent registration won the race past the lookup above.
            if _EMAIL_CONSTRAINT in str(exc.orig):
                raise ConflictError("email already registered") from exc
            raise
        log.info("user registered", user_id=user.id, role=role)
        return AuthResult(user, self.issue_token(user))

    async def login(self, session: AsyncSession, email: str, password: str) -> AuthResult:
        """Verify credentials and issue a token.

        Raises :class:`AuthenticationError` on invalid credentials.
        Does not distinguish between "user not found" and "wrong password".
        """
        user = await self._user_dao.get_by_email(session, email)
        if user is None:
            # Constant-time: run bcrypt even when user doesn't exist
            _verify_password(password, _DUMMY_HASH)
            raise AuthenticationError("invalid credentials")
        if not _verify_password(password, user.password_hash):
            raise AuthenticationError("invalid credentials")

        return AuthResult(user, self.issue_token(user))

    async def get_current_user(self, session: AsyncSession, token: str) -> User:
        """Decode a bearer token and return the corresponding user.

        Raises :class:`AuthenticationError` on invalid token or unknown user.
        """
        try:
            payload = jwt.decode(token, _get_secret(), algorithms=[_ALGORITHM])
        except JWTError:
            raise AuthenticationError("invalid access token")

        try:
            user_id = int(payload["sub"])
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError("invalid token payload")

        user = await self._user_dao.get_by_id(session, user_id)
        if user is None:
            raise AuthenticationError("user not found")
        return user

    async def update_profile(self, session: AsyncSession, user: User, **updates) -> User:
        """Apply ``name`` / ``grade_level`` changes; other keys are ignored.

        An explicit ``None`` clears ``grade_level``. Raises
        :class:`ValidationError` if nothing updatable was supplied or
        ``name`` is sent as ``None``.
        """
        values = pick_updates(updates, PROFILE_FIELDS, self._user_dao.nullable_columns())
        if not values:
            raise ValidationError("no valid updates")
        return await self._user_dao.update(session, user.id, **values)
