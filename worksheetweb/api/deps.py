"""Dependency injection — session, auth, and service singletons."""

from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from worksheetweb.dao.submission_dao import SubmissionDAO
from worksheetweb.dao.user_dao import UserDAO
from worksheetweb.dao.worksheet_dao import WorksheetDAO
from worksheetweb.models.user import User
from worksheetweb.services import AuthenticationError
from worksheetweb.services.auth_service import AuthService
from worksheetweb.services.submission_service import SubmissionService
from worksheetweb.services.worksheet_service import WorksheetService

# ---------------------------------------------------------------------------
# DAO singletons (stateless)
# ---------------------------------------------------------------------------
_user_dao = UserDAO()
_worksheet_dao = WorksheetDAO()
_submission_dao = SubmissionDAO()

# ---------------------------------------------------------------------------
# Service singletons (stateless)
# ---------------------------------------------------------------------------
_auth_service = AuthService(_user_dao)
_worksheet_service = WorksheetService(_worksheet_dao, _user_dao)
_submission_service = SubmissionService(_submission_dao, _worksheet_dao, _user_dao)


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


def get_session_factory(request: Request) -> async_sessionmaker[AsyncSession]:
    """Return the session factory the app lifespan stored on ``app.state``."""
    factory = getattr(request.app.state, "session_factory", None)
    if factory is None:
        raise RuntimeError("database not initialised; app lifespan did not run")
    return factory


async def get_session(
    factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> AsyncGenerator[AsyncSession, None]:
    """Yield a per-request session with automatic commit/rollback."""
    async with factory() as session:
        async with session.begin():
            yield session


# ---------------------------------------------------------------------------
# Auth dependency
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    session: AsyncSession = Depends(get_session),
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """Extract and validate Bearer token, return the authenticated User."""
    if credentials is None:
        raise AuthenticationError("missing authorization header")
    return await _auth_service.get_current_user(session, credentials.credentials)


# ---------------------------------------------------------------------------
# Service getters (for Depends())
# ---------------------------------------------------------------------------


def get_auth_service() -> AuthService:
    return _auth_service


def get_worksheet_service() -> WorksheetService:
    return _worksheet_service


def get_submission_service() -> SubmissionService:
    return _submission_service
