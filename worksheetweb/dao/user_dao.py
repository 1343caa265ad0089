"""UserDAO — users table operations."""

from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.dao.base import BaseDAO
from worksheetweb.models.user import User

PROFILE_FIELDS = frozenset({"name", "grade_level"})


class UserDAO(BaseDAO[User]):
    model = User

    async def get_by_email(self, session: AsyncSession, email: str) -> User | None:
        """Look up a user by email (login flow)."""
        return await self.get_by_field(session, email=email)
