"""SQLAlchemy ORM models — one file per table."""

from worksheetweb.models.submission import Submission
from worksheetweb.models.user import User
from worksheetweb.models.worksheet import Worksheet

__all__ = [
    "User",
    "Worksheet",
    "Submission",
]
