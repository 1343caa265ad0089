"""users table."""

from typing import Optional

from sqlalchemy import CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from worksheetweb.core.database import Base, TimestampMixin

USER_ROLES = ("student", "teacher", "parent")


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    grade_level: Mapped[Optional[str]] = mapped_column(String(50))

    __table_args__ = (
        CheckConstraint(
            "role IN ('student', 'teacher', 'parent')",
            name="role",
        ),
    )
