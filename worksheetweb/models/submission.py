"""submissions table."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    desc,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from worksheetweb.core.database import Base

SUBMISSION_STATUSES = ("pending", "reviewed", "graded")


class Submission(Base):
    __tablename__ = "submissions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    worksheet_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("worksheets.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    answers: Mapped[str] = mapped_column(Text, nullable=False)
    score: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2))
    feedback: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(50), nullable=False, server_default=text("'pending'")
    )
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    graded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    graded_by: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("users.id"))

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'reviewed', 'graded')",
            name="status",
        ),
        Index("idx_submissions_student", "student_id", desc("submitted_at")),
        Index("idx_submissions_worksheet", "worksheet_id", desc("submitted_at")),
    )
