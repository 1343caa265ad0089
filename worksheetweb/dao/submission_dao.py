"""SubmissionDAO — submissions table operations."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from worksheetweb.dao.base import BaseDAO, Page, Window
from worksheetweb.dao.filters import ExactMatch, FilterSpec, build_predicate
from worksheetweb.models.submission import Submission
from worksheetweb.models.user import User
from worksheetweb.models.worksheet import Worksheet

SUBMISSION_FILTERS: dict[str, FilterSpec] = {
    "student_id": ExactMatch(Submission.student_id),
    "worksheet_id": ExactMatch(Submission.worksheet_id),
    "status": ExactMatch(Submission.status),
}

_student = aliased(User, name="student")
_grader = aliased(User, name="grader")


def _student_view() -> Select:
    """submissions.* with the worksheet's title and subject."""
    return select(
        *Submission.__table__.c,
        Worksheet.title.label("worksheet_title"),
        Worksheet.subject.label("worksheet_subject"),
    ).join(Worksheet, Submission.worksheet_id == Worksheet.id)


def _worksheet_view() -> Select:
    """submissions.* with the student's name and grade level."""
    return select(
        *Submission.__table__.c,
        _student.name.label("student_name"),
        _student.grade_level.label("grade_level"),
    ).join(_student, Submission.student_id == _student.id)


def _full_view() -> Select:
    """submissions.* with worksheet, student and grader display fields."""
    return (
        select(
            *Submission.__table__.c,
            Worksheet.title.label("worksheet_title"),
            Worksheet.subject.label("worksheet_subject"),
            _student.name.label("student_name"),
            _grader.name.label("grader_name"),
        )
        .join(Worksheet, Submission.worksheet_id == Worksheet.id)
        .join(_student, Submission.student_id == _student.id)
        .outerjoin(_grader, Submission.graded_by == _grader.id)
    )


class SubmissionDAO(BaseDAO[Submission]):
    model = Submission

    # ── read ──────────────────────────────────────────────────────────────

    async def _page(
        self,
        session: AsyncSession,
        query: Select,
        window: Window,
        filters: Mapping[str, Any],
    ) -> Page[dict[str, Any]]:
        predicate = build_predicate(SUBMISSION_FILTERS, filters)
        return await self.fetch_page(
            session, query, predicate, window, order_by=Submission.submitted_at
        )

    async def list_page(
        self,
        session: AsyncSession,
        window: Window,
        filters: Mapping[str, Any] | None = None,
    ) -> Page[dict[str, Any]]:
        """Newest-first submissions with every display field (API list)."""
        return await self._page(session, _full_view(), window, filters or {})

    async def list_by_student(
        self,
        session: AsyncSession,
        student_id: int,
        window: Window,
        status: str | None = None,
    ) -> Page[dict[str, Any]]:
        """A student's submissions, annotated with worksheet title/subject."""
        return await self._page(
            session, _student_view(), window, {"student_id": student_id, "status": status}
        )

    async def list_by_worksheet(
        self,
        session: AsyncSession,
        worksheet_id: int,
        window: Window,
        status: str | None = None,
    ) -> Page[dict[str, Any]]:
        """A worksheet's submissions, annotated with student name/grade level."""
        return await self._page(
            session, _worksheet_view(), window, {"worksheet_id": worksheet_id, "status": status}
        )

    async def get_detail(self, session: AsyncSession, submission_id: int) -> dict[str, Any] | None:
        """Single submission row with all display fields, or None."""
        self._require_pk(submission_id)
        stmt = _full_view().where(Submission.id == submission_id)
        result = await session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def student_statistics(self, session: AsyncSession, student_id: int) -> dict[str, Any]:
        """Submission totals and graded score aggregates for one student."""
        graded = Submission.status == "graded"
        stmt = select(
            func.count().label("total_submissions"),
            func.count().filter(graded).label("graded_submissions"),
            func.avg(Submission.score).filter(graded).label("average_score"),
            func.min(Submission.score).filter(graded).label("min_score"),
            func.max(Submission.score).filter(graded).label("max_score"),
        ).where(Submission.student_id == student_id)
        result = await session.execute(stmt)
        return dict(result.mappings().one())

    # ── write ─────────────────────────────────────────────────────────────

    async def grade(
        self,
        session: AsyncSession,
        pk: int,
        *,
        score: Decimal,
        feedback: str | None,
        graded_by: int,
    ) -> Submission | None:
        """Record a grade and mark the submission ``graded``.

        Returns the updated row, or None if *pk* does not exist.
        """
        self._require_pk(pk)
        stmt = (
            update(Submission)
            .where(Submission.id == pk)
            .values(
                score=score,
                feedback=feedback,
                graded_by=graded_by,
                graded_at=func.now(),
                status="graded",
            )
            .returning(Submission)
        )
        result = await session.execute(stmt)
        obj = result.scalars().first()
        if obj is not None:
            await session.refresh(obj)
        return obj
