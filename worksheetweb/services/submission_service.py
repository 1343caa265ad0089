"""SubmissionService — submitting, listing and grading worksheet answers."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.dao.base import Page, resolve_window
from worksheetweb.dao.submission_dao import SubmissionDAO
from worksheetweb.dao.user_dao import UserDAO
from worksheetweb.dao.worksheet_dao import WorksheetDAO
from worksheetweb.models.submission import Submission
from worksheetweb.services import NotFoundError

log = structlog.get_logger("worksheetweb.submissions")


def _as_float(value: Decimal | None) -> float | None:
    return float(value) if value is not None else None


class SubmissionService:
    """Stateless service for the submission lifecycle."""

    def __init__(
        self,
        submission_dao: SubmissionDAO,
        worksheet_dao: WorksheetDAO,
        user_dao: UserDAO,
    ) -> None:
        self._submission_dao = submission_dao
        self._worksheet_dao = worksheet_dao
        self._user_dao = user_dao

    # -- read --------------------------------------------------------------

    async def list(
        self,
        session: AsyncSession,
        *,
        page: int | None = None,
        limit: int | None = None,
        student_id: int | None = None,
        worksheet_id: int | None = None,
        status: str | None = None,
    ) -> Page[dict[str, Any]]:
        return await self._submission_dao.list_page(
            session,
            resolve_window(page, limit),
            {"student_id": student_id, "worksheet_id": worksheet_id, "status": status},
        )

    async def list_by_student(
        self,
        session: AsyncSession,
        student_id: int,
        *,
        page: int | None = None,
        limit: int | None = None,
        status: str | None = None,
    ) -> Page[dict[str, Any]]:
        return await self._submission_dao.list_by_student(
            session, student_id, resolve_window(page, limit), status
        )

    async def list_by_worksheet(
        self,
        session: AsyncSession,
        worksheet_id: int,
        *,
        page: int | None = None,
        limit: int | None = None,
        status: str | None = None,
    ) -> Page[dict[str, Any]]:
        return await self._submission_dao.list_by_worksheet(
            session, worksheet_id, resolve_window(page, limit), status
        )

    async def get(self, session: AsyncSession, submission_id: int) -> dict[str, Any]:
        """Raises :class:`NotFoundError` if the submission does not exist."""
        submission = await self._submission_dao.get_detail(session, submission_id)
        if submission is None:
            raise NotFoundError("submission not found")
        return submission

    async def student_statistics(self, session: AsyncSession, student_id: int) -> dict[str, Any]:
        """Totals plus average/min/max over graded submissions.

        Score aggregates are None when nothing has been graded yet.
        """
        row = await self._submission_dao.student_statistics(session, student_id)
        return {
            "total_submissions": row["total_submissions"],
            "graded_submissions": row["graded_submissions"],
            "average_score": _as_float(row["average_score"]),
            "min_score": _as_float(row["min_score"]),
            "max_score": _as_float(row["max_score"]),
        }

    # -- write -------------------------------------------------------------

    async def submit(
        self,
        session: AsyncSession,
        *,
        worksheet_id: int,
        student_id: int,
        answers: str,
    ) -> Submission:
        """Record a pending submission.

        Raises :class:`NotFoundError` if the worksheet or student is unknown.
        """
        if not await self._worksheet_dao.exists(session, worksheet_id):
            raise NotFoundError("worksheet not found")
        if not await self._user_dao.exists(session, student_id):
            raise NotFoundError("student not found")

        submission = await self._submission_dao.create(
            session,
            worksheet_id=worksheet_id,
            student_id=student_id,
            answers=answers,
            status="pending",
        )
        log.info(
            "worksheet submitted",
            submission_id=submission.id,
            worksheet_id=worksheet_id,
            student_id=student_id,
        )
        return submission

    async def grade(
        self,
        session: AsyncSession,
        submission_id: int,
        *,
        score: Decimal,
        graded_by: int,
        feedback: str | None = None,
    ) -> Submission:
        """Grade a submission and move it to ``graded``.

        Raises :class:`NotFoundError` if the submission or grader is unknown.
        """
        if not await self._user_dao.exists(session, graded_by):
            raise NotFoundError("grader not found")

        submission = await self._submission_dao.grade(
            session,
            submission_id,
            score=score,
            feedback=feedback,
            graded_by=graded_by,
        )
        if submission is None:
            raise NotFoundError("submission not found")
        log.info("submission graded", submission_id=submission_id, score=str(score))
        return submission
