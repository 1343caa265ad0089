"""WorksheetService — worksheet catalogue, listing and statistics."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.dao.base import Page, resolve_window
from worksheetweb.dao.user_dao import UserDAO
from worksheetweb.dao.worksheet_dao import UPDATABLE_FIELDS, WorksheetDAO
from worksheetweb.models.worksheet import Worksheet
from worksheetweb.services import NotFoundError, pick_updates

log = structlog.get_logger("worksheetweb.worksheets")

SAMPLE_WORKSHEETS: list[dict[str, Any]] = [
    {
        "title": "Basic Fractions",
        "subject": "math",
        "description": "Learn to identify and compare simple fractions",
        "content": "Fraction worksheet content...",
        "level": "Beginner",
        "stage": "Elementary",
        "tags": ["fractions", "math", "elementary"],
    },
    {
        "title": "Grammar Essentials",
        "subject": "english",
        "description": "Practice with nouns, verbs, and sentence structure",
        "content": "Grammar worksheet content...",
        "level": "Intermediate",
        "stage": "Middle School",
        "tags": ["grammar", "english", "middle-school"],
    },
    {
        "title": "Solar System",
        "subject": "science",
        "description": "Explore planets and celestial bodies",
        "content": "Science worksheet content...",
        "level": "Beginner",
        "stage": "Elementary",
        "tags": ["science", "solar-system", "planets"],
    },
    {
        "title": "Algebra Basics",
        "subject": "math",
        "description": "Introduction to variables and simple equations",
        "content": "Algebra worksheet content...",
        "level": "Intermediate",
        "stage": "Middle School",
        "tags": ["algebra", "math", "equations"],
    },
    {
        "title": "Ancient Civilizations",
        "subject": "history",
        "description": "Explore early human societies and cultures",
        "content": "History worksheet content...",
        "level": "Intermediate",
        "stage": "Middle School",
        "tags": ["history", "ancient", "civilizations"],
    },
]


class WorksheetService:
    """Stateless service for worksheet CRUD and the filtered list."""

    def __init__(self, worksheet_dao: WorksheetDAO, user_dao: UserDAO) -> None:
        self._worksheet_dao = worksheet_dao
        self._user_dao = user_dao

    async def list(
        self,
        session: AsyncSession,
        *,
        page: int | None = None,
        limit: int | None = None,
        subject: str | None = None,
        level: str | None = None,
        stage: str | None = None,
        search: str | None = None,
    ) -> Page[dict[str, Any]]:
        """Return one page of worksheets, newest first."""
        return await self._worksheet_dao.list_page(
            session,
            resolve_window(page, limit),
            {"subject": subject, "level": level, "stage": stage, "search": search},
        )

    async def get(self, session: AsyncSession, worksheet_id: int) -> dict[str, Any]:
        """Return the worksheet with its author's name.

        Raises :class:`NotFoundError` if the worksheet does not exist.
        """
        worksheet = await self._worksheet_dao.get_detail(session, worksheet_id)
        if worksheet is None:
            raise NotFoundError("worksheet not found")
        return worksheet

    async def create(
        self,
        session: AsyncSession,
        *,
        title: str,
        subject: str,
        content: str,
        level: str,
        stage: str,
        created_by: int,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> Worksheet:
        """Raises :class:`NotFoundError` if *created_by* is not a known user."""
        if not await self._user_dao.exists(session, created_by):
            raise NotFoundError("user not found")

        worksheet = await self._worksheet_dao.create(
            session,
            title=title,
            subject=subject,
            description=description,
            content=content,
            level=level,
            stage=stage,
            created_by=created_by,
            tags=tags or [],
        )
        log.info("worksheet created", worksheet_id=worksheet.id, subject=subject)
        return worksheet

    async def update(self, session: AsyncSession, worksheet_id: int, **updates: Any) -> Worksheet:
        """Apply whitelisted *updates*; unknown keys are ignored.

        An explicit ``None`` clears ``description``. Raises
        :class:`ValidationError` for ``None`` on a required field and
        :class:`NotFoundError` if the worksheet does not exist or no
        updatable field was supplied.
        """
        values = pick_updates(
            updates, UPDATABLE_FIELDS, self._worksheet_dao.nullable_columns()
        )
        if not values:
            raise NotFoundError("worksheet not found or no valid updates")
        worksheet = await self._worksheet_dao.update(session, worksheet_id, **values)
        if worksheet is None:
            raise NotFoundError("worksheet not found or no valid updates")
        return worksheet

    async def delete(self, session: AsyncSession, worksheet_id: int) -> None:
        """Raises :class:`NotFoundError` if the worksheet does not exist."""
        if not await self._worksheet_dao.delete(session, worksheet_id):
            raise NotFoundError("worksheet not found")
        log.info("worksheet deleted", worksheet_id=worksheet_id)

    async def statistics(self, session: AsyncSession) -> dict[str, Any]:
        """Worksheet totals with a per-subject, per-level breakdown."""
        rows = await self._worksheet_dao.subject_level_counts(session)

        subjects: dict[str, dict[str, Any]] = {}
        for subject, level, cnt in rows:
            entry = subjects.setdefault(subject, {"subject": subject, "count": 0, "levels": {}})
            entry["count"] += cnt
            entry["levels"][level] = cnt

        return {
            "total_worksheets": sum(entry["count"] for entry in subjects.values()),
            "total_subjects": len(subjects),
            "subjects": list(subjects.values()),
        }

    async def seed_sample_data(self, session: AsyncSession) -> int:
        """Insert the sample worksheets if the table is empty.

        Returns the number of rows inserted.
        """
        if await self._worksheet_dao.count(session) > 0:
            return 0
        created = await self._worksheet_dao.bulk_create(session, SAMPLE_WORKSHEETS)
        log.info("sample worksheets seeded", count=len(created))
        return len(created)
