"""WorksheetDAO — worksheets table operations."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Text, cast, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.dao.base import BaseDAO, Page, Window
from worksheetweb.dao.filters import ExactMatch, FilterSpec, SubstringMatch, build_predicate
from worksheetweb.models.user import User
from worksheetweb.models.worksheet import Worksheet

WORKSHEET_FILTERS: dict[str, FilterSpec] = {
    "subject": ExactMatch(Worksheet.subject),
    "level": ExactMatch(Worksheet.level),
    "stage": ExactMatch(Worksheet.stage),
    "search": SubstringMatch(
        (Worksheet.title, Worksheet.description, cast(Worksheet.tags, Text))
    ),
}

UPDATABLE_FIELDS = frozenset({"title", "subject", "description", "content", "level", "stage", "tags"})


def _with_author():
    """worksheets.* plus the author's display name."""
    return select(
        *Worksheet.__table__.c,
        User.name.label("author_name"),
    ).outerjoin(User, Worksheet.created_by == User.id)


class WorksheetDAO(BaseDAO[Worksheet]):
    model = Worksheet

    # ── read ──────────────────────────────────────────────────────────────

    async def list_page(
        self,
        session: AsyncSession,
        window: Window,
        filters: Mapping[str, Any] | None = None,
    ) -> Page[dict[str, Any]]:
        """Newest-first worksheet list filtered by subject/level/stage/search."""
        predicate = build_predicate(WORKSHEET_FILTERS, filters or {})
        return await self.fetch_page(
            session, _with_author(), predicate, window, order_by=Worksheet.created_at
        )

    async def get_detail(self, session: AsyncSession, worksheet_id: int) -> dict[str, Any] | None:
        """Single worksheet row with ``author_name``, or None."""
        self._require_pk(worksheet_id)
        stmt = _with_author().where(Worksheet.id == worksheet_id)
        result = await session.execute(stmt)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def subject_level_counts(self, session: AsyncSession) -> list[tuple[str, str, int]]:
        """(subject, level, count) for every populated pair, ordered by subject."""
        stmt = (
            select(Worksheet.subject, Worksheet.level, func.count().label("cnt"))
            .group_by(Worksheet.subject, Worksheet.level)
            .order_by(Worksheet.subject, Worksheet.level)
        )
        result = await session.execute(stmt)
        return [(row.subject, row.level, row.cnt) for row in result]

    # ── write ─────────────────────────────────────────────────────────────

    async def bulk_create(self, session: AsyncSession, items: list[dict[str, Any]]) -> list[Worksheet]:
        """Insert multiple worksheets in a single flush (sample data seeding)."""
        objs = [Worksheet(**vals) for vals in items]
        session.add_all(objs)
        await session.flush()
        return objs
