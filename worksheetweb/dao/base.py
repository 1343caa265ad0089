"""Generic base DAO — CRUD (ORM) + offset pagination (Core)."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy import exists as sa_exists
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.core.database import Base
from worksheetweb.dao.filters import Predicate

ModelT = TypeVar("ModelT", bound=Base)
T = TypeVar("T")

PAGE_DEFAULT = 1
LIMIT_MIN = 1
LIMIT_MAX = 50
LIMIT_DEFAULT = 10

# Label of the window aggregate folded into every list row.
TOTAL_COUNT_LABEL = "total_count"


@dataclass(frozen=True)
class Window:
    """Resolved (page, limit) pair. Always 1-based and within bounds."""

    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def resolve_window(page: int | None = None, limit: int | None = None) -> Window:
    """Coerce *page* and *limit* to their nearest valid bound.

    ``None`` selects the default. Out-of-range values are clamped, never
    rejected. Non-numeric input raises from ``int()``.
    """
    page = PAGE_DEFAULT if page is None else max(PAGE_DEFAULT, int(page))
    limit = LIMIT_DEFAULT if limit is None else max(LIMIT_MIN, min(int(limit), LIMIT_MAX))
    return Window(page=page, limit=limit)


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return math.ceil(self.total / self.limit)


@dataclass
class Page(Generic[T]):
    """One offset-paginated slice of a filtered result set."""

    items: list[T]
    pagination: Pagination


class BaseDAO(Generic[ModelT]):
    """Base data-access object. Subclasses set ``model`` class attribute."""

    model: type[ModelT]

    # ── ORM methods ──────────────────────────────────────────────────────

    @classmethod
    def nullable_columns(cls) -> frozenset[str]:
        """Column keys that accept NULL, i.e. may be cleared by an update."""
        return frozenset(c.key for c in cls.model.__table__.c if c.nullable)

    @staticmethod
    def _require_pk(pk: int) -> None:
        """Raise ValueError if *pk* is None."""
        if pk is None:
            raise ValueError("pk must not be None")

    async def get_by_id(self, session: AsyncSession, pk: int) -> ModelT | None:
        self._require_pk(pk)
        return await session.get(self.model, pk)

    async def create(self, session: AsyncSession, **values: Any) -> ModelT:
        obj = self.model(**values)
        session.add(obj)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def update(self, session: AsyncSession, pk: int, **values: Any) -> ModelT | None:
        self._require_pk(pk)
        obj = await session.get(self.model, pk)
        if obj is None:
            return None
        immutable = {"id", "created_at", "updated_at"}
        column_keys = set(self.model.__mapper__.column_attrs.keys())
        for key in values:
            if key in immutable:
                raise AttributeError(f"'{key}' is immutable and cannot be updated")
            if key not in column_keys:
                raise AttributeError(f"{self.model.__name__} has no column '{key}'")
        for key, val in values.items():
            setattr(obj, key, val)
        await session.flush()
        await session.refresh(obj)
        return obj

    async def delete(self, session: AsyncSession, pk: int) -> bool:
        self._require_pk(pk)
        obj = await session.get(self.model, pk)
        if obj is None:
            return False
        await session.delete(obj)
        await session.flush()
        return True

    async def exists(self, session: AsyncSession, pk: int) -> bool:
        """Check existence without loading the full ORM object."""
        self._require_pk(pk)
        table = self.model.__table__
        stmt = select(sa_exists().where(table.c.id == pk))
        result = await session.execute(stmt)
        return result.scalar_one()

    async def get_by_field(self, session: AsyncSession, **filters: Any) -> ModelT | None:
        """Return the first row matching all *filters*, or None.

        Raises ``ValueError`` if called without any filters.
        """
        if not filters:
            raise ValueError("get_by_field() requires at least one filter")
        stmt = select(self.model)
        for key, val in filters.items():
            stmt = stmt.where(getattr(self.model, key) == val)
        result = await session.execute(stmt)
        return result.scalars().first()

    # ── Core methods ─────────────────────────────────────────────────────

    async def fetch_page(
        self,
        session: AsyncSession,
        query: Select,
        predicate: Predicate,
        window: Window,
        order_by: ColumnElement[Any],
    ) -> Page[dict[str, Any]]:
        """Run one filtered, offset-paginated list query.

        *query* selects the entity columns plus any fixed display joins.
        Ordering (*order_by* DESC, id DESC), OFFSET and LIMIT are appended
        here. The total is read from ``COUNT(*) OVER ()`` on the first row,
        so rows and total come from the same snapshot.

        An empty page past the first row cannot carry the window total; in
        that case a separate ``COUNT(*)`` over the same predicate supplies it.
        """
        filtered = query.where(predicate.clause)
        stmt = (
            filtered.add_columns(func.count().over().label(TOTAL_COUNT_LABEL))
            .order_by(order_by.desc(), self.model.__table__.c.id.desc())
            .offset(window.offset)
            .limit(window.limit)
        )
        result = await session.execute(stmt)
        rows = result.mappings().all()

        if rows:
            total = int(rows[0][TOTAL_COUNT_LABEL])
        elif window.offset > 0:
            total = await self.count(session, filtered)
        else:
            total = 0

        items = [{k: v for k, v in row.items() if k != TOTAL_COUNT_LABEL} for row in rows]
        return Page(
            items=items,
            pagination=Pagination(page=window.page, limit=window.limit, total=total),
        )

    async def count(self, session: AsyncSession, query: Select | None = None) -> int:
        """Return the row count for *query*, or total rows if query is None."""
        if query is None:
            query = select(func.count()).select_from(self.model.__table__)
        else:
            query = select(func.count()).select_from(query.subquery())

        result = await session.execute(query)
        return result.scalar_one()
