"""Tests for WorksheetDAO against PostgreSQL."""

from datetime import datetime, timedelta, timezone

import pytest

from worksheetweb.dao.base import TOTAL_COUNT_LABEL, resolve_window
from worksheetweb.dao.user_dao import UserDAO
from worksheetweb.dao.worksheet_dao import WorksheetDAO
from worksheetweb.services.worksheet_service import SAMPLE_WORKSHEETS

pytestmark = pytest.mark.asyncio(loop_scope="session")

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def dao():
    return WorksheetDAO()


async def _teacher(session, email="frizzle@school.test"):
    return await UserDAO().create(
        session, email=email, password_hash="x", name="Ms. Frizzle", role="teacher"
    )


def _ws(title: str, **overrides) -> dict:
    defaults = {
        "title": title,
        "subject": "math",
        "description": f"{title} description",
        "content": "1 + 1 = ?",
        "level": "Beginner",
        "stage": "Elementary",
        "tags": [],
    }
    defaults.update(overrides)
    return defaults


async def _insert(dao, session, items, author_id=None):
    """Insert *items* one minute apart, oldest first."""
    rows = []
    for i, vals in enumerate(items):
        ws = await dao.create(session, created_by=author_id, **vals)
        ws.created_at = BASE_TIME + timedelta(minutes=i)
        await session.flush()
        rows.append(ws)
    return rows


async def _sample(dao, session):
    teacher = await _teacher(session)
    return await _insert(dao, session, [dict(s) for s in SAMPLE_WORKSHEETS], teacher.id)


# ── list_page ─────────────────────────────────────────────────────────────


class TestListPage:
    async def test_no_filters_returns_everything(self, dao, session):
        await _sample(dao, session)
        page = await dao.list_page(session, resolve_window(1, 10))
        assert len(page.items) == 5
        assert page.pagination.total == 5
        assert page.pagination.total_pages == 1

    async def test_exact_subject_filter(self, dao, session):
        await _sample(dao, session)
        page = await dao.list_page(session, resolve_window(1, 10), {"subject": "math"})
        assert len(page.items) == 2
        assert {item["title"] for item in page.items} == {"Basic Fractions", "Algebra Basics"}
        assert page.pagination.total == 2
        assert page.pagination.total_pages == 1

    async def test_second_page_of_twelve(self, dao, session):
        await _insert(dao, session, [_ws(f"ws-{i}") for i in range(12)])
        page = await dao.list_page(session, resolve_window(2, 10))
        assert len(page.items) == 2
        assert page.pagination.total == 12
        assert page.pagination.total_pages == 2
        # oldest two land on the last page
        assert [item["title"] for item in page.items] == ["ws-1", "ws-0"]

    async def test_search_case_insensitive_on_title(self, dao, session):
        await _sample(dao, session)
        lower = await dao.list_page(session, resolve_window(), {"search": "fraction"})
        upper = await dao.list_page(session, resolve_window(), {"search": "FRACTION"})
        assert [item["title"] for item in lower.items] == ["Basic Fractions"]
        assert [item["id"] for item in upper.items] == [item["id"] for item in lower.items]

    async def test_no_match(self, dao, session):
        await _sample(dao, session)
        page = await dao.list_page(session, resolve_window(), {"subject": "latin"})
        assert page.items == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0

    async def test_page_past_end_keeps_total(self, dao, session):
        await _insert(dao, session, [_ws(f"ws-{i}") for i in range(12)])
        page = await dao.list_page(session, resolve_window(3, 10))
        assert page.items == []
        assert page.pagination.total == 12
        assert page.pagination.total_pages == 2

    async def test_search_matches_description(self, dao, session):
        await _insert(dao, session, [_ws("Plain", description="about photosynthesis")])
        page = await dao.list_page(session, resolve_window(), {"search": "PHOTOSYN"})
        assert len(page.items) == 1

    async def test_search_matches_tags(self, dao, session):
        await _insert(dao, session, [_ws("Tagged", tags=["geometry", "angles"]), _ws("Other")])
        page = await dao.list_page(session, resolve_window(), {"search": "angle"})
        assert [item["title"] for item in page.items] == ["Tagged"]

    async def test_newest_first_with_id_tiebreak(self, dao, session):
        rows = []
        for i in range(3):
            ws = await dao.create(session, **_ws(f"tie-{i}"))
            ws.created_at = BASE_TIME
            rows.append(ws)
        await session.flush()

        page = await dao.list_page(session, resolve_window())
        assert [item["id"] for item in page.items] == sorted((r.id for r in rows), reverse=True)

    async def test_pages_partition_the_result(self, dao, session):
        await _insert(dao, session, [_ws(f"ws-{i}") for i in range(7)])
        seen = []
        for p in (1, 2, 3):
            page = await dao.list_page(session, resolve_window(p, 3))
            seen.extend(item["id"] for item in page.items)
        assert len(seen) == 7
        assert len(set(seen)) == 7

    async def test_single_page_holds_every_row(self, dao, session):
        rows = await _insert(dao, session, [_ws(f"ws-{i}") for i in range(6)])
        page = await dao.list_page(session, resolve_window(1, 6))
        assert [item["id"] for item in page.items] == sorted((r.id for r in rows), reverse=True)
        assert page.pagination.total == 6
        assert page.pagination.total_pages == 1

    async def test_adding_filter_narrows(self, dao, session):
        await _sample(dao, session)
        broad = await dao.list_page(session, resolve_window(), {"subject": "math"})
        narrow = await dao.list_page(
            session, resolve_window(), {"subject": "math", "level": "Intermediate"}
        )
        broad_ids = {item["id"] for item in broad.items}
        narrow_ids = {item["id"] for item in narrow.items}
        assert narrow_ids <= broad_ids
        assert narrow.pagination.total <= broad.pagination.total

    async def test_hostile_value_matches_literally(self, dao, session):
        await _sample(dao, session)
        page = await dao.list_page(
            session, resolve_window(), {"subject": "math'; DROP TABLE worksheets; --"}
        )
        assert page.items == []
        after = await dao.list_page(session, resolve_window())
        assert after.pagination.total == 5

    async def test_items_carry_author_name_not_total(self, dao, session):
        await _sample(dao, session)
        page = await dao.list_page(session, resolve_window(1, 1))
        item = page.items[0]
        assert item["author_name"] == "Ms. Frizzle"
        assert TOTAL_COUNT_LABEL not in item
        assert page.pagination.total == 5

    async def test_author_name_null_without_author(self, dao, session):
        await _insert(dao, session, [_ws("Orphan")])
        page = await dao.list_page(session, resolve_window())
        assert page.items[0]["author_name"] is None


# ── get_detail ────────────────────────────────────────────────────────────


class TestGetDetail:
    async def test_found(self, dao, session):
        rows = await _sample(dao, session)
        detail = await dao.get_detail(session, rows[0].id)
        assert detail["title"] == "Basic Fractions"
        assert detail["author_name"] == "Ms. Frizzle"
        assert "fractions" in detail["tags"]

    async def test_missing(self, dao, session):
        assert await dao.get_detail(session, 999_999) is None


# ── subject_level_counts ──────────────────────────────────────────────────


class TestSubjectLevelCounts:
    async def test_empty(self, dao, session):
        assert await dao.subject_level_counts(session) == []

    async def test_grouped(self, dao, session):
        await _insert(
            dao,
            session,
            [
                _ws("a", subject="math", level="Beginner"),
                _ws("b", subject="math", level="Beginner"),
                _ws("c", subject="math", level="Advanced"),
                _ws("d", subject="art", level="Beginner"),
            ],
        )
        counts = await dao.subject_level_counts(session)
        assert counts == [
            ("art", "Beginner", 1),
            ("math", "Advanced", 1),
            ("math", "Beginner", 2),
        ]


# ── write ─────────────────────────────────────────────────────────────────


class TestWrite:
    async def test_create_defaults_tags(self, dao, session):
        ws = await dao.create(
            session, title="t", subject="s", content="c", level="l", stage="st"
        )
        assert ws.id is not None
        assert ws.tags == []
        assert ws.created_at is not None

    async def test_update(self, dao, session):
        ws = await dao.create(session, **_ws("Old"))
        updated = await dao.update(session, ws.id, title="New", tags=["x"])
        assert updated.title == "New"
        assert updated.tags == ["x"]

    async def test_update_none_clears_description(self, dao, session):
        ws = await dao.create(session, **_ws("Old"))
        updated = await dao.update(session, ws.id, description=None)
        assert updated.description is None
        assert updated.title == "Old"

    async def test_nullable_columns(self, dao):
        nullable = dao.nullable_columns()
        assert "description" in nullable
        assert "created_by" in nullable
        assert not nullable & {"title", "subject", "content", "level", "stage", "tags"}

    async def test_update_immutable_rejected(self, dao, session):
        ws = await dao.create(session, **_ws("Old"))
        with pytest.raises(AttributeError):
            await dao.update(session, ws.id, id=42)

    async def test_update_missing(self, dao, session):
        assert await dao.update(session, 999_999, title="x") is None

    async def test_delete(self, dao, session):
        ws = await dao.create(session, **_ws("Doomed"))
        assert await dao.delete(session, ws.id) is True
        assert await dao.get_by_id(session, ws.id) is None
        assert await dao.delete(session, ws.id) is False

    async def test_bulk_create(self, dao, session):
        objs = await dao.bulk_create(session, [_ws("x"), _ws("y")])
        assert all(o.id is not None for o in objs)
        assert await dao.count(session) == 2
