"""Tests for WorksheetService — DAOs are mocked."""

from unittest.mock import AsyncMock

import pytest

from worksheetweb.dao.base import Page, Pagination, Window
from worksheetweb.dao.user_dao import UserDAO
from worksheetweb.dao.worksheet_dao import WorksheetDAO
from worksheetweb.models.worksheet import Worksheet
from worksheetweb.services import NotFoundError, ValidationError
from worksheetweb.services.worksheet_service import SAMPLE_WORKSHEETS, WorksheetService


def _make_service() -> tuple[WorksheetService, WorksheetDAO, UserDAO]:
    worksheet_dao = WorksheetDAO()
    user_dao = UserDAO()
    return WorksheetService(worksheet_dao, user_dao), worksheet_dao, user_dao


def _empty_page(page=1, limit=10) -> Page:
    return Page(items=[], pagination=Pagination(page=page, limit=limit, total=0))


class TestList:
    async def test_defaults_and_filters_forwarded(self):
        service, dao, _ = _make_service()
        dao.list_page = AsyncMock(return_value=_empty_page())

        await service.list(AsyncMock(), subject="math", search="frac")

        _, window, filters = dao.list_page.call_args.args
        assert window == Window(page=1, limit=10)
        assert filters == {"subject": "math", "level": None, "stage": None, "search": "frac"}

    async def test_window_is_clamped(self):
        service, dao, _ = _make_service()
        dao.list_page = AsyncMock(return_value=_empty_page())

        await service.list(AsyncMock(), page=0, limit=1000)

        assert dao.list_page.call_args.args[1] == Window(page=1, limit=50)


class TestGet:
    async def test_found(self):
        service, dao, _ = _make_service()
        dao.get_detail = AsyncMock(return_value={"id": 1, "title": "t"})
        assert (await service.get(AsyncMock(), 1))["title"] == "t"

    async def test_missing(self):
        service, dao, _ = _make_service()
        dao.get_detail = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError, match="worksheet not found"):
            await service.get(AsyncMock(), 1)


class TestCreate:
    async def test_unknown_author(self):
        service, dao, user_dao = _make_service()
        user_dao.exists = AsyncMock(return_value=False)
        dao.create = AsyncMock()

        with pytest.raises(NotFoundError, match="user not found"):
            await service.create(
                AsyncMock(),
                title="t",
                subject="math",
                content="c",
                level="Beginner",
                stage="Elementary",
                created_by=99,
            )
        dao.create.assert_not_awaited()

    async def test_tags_default_to_empty_list(self):
        service, dao, user_dao = _make_service()
        user_dao.exists = AsyncMock(return_value=True)
        dao.create = AsyncMock(return_value=Worksheet(id=5, title="t"))

        ws = await service.create(
            AsyncMock(),
            title="t",
            subject="math",
            content="c",
            level="Beginner",
            stage="Elementary",
            created_by=1,
        )

        assert ws.id == 5
        kwargs = dao.create.call_args.kwargs
        assert kwargs["tags"] == []
        assert kwargs["description"] is None
        assert kwargs["created_by"] == 1


class TestUpdate:
    async def test_filters_unknown_fields(self):
        service, dao, _ = _make_service()
        dao.update = AsyncMock(return_value=Worksheet(id=1))

        await service.update(AsyncMock(), 1, title="New", created_by=2, id=9)

        assert dao.update.call_args.args[1] == 1
        assert dao.update.call_args.kwargs == {"title": "New"}

    async def test_none_clears_description(self):
        service, dao, _ = _make_service()
        dao.update = AsyncMock(return_value=Worksheet(id=1))

        await service.update(AsyncMock(), 1, description=None, level="Advanced")

        assert dao.update.call_args.kwargs == {"description": None, "level": "Advanced"}

    @pytest.mark.parametrize("field", ["title", "tags", "level"])
    async def test_none_on_required_field_rejected(self, field):
        service, dao, _ = _make_service()
        dao.update = AsyncMock()
        with pytest.raises(ValidationError, match=f"{field} cannot be null"):
            await service.update(AsyncMock(), 1, **{field: None})
        dao.update.assert_not_awaited()

    async def test_no_valid_updates(self):
        service, dao, _ = _make_service()
        dao.update = AsyncMock()
        with pytest.raises(NotFoundError, match="no valid updates"):
            await service.update(AsyncMock(), 1, created_by=2)
        dao.update.assert_not_awaited()

    async def test_missing(self):
        service, dao, _ = _make_service()
        dao.update = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await service.update(AsyncMock(), 1, title="x")


class TestDelete:
    async def test_deleted(self):
        service, dao, _ = _make_service()
        dao.delete = AsyncMock(return_value=True)
        await service.delete(AsyncMock(), 3)
        dao.delete.assert_awaited_once()

    async def test_missing(self):
        service, dao, _ = _make_service()
        dao.delete = AsyncMock(return_value=False)
        with pytest.raises(NotFoundError, match="worksheet not found"):
            await service.delete(AsyncMock(), 3)


class TestStatistics:
    async def test_empty(self):
        service, dao, _ = _make_service()
        dao.subject_level_counts = AsyncMock(return_value=[])
        stats = await service.statistics(AsyncMock())
        assert stats == {"total_worksheets": 0, "total_subjects": 0, "subjects": []}

    async def test_grouped_by_subject(self):
        service, dao, _ = _make_service()
        dao.subject_level_counts = AsyncMock(
            return_value=[
                ("english", "Intermediate", 1),
                ("math", "Beginner", 1),
                ("math", "Intermediate", 2),
            ]
        )

        stats = await service.statistics(AsyncMock())

        assert stats["total_worksheets"] == 4
        assert stats["total_subjects"] == 2
        assert stats["subjects"] == [
            {"subject": "english", "count": 1, "levels": {"Intermediate": 1}},
            {"subject": "math", "count": 3, "levels": {"Beginner": 1, "Intermediate": 2}},
        ]


class TestSeed:
    async def test_seeds_empty_table(self):
        service, dao, _ = _make_service()
        dao.count = AsyncMock(return_value=0)
        dao.bulk_create = AsyncMock(side_effect=lambda session, items: list(items))

        assert await service.seed_sample_data(AsyncMock()) == len(SAMPLE_WORKSHEETS)
        assert dao.bulk_create.call_args.args[1] == SAMPLE_WORKSHEETS

    async def test_skips_populated_table(self):
        service, dao, _ = _make_service()
        dao.count = AsyncMock(return_value=3)
        dao.bulk_create = AsyncMock()

        assert await service.seed_sample_data(AsyncMock()) == 0
        dao.bulk_create.assert_not_awaited()
