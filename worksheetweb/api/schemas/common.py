"""Shared response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from worksheetweb.dao.base import Pagination


class PaginationMeta(BaseModel):
    """Offset pagination metadata, serialized with a camelCase ``totalPages``."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int = Field(alias="totalPages")

    @classmethod
    def from_pagination(cls, pagination: Pagination) -> PaginationMeta:
        return cls(
            page=pagination.page,
            limit=pagination.limit,
            total=pagination.total,
            total_pages=pagination.total_pages,
        )


class MessageResponse(BaseModel):
    message: str
