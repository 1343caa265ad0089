"""Worksheet request/response schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worksheetweb.api.schemas.common import PaginationMeta


class CreateWorksheetRequest(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    subject: str = Field(min_length=1, max_length=100)
    description: str | None = None
    content: str = Field(min_length=1)
    level: str = Field(min_length=1, max_length=50)
    stage: str = Field(min_length=1, max_length=100)
    tags: list[str] | None = None
    created_by: int

    @field_validator("title", mode="before")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return v.strip() if isinstance(v, str) else v


class UpdateWorksheetRequest(BaseModel):
    title: str | None = None
    subject: str | None = None
    description: str | None = None
    content: str | None = None
    level: str | None = None
    stage: str | None = None
    tags: list[str] | None = None


class WorksheetResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    subject: str
    description: str | None
    content: str
    level: str
    stage: str
    created_by: int | None
    tags: list[str]
    created_at: datetime
    updated_at: datetime


class WorksheetListItem(WorksheetResponse):
    """Worksheet row joined with its author's display name."""

    author_name: str | None = None


class WorksheetListResponse(BaseModel):
    worksheets: list[WorksheetListItem]
    pagination: PaginationMeta


class WorksheetEnvelope(BaseModel):
    worksheet: WorksheetListItem


class WorksheetWriteResponse(BaseModel):
    message: str
    worksheet: WorksheetResponse


class SubjectStats(BaseModel):
    subject: str
    count: int
    levels: dict[str, int]


class WorksheetStats(BaseModel):
    total_worksheets: int
    total_subjects: int
    subjects: list[SubjectStats]


class WorksheetStatsResponse(BaseModel):
    stats: WorksheetStats
