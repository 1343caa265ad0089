"""Submission request/response schemas."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worksheetweb.api.schemas.common import PaginationMeta


class SubmitRequest(BaseModel):
    worksheet_id: int
    student_id: int
    answers: str = Field(min_length=1)


class GradeRequest(BaseModel):
    score: Decimal = Field(ge=0, le=100, max_digits=5, decimal_places=2)
    feedback: str | None = None
    graded_by: int


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    worksheet_id: int
    student_id: int
    answers: str
    score: float | None
    feedback: str | None
    status: str
    submitted_at: datetime
    graded_at: datetime | None
    graded_by: int | None

    @field_validator("score", mode="before")
    @classmethod
    def _decimal_to_float(cls, v):
        return float(v) if isinstance(v, Decimal) else v


class SubmissionListItem(SubmissionResponse):
    """Submission row plus whichever display joins the listing carries."""

    worksheet_title: str | None = None
    worksheet_subject: str | None = None
    student_name: str | None = None
    grade_level: str | None = None
    grader_name: str | None = None


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionListItem]
    pagination: PaginationMeta


class SubmissionEnvelope(BaseModel):
    submission: SubmissionListItem


class SubmissionWriteResponse(BaseModel):
    message: str
    submission: SubmissionResponse


class StudentStats(BaseModel):
    total_submissions: int
    graded_submissions: int
    average_score: float | None
    min_score: float | None
    max_score: float | None


class StudentStatsResponse(BaseModel):
    stats: StudentStats
