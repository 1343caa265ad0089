"""Submissions router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.api.deps import get_session, get_submission_service
from worksheetweb.api.schemas.common import PaginationMeta
from worksheetweb.api.schemas.submission import (
    GradeRequest,
    StudentStatsResponse,
    SubmissionEnvelope,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionWriteResponse,
    SubmitRequest,
)
from worksheetweb.dao.base import LIMIT_DEFAULT, LIMIT_MAX, Page
from worksheetweb.services.submission_service import SubmissionService

router = APIRouter()


def _list_response(result: Page) -> SubmissionListResponse:
    return SubmissionListResponse(
        submissions=result.items,
        pagination=PaginationMeta.from_pagination(result.pagination),
    )


@router.post("", response_model=SubmissionWriteResponse, status_code=201)
async def submit_worksheet(
    body: SubmitRequest,
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionWriteResponse:
    submission = await svc.submit(
        session,
        worksheet_id=body.worksheet_id,
        student_id=body.student_id,
        answers=body.answers,
    )
    return SubmissionWriteResponse(
        message="Worksheet submitted successfully",
        submission=SubmissionResponse.model_validate(submission),
    )


@router.get("", response_model=SubmissionListResponse)
async def list_submissions(
    page: int = Query(1, ge=1),
    limit: int = Query(LIMIT_DEFAULT, ge=1, le=LIMIT_MAX),
    student_id: int | None = Query(None, ge=1),
    worksheet_id: int | None = Query(None, ge=1),
    status: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionListResponse:
    result = await svc.list(
        session,
        page=page,
        limit=limit,
        student_id=student_id,
        worksheet_id=worksheet_id,
        status=status,
    )
    return _list_response(result)


@router.get("/student/{student_id}", response_model=SubmissionListResponse)
async def list_student_submissions(
    student_id: int = Path(ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(LIMIT_DEFAULT, ge=1, le=LIMIT_MAX),
    status: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionListResponse:
    result = await svc.list_by_student(
        session, student_id, page=page, limit=limit, status=status
    )
    return _list_response(result)


@router.get("/student/{student_id}/stats", response_model=StudentStatsResponse)
async def student_stats(
    student_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> StudentStatsResponse:
    return StudentStatsResponse(stats=await svc.student_statistics(session, student_id))


@router.get("/worksheet/{worksheet_id}", response_model=SubmissionListResponse)
async def list_worksheet_submissions(
    worksheet_id: int = Path(ge=1),
    page: int = Query(1, ge=1),
    limit: int = Query(LIMIT_DEFAULT, ge=1, le=LIMIT_MAX),
    status: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionListResponse:
    result = await svc.list_by_worksheet(
        session, worksheet_id, page=page, limit=limit, status=status
    )
    return _list_response(result)


@router.get("/{submission_id}", response_model=SubmissionEnvelope)
async def get_submission(
    submission_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionEnvelope:
    return SubmissionEnvelope(submission=await svc.get(session, submission_id))


@router.put("/{submission_id}/grade", response_model=SubmissionWriteResponse)
async def grade_submission(
    body: GradeRequest,
    submission_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: SubmissionService = Depends(get_submission_service),
) -> SubmissionWriteResponse:
    submission = await svc.grade(
        session,
        submission_id,
        score=body.score,
        feedback=body.feedback,
        graded_by=body.graded_by,
    )
    return SubmissionWriteResponse(
        message="Submission graded successfully",
        submission=SubmissionResponse.model_validate(submission),
    )
