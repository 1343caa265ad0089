"""Worksheets router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from worksheetweb.api.deps import get_session, get_worksheet_service
from worksheetweb.api.schemas.common import MessageResponse, PaginationMeta
from worksheetweb.api.schemas.worksheet import (
    CreateWorksheetRequest,
    UpdateWorksheetRequest,
    WorksheetEnvelope,
    WorksheetListResponse,
    WorksheetResponse,
    WorksheetStatsResponse,
    WorksheetWriteResponse,
)
from worksheetweb.dao.base import LIMIT_DEFAULT, LIMIT_MAX
from worksheetweb.services.worksheet_service import WorksheetService

router = APIRouter()


@router.get("", response_model=WorksheetListResponse)
async def list_worksheets(
    page: int = Query(1, ge=1),
    limit: int = Query(LIMIT_DEFAULT, ge=1, le=LIMIT_MAX),
    subject: str | None = Query(None),
    level: str | None = Query(None),
    stage: str | None = Query(None),
    search: str | None = Query(None),
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> WorksheetListResponse:
    result = await svc.list(
        session,
        page=page,
        limit=limit,
        subject=subject,
        level=level,
        stage=stage,
        search=search,
    )
    return WorksheetListResponse(
        worksheets=result.items,
        pagination=PaginationMeta.from_pagination(result.pagination),
    )


@router.get("/stats/summary", response_model=WorksheetStatsResponse)
async def worksheet_stats(
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> WorksheetStatsResponse:
    return WorksheetStatsResponse(stats=await svc.statistics(session))


@router.get("/{worksheet_id}", response_model=WorksheetEnvelope)
async def get_worksheet(
    worksheet_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> WorksheetEnvelope:
    return WorksheetEnvelope(worksheet=await svc.get(session, worksheet_id))


@router.post("", response_model=WorksheetWriteResponse, status_code=201)
async def create_worksheet(
    body: CreateWorksheetRequest,
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> WorksheetWriteResponse:
    worksheet = await svc.create(session, **body.model_dump())
    return WorksheetWriteResponse(
        message="Worksheet created successfully",
        worksheet=WorksheetResponse.model_validate(worksheet),
    )


@router.put("/{worksheet_id}", response_model=WorksheetWriteResponse)
async def update_worksheet(
    body: UpdateWorksheetRequest,
    worksheet_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> WorksheetWriteResponse:
    worksheet = await svc.update(session, worksheet_id, **body.model_dump(exclude_unset=True))
    return WorksheetWriteResponse(
        message="Worksheet updated successfully",
        worksheet=WorksheetResponse.model_validate(worksheet),
    )


@router.delete("/{worksheet_id}", response_model=MessageResponse)
async def delete_worksheet(
    worksheet_id: int = Path(ge=1),
    session: AsyncSession = Depends(get_session),
    svc: WorksheetService = Depends(get_worksheet_service),
) -> MessageResponse:
    await svc.delete(session, worksheet_id)
    return MessageResponse(message="Worksheet deleted successfully")
