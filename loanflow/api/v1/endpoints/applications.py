from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.api.deps import get_application_service
from loanflow.database import get_db
from loanflow.schemas.application import (
    ApplicationCreate,
    ApplicationCursorPage,
    ApplicationHistoryRead,
    ApplicationListResponse,
    ApplicationRead,
    StatusChange,
)
from loanflow.services.application_service import ApplicationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
async def create_application_endpoint(
    payload: ApplicationCreate,
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationRead:
    logger.info(
        "Creating new application for applicant_id=%s product_id=%s",
        payload.applicant_id,
        payload.product_id,
    )
    app = await service.create(session, obj_in=payload)
    return ApplicationRead.model_validate(app)


@router.get("", response_model=ApplicationListResponse)
async def list_applications_endpoint(
    response: Response,
    page: int = Query(0, description="Zero-based page number"),
    size: int = Query(20, description="Page size (max 50)"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationListResponse:
    items, total = await service.list_page(session, page=page, size=size)

    response.headers["X-Total-Count"] = str(total)
    return ApplicationListResponse(
        items=[ApplicationRead.model_validate(i) for i in items],
        total=total,
        page=page,
        page_size=size,
    )


@router.get("/stream", response_model=ApplicationCursorPage)
async def stream_applications_endpoint(
    response: Response,
    cursor: str | None = Query(
        None,
        description="Opaque cursor; use the next_cursor value from the previous response.",
    ),
    limit: int = Query(20, description="Items per page; values above 50 are capped"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationCursorPage:
    items, next_cursor = await service.list_by_cursor(session, cursor=cursor, limit=limit)

    if next_cursor is not None:
        response.headers["X-Next-Cursor"] = next_cursor
    return ApplicationCursorPage(
        items=[ApplicationRead.model_validate(i) for i in items],
        next_cursor=next_cursor,
    )


@router.delete("/internal/by-user", status_code=status.HTTP_204_NO_CONTENT)
async def delete_applications_by_user_endpoint(
    user_id: UUID = Query(...),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> Response:
    """Internal: called by the user service when a user is removed."""

    await service.delete_by_applicant(session, applicant_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/internal/by-product", status_code=status.HTTP_204_NO_CONTENT)
async def delete_applications_by_product_endpoint(
    product_id: UUID = Query(...),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> Response:
    """Internal: called by the product service when a product is removed."""

    await service.delete_by_product(session, product_id=product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{application_id}", response_model=ApplicationRead)
async def get_application_endpoint(
    application_id: UUID,
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationRead:
    app = await service.get(session, application_id=application_id)
    return ApplicationRead.model_validate(app)


@router.put("/{application_id}/tags", status_code=status.HTTP_204_NO_CONTENT)
async def add_tags_endpoint(
    application_id: UUID,
    tags: list[str] = Body(...),
    actor_id: UUID | None = Query(None, description="Id of the user performing the operation"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> Response:
    logger.info("Adding tags to application %s by actor %s", application_id, actor_id)
    await service.attach_tags(session, application_id=application_id, tag_names=tags, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{application_id}/tags", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tags_endpoint(
    application_id: UUID,
    tags: list[str] = Body(...),
    actor_id: UUID | None = Query(None, description="Id of the user performing the operation"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> Response:
    logger.info("Removing tags from application %s by actor %s", application_id, actor_id)
    await service.remove_tags(session, application_id=application_id, tag_names=tags, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{application_id}/status", response_model=ApplicationRead)
async def change_status_endpoint(
    application_id: UUID,
    payload: StatusChange,
    actor_id: UUID | None = Query(None, description="Id of the user performing the operation"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> ApplicationRead:
    logger.info("Changing status of application %s to %r by actor %s", application_id, payload.status, actor_id)
    app = await service.change_status(
        session,
        application_id=application_id,
        status=payload.status,
        actor_id=actor_id,
    )
    return ApplicationRead.model_validate(app)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_application_endpoint(
    application_id: UUID,
    actor_id: UUID | None = Query(None, description="Id of the user performing the operation"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> Response:
    logger.info("Deleting application %s by actor %s", application_id, actor_id)
    await service.delete(session, application_id=application_id, actor_id=actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{application_id}/history", response_model=list[ApplicationHistoryRead])
async def get_application_history_endpoint(
    application_id: UUID,
    actor_id: UUID | None = Query(None, description="Id of the user performing the operation"),
    session: AsyncSession = Depends(get_db),
    service: ApplicationService = Depends(get_application_service),
) -> list[ApplicationHistoryRead]:
    history = await service.list_history(session, application_id=application_id, actor_id=actor_id)
    return [ApplicationHistoryRead.model_validate(h) for h in history]
