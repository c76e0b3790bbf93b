from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.tag import tag_crud
from loanflow.database import get_db
from loanflow.exceptions import BadRequestError, NotFoundError
from loanflow.pagination import MAX_PAGE_SIZE
from loanflow.schemas.tag import TagRead
from loanflow.services.tag_service import TagService


router = APIRouter(prefix="/tags", tags=["tags"])


@router.post("/batch", response_model=list[TagRead])
async def create_or_get_tags_batch_endpoint(
    names: list[str] = Body(...),
    session: AsyncSession = Depends(get_db),
) -> list[TagRead]:
    tags = await TagService().create_or_get_batch(session, names)
    return [TagRead.model_validate(t) for t in tags]


@router.get("", response_model=list[TagRead])
async def list_tags_endpoint(
    response: Response,
    page: int = Query(0, ge=0),
    size: int = Query(20),
    session: AsyncSession = Depends(get_db),
) -> list[TagRead]:
    if size <= 0 or size > MAX_PAGE_SIZE:
        raise BadRequestError(f"size must be between 1 and {MAX_PAGE_SIZE}")

    tags = await tag_crud.get_multi(session, skip=page * size, limit=size)
    response.headers["X-Total-Count"] = str(await tag_crud.count(session))
    return [TagRead.model_validate(t) for t in tags]


@router.get("/{name}", response_model=TagRead)
async def get_tag_endpoint(
    name: str,
    session: AsyncSession = Depends(get_db),
) -> TagRead:
    tag = await tag_crud.get_by_name(session, name=name.strip())
    if tag is None:
        raise NotFoundError(f"Tag not found: {name}")
    return TagRead.model_validate(tag)
