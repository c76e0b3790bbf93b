from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.models.application import Application, ApplicationTag, Document
from loanflow.models.application_history import ApplicationHistory
from loanflow.models.enums import ApplicationStatus, Role
from loanflow.pagination import CursorPosition


# Deterministic ordering (needed for cursor pagination).
_NEWEST_FIRST = (Application.created_at.desc(), Application.id.desc())


async def get_application(session: AsyncSession, *, application_id: UUID) -> Application | None:
    stmt = select(Application).where(Application.id == application_id).execution_options(populate_existing=True)
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


def add_history(
    session: AsyncSession,
    *,
    application: Application,
    old_status: ApplicationStatus | None,
    new_status: ApplicationStatus,
    changed_by_role: Role,
    changed_at: datetime,
) -> ApplicationHistory:
    hist = ApplicationHistory(
        application_id=application.id,
        old_status=old_status,
        new_status=new_status,
        changed_by_role=changed_by_role,
        changed_at=changed_at,
    )
    session.add(hist)
    return hist


async def list_applications(
    session: AsyncSession,
    *,
    page: int = 0,
    page_size: int = 20,
) -> tuple[list[Application], int]:
    """Return (items, total) for a zero-based offset page."""

    total = int((await session.execute(select(func.count()).select_from(Application))).scalar_one())

    stmt = select(Application).order_by(*_NEWEST_FIRST).offset(page * page_size).limit(page_size)
    res = await session.execute(stmt)
    return list(res.scalars().all()), total


async def list_applications_after(
    session: AsyncSession,
    *,
    position: CursorPosition | None,
    limit: int,
) -> list[Application]:
    """Keyset page: rows strictly after `position` in (created_at DESC, id DESC) order."""

    stmt = select(Application)
    if position is not None:
        stmt = stmt.where(
            or_(
                Application.created_at < position.created_at,
                and_(Application.created_at == position.created_at, Application.id < position.id),
            )
        )

    stmt = stmt.order_by(*_NEWEST_FIRST).limit(limit)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def list_history(session: AsyncSession, *, application_id: UUID) -> list[ApplicationHistory]:
    stmt = (
        select(ApplicationHistory)
        .where(ApplicationHistory.application_id == application_id)
        .order_by(ApplicationHistory.changed_at.desc(), ApplicationHistory.id.desc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def find_application_ids(
    session: AsyncSession,
    *,
    applicant_id: UUID | None = None,
    product_id: UUID | None = None,
) -> list[UUID]:
    stmt = select(Application.id)
    if applicant_id is not None:
        stmt = stmt.where(Application.applicant_id == applicant_id)
    if product_id is not None:
        stmt = stmt.where(Application.product_id == product_id)

    res = await session.execute(stmt)
    return list(res.scalars().all())


async def delete_applications(session: AsyncSession, *, application_ids: Sequence[UUID]) -> None:
    """Delete applications together with their documents, history and tag links.

    Children are removed explicitly so the cascade does not depend on the database
    enforcing ON DELETE CASCADE. Does not commit.
    """

    if not application_ids:
        return

    ids = list(application_ids)
    await session.execute(delete(Document).where(Document.application_id.in_(ids)))
    await session.execute(delete(ApplicationHistory).where(ApplicationHistory.application_id.in_(ids)))
    await session.execute(delete(ApplicationTag).where(ApplicationTag.application_id.in_(ids)))
    await session.execute(delete(Application).where(Application.id.in_(ids)))
