from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.base import BaseCRUD
from loanflow.models.tag import Tag


class TagCRUD(BaseCRUD[Tag]):
    async def get_by_name(self, session: AsyncSession, *, name: str) -> Tag | None:
        r = await session.execute(select(Tag).where(Tag.name == name))
        return r.scalar_one_or_none()

    async def get_by_names(self, session: AsyncSession, *, names: Sequence[str]) -> list[Tag]:
        if not names:
            return []
        r = await session.execute(select(Tag).where(Tag.name.in_(list(names))))
        return list(r.scalars().all())


tag_crud = TagCRUD(Tag, order_by=(Tag.name.asc(),))
