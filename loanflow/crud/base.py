from __future__ import annotations

from typing import Generic, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


TModel = TypeVar("TModel")


class BaseCRUD(Generic[TModel]):
    """Generic read helpers for SQLAlchemy (async).

    Notes:
    - Methods do NOT commit. Callers control transaction boundaries.
    - `order_by` is applied to multi-row reads so offset paging is stable.
    """

    def __init__(self, model: type[TModel], *, order_by: tuple = ()) -> None:
        self.model = model
        self.order_by = order_by

    async def get_multi(self, session: AsyncSession, *, skip: int = 0, limit: int = 100) -> list[TModel]:
        q = select(self.model)
        if self.order_by:
            q = q.order_by(*self.order_by)

        q = q.offset(max(skip, 0)).limit(max(1, limit))
        r = await session.execute(q)
        return list(r.scalars().all())

    async def count(self, session: AsyncSession) -> int:
        r = await session.execute(select(func.count()).select_from(self.model))
        return int(r.scalar_one())
