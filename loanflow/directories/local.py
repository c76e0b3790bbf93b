from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from loanflow.directories.base import TagDirectory, TagRef
from loanflow.exceptions import ConflictError, DirectoryUnavailableError
from loanflow.services.tag_service import TagService


logger = logging.getLogger(__name__)


class LocalTagDirectory(TagDirectory):
    """Tag directory backed by this service's own `tags` table.

    Runs in its own session so tag creation commits independently of the caller's
    transaction, the same as a remote tag service would.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], *, service: TagService | None = None) -> None:
        self._session_factory = session_factory
        self._service = service or TagService()

    async def create_or_get_batch(self, names: list[str]) -> list[TagRef]:
        try:
            async with self._session_factory() as session:
                tags = await self._service.create_or_get_batch(session, names)
                return [TagRef(id=t.id, name=t.name) for t in tags]
        except (ConflictError, SQLAlchemyError) as exc:
            logger.warning("local tag directory failed for names=%s: %r", names, exc)
            raise DirectoryUnavailableError(f"local tag directory failed: {exc!r}") from exc
