from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from loanflow.crud.tag import tag_crud
from loanflow.exceptions import ConflictError
from loanflow.models.tag import Tag


logger = logging.getLogger(__name__)


def normalize_tag_names(names: Iterable[str | None]) -> list[str]:
    """Trim, drop empty names and de-duplicate, keeping first-seen order."""

    seen: dict[str, None] = {}
    for name in names:
        if name is None:
            continue
        cleaned = name.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


@dataclass(frozen=True)
class TagDefaults:
    # Lookup/insert rounds before giving up on a contended name set.
    max_attempts: int = 3


class TagService:
    """Create-or-get semantics for the local tag directory."""

    def __init__(self, *, defaults: TagDefaults | None = None) -> None:
        self._defaults = defaults or TagDefaults()

    async def create_or_get_batch(self, session: AsyncSession, names: Iterable[str | None]) -> list[Tag]:
        """Resolve `names` into tags, creating the missing ones.

        Another writer may insert the same name between our lookup and insert; the
        unique constraint on `tags.name` then rejects our insert, and the next round
        picks the row it created.
        """

        unique_names = normalize_tag_names(names)
        if not unique_names:
            return []

        for attempt in range(1, self._defaults.max_attempts + 1):
            existing = {t.name: t for t in await tag_crud.get_by_names(session, names=unique_names)}
            missing = [name for name in unique_names if name not in existing]
            if not missing:
                return [existing[name] for name in unique_names]

            created = {name: Tag(name=name) for name in missing}
            session.add_all(created.values())
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info("tag create race on attempt=%s names=%s; retrying lookup", attempt, missing)
                continue

            logger.info("Created %s new tags", len(created))
            existing.update(created)
            return [existing[name] for name in unique_names]

        raise ConflictError("Failed to resolve tags")
