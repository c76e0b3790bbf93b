"""Degraded directories used when the upstream services are not reachable.

Answers are fail-closed: nobody exists, everybody is a CLIENT, and tags cannot be
resolved.
"""

from __future__ import annotations

import logging
from uuid import UUID

from loanflow.directories.base import ProductDirectory, TagDirectory, TagRef, UserDirectory
from loanflow.exceptions import DirectoryUnavailableError
from loanflow.models.enums import Role


logger = logging.getLogger(__name__)


class OfflineUserDirectory(UserDirectory):
    async def exists(self, user_id: UUID) -> bool:
        logger.warning("user directory offline: reporting user_id=%s as missing", user_id)
        return False

    async def role(self, user_id: UUID) -> Role:
        logger.warning("user directory offline: defaulting user_id=%s to CLIENT", user_id)
        return Role.CLIENT


class OfflineProductDirectory(ProductDirectory):
    async def exists(self, product_id: UUID) -> bool:
        logger.warning("product directory offline: reporting product_id=%s as missing", product_id)
        return False


class OfflineTagDirectory(TagDirectory):
    async def create_or_get_batch(self, names: list[str]) -> list[TagRef]:
        raise DirectoryUnavailableError("tag directory is offline")
