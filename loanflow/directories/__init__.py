from __future__ import annotations

import logging

import httpx
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from loanflow.config import Settings
from loanflow.directories.base import Directories, ProductDirectory, TagDirectory, TagRef, UserDirectory
from loanflow.directories.http import HttpProductDirectory, HttpTagDirectory, HttpUserDirectory
from loanflow.directories.local import LocalTagDirectory
from loanflow.directories.offline import OfflineProductDirectory, OfflineTagDirectory, OfflineUserDirectory


logger = logging.getLogger(__name__)


def build_directories(
    settings: Settings,
    *,
    client: httpx.AsyncClient,
    session_factory: async_sessionmaker[AsyncSession],
) -> Directories:
    """Pick directory implementations for this process (called once at startup)."""

    if settings.directory_mode == "offline":
        logger.warning("directory_mode=offline: user/product lookups fail closed, tags unavailable")
        return Directories(
            users=OfflineUserDirectory(),
            products=OfflineProductDirectory(),
            tags=OfflineTagDirectory(),
        )

    tags: TagDirectory
    if settings.tag_service_url:
        tags = HttpTagDirectory(client, settings.tag_service_url)
    else:
        tags = LocalTagDirectory(session_factory)

    return Directories(
        users=HttpUserDirectory(client, settings.user_service_url),
        products=HttpProductDirectory(client, settings.product_service_url),
        tags=tags,
    )


__all__ = [
    "Directories",
    "ProductDirectory",
    "TagDirectory",
    "TagRef",
    "UserDirectory",
    "build_directories",
]
