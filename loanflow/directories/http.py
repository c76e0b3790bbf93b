from __future__ import annotations

import logging
from uuid import UUID

import httpx

from loanflow.directories.base import ProductDirectory, TagDirectory, TagRef, UserDirectory
from loanflow.directories.offline import OfflineProductDirectory, OfflineUserDirectory
from loanflow.exceptions import DirectoryUnavailableError
from loanflow.models.enums import Role


logger = logging.getLogger(__name__)


class _HttpDirectory:
    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")

    async def _get_json(self, path: str):
        response = await self._client.get(f"{self._base_url}{path}")
        response.raise_for_status()
        return response.json()


class HttpUserDirectory(_HttpDirectory, UserDirectory):
    """User service client; falls back to `fallback` whenever a call fails."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        fallback: UserDirectory | None = None,
    ) -> None:
        super().__init__(client, base_url)
        self._fallback = fallback or OfflineUserDirectory()

    async def exists(self, user_id: UUID) -> bool:
        try:
            return bool(await self._get_json(f"/api/v1/users/{user_id}/exists"))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("user-service exists(%s) failed: %r", user_id, exc)
            return await self._fallback.exists(user_id)

    async def role(self, user_id: UUID) -> Role:
        try:
            raw = await self._get_json(f"/api/v1/users/{user_id}/role")
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("user-service role(%s) failed: %r", user_id, exc)
            return await self._fallback.role(user_id)
        return Role.parse(raw if isinstance(raw, str) else None)


class HttpProductDirectory(_HttpDirectory, ProductDirectory):
    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str,
        *,
        fallback: ProductDirectory | None = None,
    ) -> None:
        super().__init__(client, base_url)
        self._fallback = fallback or OfflineProductDirectory()

    async def exists(self, product_id: UUID) -> bool:
        try:
            return bool(await self._get_json(f"/api/v1/products/{product_id}/exists"))
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("product-service exists(%s) failed: %r", product_id, exc)
            return await self._fallback.exists(product_id)


class HttpTagDirectory(_HttpDirectory, TagDirectory):
    async def create_or_get_batch(self, names: list[str]) -> list[TagRef]:
        try:
            response = await self._client.post(f"{self._base_url}/api/v1/tags/batch", json=list(names))
            response.raise_for_status()
            return [TagRef(id=UUID(str(item["id"])), name=item["name"]) for item in response.json()]
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as exc:
            raise DirectoryUnavailableError(f"tag-service batch failed: {exc!r}") from exc
