from __future__ import annotations

import abc
from dataclasses import dataclass
from uuid import UUID

from loanflow.models.enums import Role


@dataclass(frozen=True)
class TagRef:
    id: UUID
    name: str


class UserDirectory(abc.ABC):
    @abc.abstractmethod
    async def exists(self, user_id: UUID) -> bool: ...

    @abc.abstractmethod
    async def role(self, user_id: UUID) -> Role: ...


class ProductDirectory(abc.ABC):
    @abc.abstractmethod
    async def exists(self, product_id: UUID) -> bool: ...


class TagDirectory(abc.ABC):
    @abc.abstractmethod
    async def create_or_get_batch(self, names: list[str]) -> list[TagRef]:
        """Resolve tag names into tag identities, creating unknown ones.

        Raises DirectoryUnavailableError when the directory cannot answer.
        """


@dataclass(frozen=True)
class Directories:
    users: UserDirectory
    products: ProductDirectory
    tags: TagDirectory
