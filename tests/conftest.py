import asyncio
import os
import tempfile
import uuid
from dataclasses import dataclass

# Must run before anything imports loanflow.config.
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='loanflow-tests-')}/test.db",
)

import pytest
from fastapi.testclient import TestClient

import loanflow.models  # noqa: F401
from loanflow.api.deps import get_directories
from loanflow.database import SessionLocal, engine
from loanflow.directories.base import Directories
from loanflow.directories.local import LocalTagDirectory
from loanflow.main import app
from loanflow.models.base import Base
from loanflow.models.enums import Role
from tests._fakes import FakeProductDirectory, FakeUserDirectory


async def _reset_schema() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture()
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _clean_database() -> None:
    asyncio.run(_reset_schema())


@dataclass
class Actors:
    client: uuid.UUID
    other_client: uuid.UUID
    manager: uuid.UUID
    admin: uuid.UUID


@pytest.fixture()
def users() -> FakeUserDirectory:
    return FakeUserDirectory()


@pytest.fixture()
def actors(users: FakeUserDirectory) -> Actors:
    return Actors(
        client=users.add(Role.CLIENT),
        other_client=users.add(Role.CLIENT),
        manager=users.add(Role.MANAGER),
        admin=users.add(Role.ADMIN),
    )


@pytest.fixture()
def products() -> FakeProductDirectory:
    return FakeProductDirectory()


@pytest.fixture()
def product_id(products: FakeProductDirectory) -> uuid.UUID:
    return products.add()


@pytest.fixture()
def directories(users: FakeUserDirectory, products: FakeProductDirectory) -> Directories:
    return Directories(users=users, products=products, tags=LocalTagDirectory(SessionLocal))


@pytest.fixture()
def client(directories: Directories):
    app.dependency_overrides[get_directories] = lambda: directories
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
