from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from memory_companion.store.postgres import PostgresStore


INTEGRATION_DIR = Path(__file__).parent


def pytest_collection_modifyitems(items: list, config) -> None:  # noqa: ANN001
    """Auto-mark every test in the integration directory.

    The hook sees the whole session, so items outside this directory
    are left alone.
    """
    marker = pytest.mark.integration
    for item in items:
        if Path(item.path).is_relative_to(INTEGRATION_DIR):
            item.add_marker(marker)


class Settings:
    def __init__(self) -> None:
        self.host = os.getenv("POSTGRES_HOST", "localhost")
        self.port = int(os.getenv("POSTGRES_PORT", "5432"))
        self.database = os.getenv("POSTGRES_DB", "memory_companion_test")
        self.user = os.getenv("POSTGRES_USER", "postgres")
        self.password = os.getenv("POSTGRES_PASSWORD", "postgres")


@pytest.fixture(scope="session")
def settings() -> Settings:
    return Settings()


@pytest.fixture()
async def pg_store(settings: Settings) -> AsyncGenerator[PostgresStore]:
    """Create a PostgresStore with a clean slate for each test."""
    store = PostgresStore(
        host=settings.host,
        port=settings.port,
        database=settings.database,
        user=settings.user,
        password=settings.password,
    )
    await store.init()
    await store.reset()

    yield store

    await store.reset()
    await store.close()
