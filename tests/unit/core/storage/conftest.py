"""
저장소 테스트 픽스처

인메모리 SQLite + 스키마 초기화.
"""

from typing import AsyncGenerator

import pytest_asyncio

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.storage import UserStore


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[SQLiteAdapter, None]:
    adapter = SQLiteAdapter(":memory:")
    await adapter.connect()
    await init_schema(adapter)
    yield adapter
    await adapter.close()


@pytest_asyncio.fixture
async def users(db) -> UserStore:
    """ana(1), bruno(2)는 같은 가구, carla(3)는 가구 없음"""
    store = UserStore(db)
    ana = await store.create_user("ana", "Ana")
    bruno = await store.create_user("bruno", "Bruno")
    await store.create_user("carla", "Carla")

    household = await store.create_household("Casa", ana.id)
    await store.set_household(bruno.id, household.id)
    return store
