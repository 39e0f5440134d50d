"""
통합 테스트 픽스처

임시 secrets.yaml + 임시 SQLite 파일로 앱 전체를 기동.
사용자: ana(1), bruno(2)는 같은 가구, carla(3)는 가구 없음.
"""

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import Settings, get_settings
from core.storage import UserStore
from web.app import create_app
from web.auth import create_access_token


async def _seed(db_path: Path) -> None:
    async with SQLiteAdapter(db_path) as db:
        await init_schema(db)
        users = UserStore(db)
        ana = await users.create_user("ana", "Ana")
        bruno = await users.create_user("bruno", "Bruno")
        await users.create_user("carla", "Carla")
        household = await users.create_household("Casa", ana.id)
        await users.set_household(bruno.id, household.id)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    path = tmp_path / "nido.db"
    asyncio.run(_seed(path))
    return path


@pytest.fixture
def settings(temp_secrets_file: Path):
    Settings.reset()
    yield get_settings(temp_secrets_file)
    Settings.reset()


@pytest.fixture
def client(settings, db_path: Path):
    with TestClient(create_app(db_path)) as test_client:
        yield test_client


@pytest.fixture
def token_for(settings):
    def _token(user_id: int) -> str:
        return create_access_token(user_id, settings.web_secret_key)

    return _token


@pytest.fixture
def auth(token_for):
    """사용자 ID → Authorization 헤더"""

    def _headers(user_id: int) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_for(user_id)}"}

    return _headers
