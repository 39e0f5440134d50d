#!/usr/bin/env python3
"""
사용자 생성 스크립트 (개발용)

사용자를 만들고 API/푸시 채널용 액세스 토큰을 출력.

사용법:
    python scripts/create_user.py ana
    python scripts/create_user.py bruno --household-of ana
"""

import argparse
import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 Python 경로에 추가
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from core.config.loader import get_settings
from core.storage.user_store import UserStore
from web.auth import create_access_token


async def main(username: str, name: str | None, household_of: str | None) -> None:
    settings = get_settings()

    async with SQLiteAdapter(settings.db_path) as db:
        await init_schema(db)
        users = UserStore(db)

        user = await users.create_user(username, name)

        if household_of:
            owner = await users.get_user_by_username(household_of)
            if owner is None:
                raise SystemExit(f"사용자 없음: {household_of}")

            household_id = owner.household_id
            if household_id is None:
                household = await users.create_household(f"{owner.name}'s household", owner.id)
                household_id = household.id

            user = await users.set_household(user.id, household_id)

    token = create_access_token(user.id, settings.web_secret_key)
    print(f"user_id={user.id} household_id={user.household_id}")
    print(f"token={token}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="사용자 생성 (개발용)")
    parser.add_argument("username", help="사용자명")
    parser.add_argument("--name", default=None, help="표시 이름")
    parser.add_argument("--household-of", default=None, help="이 사용자의 가구에 합류")
    args = parser.parse_args()

    asyncio.run(main(args.username, args.name, args.household_of))
