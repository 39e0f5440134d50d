"""
UserStore - 사용자/가구 저장소

users, households 테이블 읽기/쓰기.
IBalanceRepository, IHouseholdDirectory Protocol 준수.

잔고는 increment_user_balances로만 변경됨. 잔고 컬럼은 Decimal 문자열이라
SQL 산술 대신 BEGIN IMMEDIATE 트랜잭션 안에서 읽기 → 더하기 → 쓰기를
수행하여, 다른 연결의 동시 증감이 서로를 덮어쓰지 않음.
"""

import logging
from decimal import Decimal
from pathlib import Path
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import NotFoundError, PersistenceError, ValidationError
from core.domain.models import Household, UserState
from core.ledger.balance import parse_balance

logger = logging.getLogger(__name__)


_USER_COLUMNS = "id, username, name, personal_balance, family_balance, household_id"


def _row_to_user(row: tuple[Any, ...]) -> UserState:
    return UserState(
        id=row[0],
        username=row[1],
        name=row[2],
        personal_balance=parse_balance(row[3]),
        family_balance=parse_balance(row[4]),
        household_id=row[5],
    )


class UserStore:
    """사용자/가구 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    # -------------------------------------------------------------------------
    # 사용자
    # -------------------------------------------------------------------------

    async def create_user(self, username: str, name: str | None = None) -> UserState:
        """사용자 생성 (잔고 0)

        Raises:
            ValidationError: username 중복
        """
        try:
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    "INSERT INTO users (username, name) VALUES (?, ?)",
                    (username, name or username),
                )
                user_id = cursor.lastrowid
        except aiosqlite.IntegrityError as e:
            raise ValidationError(f"이미 존재하는 사용자: {username}") from e
        except aiosqlite.Error as e:
            raise PersistenceError(f"사용자 생성 실패: {e}") from e

        logger.info(f"사용자 생성: {username}", extra={"user_id": user_id})
        return UserState(id=user_id, username=username, name=name or username)

    async def get_user(self, user_id: int) -> UserState | None:
        try:
            row = await self.db.fetchone(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
                (user_id,),
            )
        except aiosqlite.Error as e:
            raise PersistenceError(f"사용자 조회 실패: {e}") from e

        return _row_to_user(row) if row else None

    async def get_user_by_username(self, username: str) -> UserState | None:
        row = await self.db.fetchone(
            f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?",
            (username,),
        )
        return _row_to_user(row) if row else None

    async def increment_user_balances(
        self,
        user_id: int,
        personal_delta: Decimal,
        family_delta: Decimal,
    ) -> UserState:
        """잔고에 델타를 원자적으로 더함

        Raises:
            NotFoundError: 사용자 없음
            PersistenceError: 저장소 장애
        """
        try:
            async with self.db.transaction(immediate=True) as conn:
                cursor = await conn.execute(
                    f"SELECT {_USER_COLUMNS} FROM users WHERE id = ?",
                    (user_id,),
                )
                row = await cursor.fetchone()
                if row is None:
                    raise NotFoundError(f"User not found: {user_id}")

                current = _row_to_user(row)
                updated = UserState(
                    id=current.id,
                    username=current.username,
                    name=current.name,
                    personal_balance=current.personal_balance + personal_delta,
                    family_balance=current.family_balance + family_delta,
                    household_id=current.household_id,
                )

                await conn.execute(
                    """
                    UPDATE users
                    SET personal_balance = ?, family_balance = ?, updated_at = datetime('now')
                    WHERE id = ?
                    """,
                    (
                        format(updated.personal_balance, "f"),
                        format(updated.family_balance, "f"),
                        user_id,
                    ),
                )
        except aiosqlite.Error as e:
            raise PersistenceError(f"잔고 반영 실패: {e}") from e

        logger.debug(
            f"사용자 {user_id} 잔고 반영",
            extra={
                "personal_delta": format(personal_delta, "f"),
                "family_delta": format(family_delta, "f"),
            },
        )
        return updated

    # -------------------------------------------------------------------------
    # 가구
    # -------------------------------------------------------------------------

    async def create_household(self, name: str, created_by_user_id: int) -> Household:
        """가구 생성 후 생성자를 구성원으로 등록"""
        try:
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    "INSERT INTO households (name, created_by_user_id) VALUES (?, ?)",
                    (name, created_by_user_id),
                )
                household_id = cursor.lastrowid
                await conn.execute(
                    "UPDATE users SET household_id = ? WHERE id = ?",
                    (household_id, created_by_user_id),
                )
        except aiosqlite.Error as e:
            raise PersistenceError(f"가구 생성 실패: {e}") from e

        logger.info(f"가구 생성: {name}", extra={"household_id": household_id})
        return Household(id=household_id, name=name, created_by_user_id=created_by_user_id)

    async def get_household(self, household_id: int) -> Household | None:
        row = await self.db.fetchone(
            "SELECT id, name, created_by_user_id FROM households WHERE id = ?",
            (household_id,),
        )
        return Household(id=row[0], name=row[1], created_by_user_id=row[2]) if row else None

    async def set_household(self, user_id: int, household_id: int | None) -> UserState:
        """사용자 가구 변경 (None이면 탈퇴)"""
        try:
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    "UPDATE users SET household_id = ?, updated_at = datetime('now') WHERE id = ?",
                    (household_id, user_id),
                )
                changed = cursor.rowcount
        except aiosqlite.Error as e:
            raise PersistenceError(f"가구 변경 실패: {e}") from e

        if changed == 0:
            raise NotFoundError(f"User not found: {user_id}")

        user = await self.get_user(user_id)
        assert user is not None
        return user

    async def get_member_ids(self, household_id: int) -> set[int]:
        rows = await self.db.fetchall(
            "SELECT id FROM users WHERE household_id = ?",
            (household_id,),
        )
        return {row[0] for row in rows}

    async def list_members(self, household_id: int) -> list[UserState]:
        rows = await self.db.fetchall(
            f"SELECT {_USER_COLUMNS} FROM users WHERE household_id = ? ORDER BY id",
            (household_id,),
        )
        return [_row_to_user(row) for row in rows]


class HouseholdDirectory:
    """가구 구성원 조회 (IHouseholdDirectory 구현)

    프로세스 단위 NotificationFanout에 주입하기 위해 조회마다
    읽기 전용 연결을 열고 닫음.

    Args:
        db_path: DB 파일 경로
    """

    def __init__(self, db_path: Path | str):
        self.db_path = db_path

    async def get_member_ids(self, household_id: int) -> set[int]:
        async with SQLiteAdapter(self.db_path, readonly=True) as db:
            return await UserStore(db).get_member_ids(household_id)
