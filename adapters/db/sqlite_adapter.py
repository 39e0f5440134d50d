"""
SQLite 어댑터

WAL 모드로 SQLite 연결 관리.
요청마다 연결을 열고 닫으며, 잔고 증감은 BEGIN IMMEDIATE 트랜잭션으로
다른 연결의 쓰기와 직렬화됨.

주의: 금액 컬럼은 TEXT (Decimal 문자열) - REAL 사용 금지
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import aiosqlite

from core.constants import Paths
from core.types import AppMode

logger = logging.getLogger(__name__)


def get_db_path(mode: AppMode | str) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        mode: 실행 모드 (production/development)

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if isinstance(mode, str):
        mode = AppMode(mode.lower())

    if mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEV_DB


async def create_connection(
    db_path: Path | str,
    readonly: bool = False,
) -> aiosqlite.Connection:
    """SQLite 연결 생성 (WAL 모드)

    트랜잭션은 SQLiteAdapter.transaction()에서 명시적으로 시작하므로
    드라이버의 암묵적 BEGIN은 끔 (isolation_level=None).

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부

    Returns:
        aiosqlite 연결 객체
    """
    db_path_str = str(db_path)

    if db_path_str != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    if readonly:
        conn = await aiosqlite.connect(
            f"file:{db_path_str}?mode=ro", uri=True, isolation_level=None
        )
    else:
        conn = await aiosqlite.connect(db_path_str, isolation_level=None)

    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA busy_timeout=30000")  # 30초 대기
    await conn.execute("PRAGMA foreign_keys=ON")

    logger.debug(
        "SQLite 연결 생성",
        extra={"db_path": db_path_str, "readonly": readonly},
    )

    return conn


class SQLiteAdapter:
    """SQLite 어댑터

    Args:
        db_path: DB 파일 경로
        readonly: 읽기 전용 여부 (조회 전용 요청용)

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as adapter:
        async with adapter.transaction(immediate=True) as conn:
            await conn.execute("UPDATE users SET ...")
    ```
    """

    def __init__(self, db_path: Path | str, readonly: bool = False):
        self.db_path = db_path if str(db_path) == ":memory:" else Path(db_path)
        self.readonly = readonly
        self._conn: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    async def connect(self) -> None:
        if self._conn is not None:
            return

        self._conn = await create_connection(self.db_path, self.readonly)

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None
            logger.debug("SQLite 연결 종료")

    async def execute(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> aiosqlite.Cursor:
        """SQL 실행"""
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        if parameters:
            return await self._conn.execute(sql, parameters)
        return await self._conn.execute(sql)

    async def fetchone(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> tuple[Any, ...] | None:
        """단일 행 조회"""
        cursor = await self.execute(sql, parameters)
        return await cursor.fetchone()

    async def fetchall(
        self,
        sql: str,
        parameters: tuple[Any, ...] | None = None,
    ) -> list[tuple[Any, ...]]:
        """전체 행 조회"""
        cursor = await self.execute(sql, parameters)
        return list(await cursor.fetchall())

    async def commit(self) -> None:
        if self._conn is not None and self._conn.in_transaction:
            await self._conn.commit()

    async def rollback(self) -> None:
        if self._conn is not None and self._conn.in_transaction:
            await self._conn.rollback()

    @asynccontextmanager
    async def transaction(self, immediate: bool = False) -> AsyncIterator[aiosqlite.Connection]:
        """트랜잭션 컨텍스트 매니저

        성공 시 자동 커밋, 예외 시 자동 롤백.
        immediate=True면 시작 시점에 쓰기 락을 잡음 (read-modify-write용).
        같은 연결 위의 트랜잭션은 순서대로 실행됨.

        사용 예시:
        ```python
        async with adapter.transaction(immediate=True) as conn:
            cursor = await conn.execute("SELECT ...")
            await conn.execute("UPDATE ...")
        ```
        """
        if self._conn is None:
            raise RuntimeError("Not connected to database")

        async with self._write_lock:
            await self._conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            try:
                yield self._conn
            except BaseException:
                await self._conn.rollback()
                raise
            await self._conn.commit()

    async def table_exists(self, table_name: str) -> bool:
        """테이블 존재 여부 확인"""
        result = await self.fetchone(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
            (table_name,),
        )
        return result is not None

    async def get_table_info(self, table_name: str) -> list[dict[str, Any]]:
        """테이블 정보 조회"""
        rows = await self.fetchall(f"PRAGMA table_info({table_name})")

        return [
            {
                "cid": row[0],
                "name": row[1],
                "type": row[2],
                "notnull": bool(row[3]),
                "default_value": row[4],
                "pk": bool(row[5]),
            }
            for row in rows
        ]

    # -------------------------------------------------------------------------
    # 컨텍스트 매니저
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> "SQLiteAdapter":
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()


async def init_schema(adapter: SQLiteAdapter) -> None:
    """스키마 초기화 (테이블 생성)

    Args:
        adapter: 연결된 SQLiteAdapter

    앱 시작 시(lifespan) 및 테스트 픽스처에서 호출. 반복 호출 안전.
    """
    # households (가구)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS households (
            id                  INTEGER PRIMARY KEY AUTOINCREMENT,
            name                TEXT NOT NULL,
            created_by_user_id  INTEGER NOT NULL,
            created_at          TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # users (사용자 + 이중 잔고)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id                INTEGER PRIMARY KEY AUTOINCREMENT,
            username          TEXT NOT NULL UNIQUE,
            name              TEXT NOT NULL,
            personal_balance  TEXT NOT NULL DEFAULT '0',
            family_balance    TEXT NOT NULL DEFAULT '0',
            household_id      INTEGER REFERENCES households(id),
            created_at        TEXT NOT NULL DEFAULT (datetime('now')),
            updated_at        TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)

    # transactions (거래, version = 낙관적 락)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS transactions (
            id                   INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id              INTEGER NOT NULL REFERENCES users(id),
            amount               TEXT NOT NULL,
            currency             TEXT NOT NULL DEFAULT 'UYU',
            transaction_type_id  INTEGER NOT NULL CHECK (transaction_type_id IN (1, 2, 3)),
            is_shared            INTEGER NOT NULL DEFAULT 0,
            date                 TEXT NOT NULL,
            category_id          INTEGER NOT NULL,
            account_id           INTEGER,
            description          TEXT NOT NULL DEFAULT '',
            notes                TEXT,
            version              INTEGER NOT NULL DEFAULT 1,
            created_at           TEXT NOT NULL,
            updated_at           TEXT NOT NULL
        )
    """)

    # balance_transfers (개인 ↔ 가족 잔고 이체)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS balance_transfers (
            id             INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id        INTEGER NOT NULL REFERENCES users(id),
            from_personal  INTEGER NOT NULL,
            amount         TEXT NOT NULL,
            currency       TEXT NOT NULL DEFAULT 'UYU',
            description    TEXT,
            date           TEXT NOT NULL
        )
    """)

    # balance_integrity_issues (저장 후 잔고 반영 실패 기록)
    await adapter.execute("""
        CREATE TABLE IF NOT EXISTS balance_integrity_issues (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id         INTEGER NOT NULL,
            transaction_id  INTEGER,
            operation       TEXT NOT NULL,
            personal_delta  TEXT NOT NULL,
            family_delta    TEXT NOT NULL,
            error           TEXT NOT NULL,
            status          TEXT NOT NULL DEFAULT 'OPEN',
            created_at      TEXT NOT NULL DEFAULT (datetime('now')),
            resolved_at     TEXT
        )
    """)

    # 인덱스
    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_transactions_user_date
        ON transactions(user_id, date)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_users_household
        ON users(household_id)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_balance_transfers_user
        ON balance_transfers(user_id, date)
    """)

    await adapter.execute("""
        CREATE INDEX IF NOT EXISTS ix_integrity_user_status
        ON balance_integrity_issues(user_id, status)
    """)

    await adapter.commit()

    logger.info("스키마 초기화 완료")
