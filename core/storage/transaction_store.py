"""
TransactionStore - 거래 저장소

transactions 테이블 읽기/쓰기. ITransactionRepository Protocol 준수.
version 컬럼으로 낙관적 락: 수정은 저장된 version이 같을 때만 성공.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import NotFoundError, PersistenceError, VersionConflictError
from core.domain.models import TransactionState
from core.ledger.balance import parse_amount
from core.types import TransactionKind

logger = logging.getLogger(__name__)


_COLUMNS = """
    id, user_id, amount, currency, transaction_type_id, is_shared, date,
    category_id, account_id, description, notes, version, created_at
"""


def _row_to_state(row: tuple[Any, ...]) -> TransactionState:
    """DB 행 → TransactionState

    Raises:
        AmountError: 저장된 금액이 숫자가 아닌 경우 (DataIntegrityError)
    """
    return TransactionState(
        id=row[0],
        user_id=row[1],
        amount=parse_amount(row[2]),
        currency=row[3],
        transaction_type_id=TransactionKind(row[4]),
        is_shared=bool(row[5]),
        date=date.fromisoformat(row[6]),
        category_id=row[7],
        account_id=row[8],
        description=row[9] or "",
        notes=row[10],
        version=row[11],
        created_at=datetime.fromisoformat(row[12]) if row[12] else None,
    )


class TransactionStore:
    """거래 저장소

    Args:
        db: SQLiteAdapter 인스턴스

    사용 예시:
    ```python
    async with SQLiteAdapter(db_path) as db:
        store = TransactionStore(db)
        saved = await store.save_transaction(state)   # version=1
        saved = await store.save_transaction(saved.with_changes(amount=Decimal("80")))
    ```
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def load_transaction(self, transaction_id: int) -> TransactionState | None:
        try:
            row = await self.db.fetchone(
                f"SELECT {_COLUMNS} FROM transactions WHERE id = ?",
                (transaction_id,),
            )
        except aiosqlite.Error as e:
            raise PersistenceError(f"거래 조회 실패: {e}") from e

        return _row_to_state(row) if row else None

    async def save_transaction(self, state: TransactionState) -> TransactionState:
        """생성 (id 없음) 또는 version 조건부 수정"""
        now = datetime.now(timezone.utc).isoformat()

        try:
            if state.id is None:
                return await self._insert(state, now)
            return await self._update(state, now)
        except aiosqlite.Error as e:
            logger.error(
                "거래 저장 실패",
                extra={"transaction_id": state.id, "error": str(e)},
            )
            raise PersistenceError(f"거래 저장 실패: {e}") from e

    async def _insert(self, state: TransactionState, now: str) -> TransactionState:
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO transactions (
                    user_id, amount, currency, transaction_type_id, is_shared, date,
                    category_id, account_id, description, notes, version,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?)
                """,
                (
                    state.user_id,
                    format(state.amount, "f"),
                    state.currency,
                    int(state.transaction_type_id),
                    int(state.is_shared),
                    state.date.isoformat(),
                    state.category_id,
                    state.account_id,
                    state.description,
                    state.notes,
                    now,
                    now,
                ),
            )
            new_id = cursor.lastrowid

        logger.debug("거래 생성", extra={"transaction_id": new_id})
        return state.with_changes(
            id=new_id,
            version=1,
            created_at=datetime.fromisoformat(now),
        )

    async def _update(self, state: TransactionState, now: str) -> TransactionState:
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE transactions SET
                    user_id = ?, amount = ?, currency = ?, transaction_type_id = ?,
                    is_shared = ?, date = ?, category_id = ?, account_id = ?,
                    description = ?, notes = ?,
                    version = version + 1,
                    updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (
                    state.user_id,
                    format(state.amount, "f"),
                    state.currency,
                    int(state.transaction_type_id),
                    int(state.is_shared),
                    state.date.isoformat(),
                    state.category_id,
                    state.account_id,
                    state.description,
                    state.notes,
                    now,
                    state.id,
                    state.version,
                ),
            )
            updated = cursor.rowcount

            if updated == 0:
                cursor = await conn.execute(
                    "SELECT version FROM transactions WHERE id = ?",
                    (state.id,),
                )
                row = await cursor.fetchone()

        if updated == 0:
            if row is None:
                raise NotFoundError(f"Transaction not found: {state.id}")
            raise VersionConflictError(state.id, state.version, row[0])

        return state.with_changes(version=state.version + 1)

    async def delete_transaction(self, transaction_id: int) -> bool:
        try:
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    "DELETE FROM transactions WHERE id = ?",
                    (transaction_id,),
                )
                return cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise PersistenceError(f"거래 삭제 실패: {e}") from e

    async def list_transactions(
        self,
        user_id: int,
        household_id: int | None = None,
        transaction_type_id: int | None = None,
        is_shared: bool | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransactionState]:
        """사용자 거래 + 같은 가구 구성원의 공유 거래 (최신순)"""
        if household_id is not None:
            conditions = [
                "(user_id = ? OR (is_shared = 1 AND user_id IN "
                "(SELECT id FROM users WHERE household_id = ?)))"
            ]
            params: list[Any] = [user_id, household_id]
        else:
            conditions = ["user_id = ?"]
            params = [user_id]

        if transaction_type_id is not None:
            conditions.append("transaction_type_id = ?")
            params.append(int(transaction_type_id))

        if is_shared is not None:
            conditions.append("is_shared = ?")
            params.append(int(is_shared))

        if start_date is not None:
            conditions.append("date >= ?")
            params.append(start_date.isoformat())

        if end_date is not None:
            conditions.append("date <= ?")
            params.append(end_date.isoformat())

        params.extend([limit, offset])

        try:
            rows = await self.db.fetchall(
                f"""
                SELECT {_COLUMNS}
                FROM transactions
                WHERE {" AND ".join(conditions)}
                ORDER BY date DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                tuple(params),
            )
        except aiosqlite.Error as e:
            raise PersistenceError(f"거래 목록 조회 실패: {e}") from e

        return [_row_to_state(row) for row in rows]

    async def list_user_transactions(self, user_id: int) -> list[TransactionState]:
        try:
            rows = await self.db.fetchall(
                f"SELECT {_COLUMNS} FROM transactions WHERE user_id = ? ORDER BY id",
                (user_id,),
            )
        except aiosqlite.Error as e:
            raise PersistenceError(f"거래 목록 조회 실패: {e}") from e

        return [_row_to_state(row) for row in rows]
