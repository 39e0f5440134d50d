"""
IntegrityStore - 잔고 정합성 이슈 저장소

거래는 저장되었으나 잔고 반영에 실패한 건을 balance_integrity_issues에 기록.
scripts/reconcile_balances.py 또는 POST /api/integrity/reconcile로 복구 후
RESOLVED 처리. IIntegrityRecorder Protocol 준수.
"""

import logging
from decimal import Decimal
from typing import Any

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.types import IntegrityStatus

logger = logging.getLogger(__name__)


class IntegrityStore:
    """정합성 이슈 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def record_issue(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        personal_delta: Decimal,
        family_delta: Decimal,
        error: str,
    ) -> int:
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                """
                INSERT INTO balance_integrity_issues
                    (user_id, transaction_id, operation, personal_delta, family_delta, error, status)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    user_id,
                    transaction_id,
                    operation,
                    format(personal_delta, "f"),
                    format(family_delta, "f"),
                    error,
                    IntegrityStatus.OPEN.value,
                ),
            )
            issue_id = cursor.lastrowid

        logger.warning(
            f"정합성 이슈 기록: #{issue_id} 사용자 {user_id}",
            extra={"transaction_id": transaction_id, "operation": operation},
        )
        return issue_id

    async def list_issues(
        self,
        status: IntegrityStatus | None = None,
        user_id: int | None = None,
    ) -> list[dict[str, Any]]:
        conditions = []
        params: list[Any] = []

        if status is not None:
            conditions.append("status = ?")
            params.append(status.value)

        if user_id is not None:
            conditions.append("user_id = ?")
            params.append(user_id)

        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = await self.db.fetchall(
            f"""
            SELECT id, user_id, transaction_id, operation, personal_delta,
                   family_delta, error, status, created_at, resolved_at
            FROM balance_integrity_issues
            {where}
            ORDER BY id DESC
            """,
            tuple(params),
        )

        return [
            {
                "id": row[0],
                "userId": row[1],
                "transactionId": row[2],
                "operation": row[3],
                "personalDelta": row[4],
                "familyDelta": row[5],
                "error": row[6],
                "status": row[7],
                "createdAt": row[8],
                "resolvedAt": row[9],
            }
            for row in rows
        ]

    async def resolve_user_issues(self, user_id: int) -> int:
        async with self.db.transaction() as conn:
            cursor = await conn.execute(
                """
                UPDATE balance_integrity_issues
                SET status = ?, resolved_at = datetime('now')
                WHERE user_id = ? AND status = ?
                """,
                (IntegrityStatus.RESOLVED.value, user_id, IntegrityStatus.OPEN.value),
            )
            return cursor.rowcount
