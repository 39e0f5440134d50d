"""
TransferStore - 잔고 이체 기록 저장소

balance_transfers 테이블 (개인 ↔ 가족 잔고 이체). ITransferRepository Protocol 준수.
"""

from datetime import datetime
from typing import Any

import aiosqlite

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.errors import PersistenceError
from core.domain.models import BalanceTransfer
from core.ledger.balance import parse_amount


def _row_to_transfer(row: tuple[Any, ...]) -> BalanceTransfer:
    return BalanceTransfer(
        id=row[0],
        user_id=row[1],
        from_personal=bool(row[2]),
        amount=parse_amount(row[3]),
        currency=row[4],
        description=row[5],
        date=datetime.fromisoformat(row[6]),
    )


class TransferStore:
    """잔고 이체 기록 저장소

    Args:
        db: SQLiteAdapter 인스턴스
    """

    def __init__(self, db: SQLiteAdapter):
        self.db = db

    async def save_transfer(self, transfer: BalanceTransfer) -> BalanceTransfer:
        try:
            async with self.db.transaction() as conn:
                cursor = await conn.execute(
                    """
                    INSERT INTO balance_transfers
                        (user_id, from_personal, amount, currency, description, date)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    (
                        transfer.user_id,
                        int(transfer.from_personal),
                        format(transfer.amount, "f"),
                        transfer.currency,
                        transfer.description,
                        transfer.date.isoformat(),
                    ),
                )
                transfer_id = cursor.lastrowid
        except aiosqlite.Error as e:
            raise PersistenceError(f"이체 기록 저장 실패: {e}") from e

        return BalanceTransfer(
            id=transfer_id,
            user_id=transfer.user_id,
            from_personal=transfer.from_personal,
            amount=transfer.amount,
            currency=transfer.currency,
            description=transfer.description,
            date=transfer.date,
        )

    async def list_transfers(self, user_id: int) -> list[BalanceTransfer]:
        """사용자 이체 기록 (최신순)"""
        rows = await self.db.fetchall(
            """
            SELECT id, user_id, from_personal, amount, currency, description, date
            FROM balance_transfers
            WHERE user_id = ?
            ORDER BY date DESC, id DESC
            """,
            (user_id,),
        )
        return [_row_to_transfer(row) for row in rows]
