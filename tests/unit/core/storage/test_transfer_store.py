"""
TransferStore 테스트
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.domain.models import BalanceTransfer
from core.storage import TransferStore


class TestTransferStore:
    @pytest.mark.asyncio
    async def test_save_and_list(self, db, users) -> None:
        store = TransferStore(db)
        older = BalanceTransfer(
            user_id=1, from_personal=True, amount=Decimal("10"),
            date=datetime(2026, 3, 1, tzinfo=timezone.utc),
        )
        newer = BalanceTransfer(
            user_id=1, from_personal=False, amount=Decimal("2.5"), description="ajuste",
            date=datetime(2026, 3, 2, tzinfo=timezone.utc),
        )

        saved_old = await store.save_transfer(older)
        saved_new = await store.save_transfer(newer)
        await store.save_transfer(BalanceTransfer(user_id=2, from_personal=True, amount=Decimal("1")))

        rows = await store.list_transfers(1)

        assert [t.id for t in rows] == [saved_new.id, saved_old.id]
        assert rows[0].amount == Decimal("2.5")
        assert rows[0].from_personal is False
        assert rows[0].description == "ajuste"
        assert rows[1].date == older.date
