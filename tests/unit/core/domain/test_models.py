"""
도메인 모델 테스트
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from core.domain.errors import BalanceApplyError, VersionConflictError
from core.domain.models import BalanceTransfer, UserState
from core.types import TransactionKind
from tests.helpers import make_transaction


class TestTransactionState:
    """TransactionState"""

    def test_immutable(self) -> None:
        tx = make_transaction()
        with pytest.raises(AttributeError):
            tx.amount = Decimal("1")  # type: ignore[misc]

    def test_with_changes_returns_new(self) -> None:
        tx = make_transaction(amount="50")
        changed = tx.with_changes(amount=Decimal("70"))

        assert tx.amount == Decimal("50")
        assert changed.amount == Decimal("70")

    def test_kind(self) -> None:
        assert make_transaction(kind=2).kind is TransactionKind.EXPENSE

    def test_is_persisted(self) -> None:
        assert not make_transaction().is_persisted
        assert make_transaction(id=1).is_persisted

    def test_to_dict_camel_case(self) -> None:
        created = datetime(2026, 3, 1, tzinfo=timezone.utc)
        tx = make_transaction(id=3, amount="1E+3", version=2, created_at=created)

        data = tx.to_dict()

        assert data["amount"] == "1000"
        assert data["transactionTypeId"] == 2
        assert data["date"] == "2026-03-01"
        assert data["createdAt"] == "2026-03-01T00:00:00+00:00"
        assert data["currency"] == "UYU"


class TestUserState:
    def test_balance_dict(self) -> None:
        user = UserState(id=1, username="ana", name="Ana", personal_balance=Decimal("-0.50"))
        assert user.balance_dict() == {
            "userId": 1,
            "personalBalance": "-0.50",
            "familyBalance": "0",
        }


class TestBalanceTransfer:
    def test_default_date_is_utc(self) -> None:
        transfer = BalanceTransfer(user_id=1, from_personal=True, amount=Decimal("5"))
        assert transfer.date.tzinfo is not None
        assert transfer.to_dict()["fromPersonal"] is True


class TestErrors:
    def test_version_conflict_fields(self) -> None:
        error = VersionConflictError(5, 1, 3)
        assert (error.transaction_id, error.expected, error.actual) == (5, 1, 3)
        assert "expected 1, got 3" in str(error)

    def test_balance_apply_error_keeps_cause(self) -> None:
        cause = RuntimeError("locked")
        error = BalanceApplyError(9, 2, cause)
        assert error.cause is cause
        assert "transaction 9" in str(error)
