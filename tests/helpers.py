"""
테스트 공용 헬퍼
"""

from datetime import date
from decimal import Decimal

from core.domain.models import TransactionState
from core.types import TransactionKind


def make_transaction(
    user_id: int = 1,
    amount: str = "50",
    kind: TransactionKind = TransactionKind.EXPENSE,
    is_shared: bool = False,
    **overrides,
) -> TransactionState:
    """테스트용 거래 상태 생성"""
    fields = dict(
        user_id=user_id,
        amount=Decimal(amount),
        transaction_type_id=kind,
        is_shared=is_shared,
        category_id=1,
        date=date(2026, 3, 1),
    )
    fields.update(overrides)
    return TransactionState(**fields)
