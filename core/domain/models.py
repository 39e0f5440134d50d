"""
도메인 모델

거래(Transaction), 사용자 잔고(User), 가구(Household), 잔고 이체 데이터 구조.
금액은 반드시 Decimal 사용 (float 금지).
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from core.constants import Defaults
from core.types import TransactionKind


def _money(value: Decimal) -> str:
    """Decimal → 저장/전송용 문자열 (지수 표기 방지)"""
    return format(value, "f")


@dataclass(frozen=True)
class TransactionState:
    """거래 상태 (불변)

    amount는 항상 양수 크기. 방향(부호)은 transaction_type_id와
    is_shared로부터 결정되며 별도로 저장하지 않음.
    """

    user_id: int
    amount: Decimal
    transaction_type_id: TransactionKind
    category_id: int
    date: date
    is_shared: bool = False
    currency: str = Defaults.CURRENCY
    account_id: int | None = None
    description: str = ""
    notes: str | None = None
    id: int | None = None  # 저장 시 할당
    version: int = 0  # 저장 시 1부터 시작
    created_at: datetime | None = None

    @property
    def kind(self) -> TransactionKind:
        return TransactionKind(self.transaction_type_id)

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_changes(self, **changes: Any) -> "TransactionState":
        """일부 필드만 바꾼 새 상태 반환"""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """딕셔너리로 변환 (API 응답/알림 페이로드용)"""
        return {
            "id": self.id,
            "userId": self.user_id,
            "amount": _money(self.amount),
            "currency": self.currency,
            "transactionTypeId": int(self.transaction_type_id),
            "isShared": self.is_shared,
            "date": self.date.isoformat(),
            "categoryId": self.category_id,
            "accountId": self.account_id,
            "description": self.description,
            "notes": self.notes,
            "version": self.version,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class UserState:
    """사용자 잔고 상태"""

    id: int
    username: str
    name: str
    personal_balance: Decimal = Decimal("0")
    family_balance: Decimal = Decimal("0")
    household_id: int | None = None

    def balance_dict(self) -> dict[str, Any]:
        """BALANCE_UPDATE 페이로드 / GET /api/balance 응답"""
        return {
            "userId": self.id,
            "personalBalance": _money(self.personal_balance),
            "familyBalance": _money(self.family_balance),
        }


@dataclass(frozen=True)
class Household:
    """가구 (그룹 식별자)"""

    id: int
    name: str
    created_by_user_id: int


@dataclass(frozen=True)
class BalanceTransfer:
    """개인 ↔ 가족 잔고 이체 기록"""

    user_id: int
    from_personal: bool
    amount: Decimal
    currency: str = Defaults.CURRENCY
    description: str | None = None
    date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "fromPersonal": self.from_personal,
            "amount": _money(self.amount),
            "currency": self.currency,
            "description": self.description,
            "date": self.date.isoformat(),
        }
