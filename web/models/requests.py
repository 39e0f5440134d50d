"""
요청 스키마 (Pydantic)

Web API 요청 데이터 검증.
JSON 키는 camelCase (예: transactionTypeId), 파이썬 필드는 snake_case.
금액은 문자열 또는 정수로만 받음 (float 거부).
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from core.constants import Currencies, Defaults
from core.domain.errors import AmountError
from core.ledger.balance import parse_amount
from core.types import TransactionKind


class CamelModel(BaseModel):
    """camelCase JSON ↔ snake_case 필드"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _validate_amount(value: Any) -> Decimal:
    try:
        amount = parse_amount(value)
    except AmountError as e:
        raise ValueError(str(e)) from e

    if amount == 0:
        raise ValueError("금액은 0보다 커야 합니다")
    return amount


def _validate_currency(value: str) -> str:
    if value not in Currencies.ALL:
        raise ValueError(f"지원하지 않는 통화: {value}. 유효한 값: {list(Currencies.ALL)}")
    return value


class TransactionCreateRequest(CamelModel):
    """거래 생성 요청"""

    amount: Decimal = Field(..., description="금액 (양수, 문자열 또는 정수)")
    currency: str = Field(default=Defaults.CURRENCY, description="통화")
    transaction_type_id: TransactionKind = Field(..., description="1 수입, 2 지출, 3 이체")
    is_shared: bool = Field(default=False, description="가족 공유 지출 여부")
    date: dt.date = Field(..., description="거래일")
    category_id: int = Field(..., description="카테고리 ID")
    account_id: int | None = Field(default=None, description="계좌 ID")
    description: str = Field(default="", max_length=500, description="설명")
    notes: str | None = Field(default=None, description="메모")

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value: Any) -> Decimal:
        return _validate_amount(value)

    @field_validator("currency")
    @classmethod
    def check_currency(cls, value: str) -> str:
        return _validate_currency(value)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "amount": "1250.50",
                    "currency": "UYU",
                    "transactionTypeId": 2,
                    "isShared": True,
                    "date": "2026-03-01",
                    "categoryId": 4,
                    "description": "Supermercado",
                }
            ]
        },
    )


class TransactionUpdateRequest(CamelModel):
    """거래 수정 요청 (보낸 필드만 변경)

    expected_version을 지정하면 해당 버전일 때만 수정 (낙관적 락).
    """

    amount: Decimal | None = Field(default=None, description="금액")
    currency: str | None = Field(default=None, description="통화")
    transaction_type_id: TransactionKind | None = Field(default=None, description="거래 유형")
    is_shared: bool | None = Field(default=None, description="가족 공유 지출 여부")
    date: dt.date | None = Field(default=None, description="거래일")
    category_id: int | None = Field(default=None, description="카테고리 ID")
    account_id: int | None = Field(default=None, description="계좌 ID")
    description: str | None = Field(default=None, max_length=500, description="설명")
    notes: str | None = Field(default=None, description="메모")
    expected_version: int | None = Field(
        default=None,
        ge=1,
        description="예상 버전 (낙관적 락, None이면 무시)",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value: Any) -> Decimal | None:
        return None if value is None else _validate_amount(value)

    @field_validator("currency")
    @classmethod
    def check_currency(cls, value: str | None) -> str | None:
        return None if value is None else _validate_currency(value)

    def changes(self) -> dict[str, Any]:
        """요청에 포함된 변경 필드 (None 값 필드 제외, account_id/notes는 null 허용)"""
        data = self.model_dump(exclude_unset=True, exclude={"expected_version"})
        nullable = {"account_id", "notes"}
        return {k: v for k, v in data.items() if v is not None or k in nullable}


class BalanceTransferRequest(CamelModel):
    """개인 ↔ 가족 잔고 이체 요청"""

    amount: Decimal = Field(..., description="이체 금액")
    from_personal: bool = Field(..., description="True면 개인 → 가족, False면 가족 → 개인")
    description: str | None = Field(default=None, max_length=200, description="설명")

    @field_validator("amount", mode="before")
    @classmethod
    def check_amount(cls, value: Any) -> Decimal:
        return _validate_amount(value)


class InvitationCreateRequest(CamelModel):
    """가구 초대 요청"""

    invited_username: str = Field(..., min_length=1, description="초대할 사용자명")


class ReconcileRequest(CamelModel):
    """잔고 정합성 복구 요청"""

    apply: bool = Field(default=False, description="True면 보정 델타 적용, False면 감지만")
