"""
응답 스키마 (Pydantic)

Web API 응답 데이터 직렬화. JSON 키는 camelCase, 금액은 문자열.
"""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """헬스 체크 응답"""

    status: str = Field(default="ok", description="서비스 상태")
    mode: str = Field(..., description="실행 모드 (development/production)")
    version: str = Field(..., description="API 버전")
    connections: dict[str, int] = Field(default_factory=dict, description="푸시 채널 통계")


class TransactionResponse(BaseModel):
    """거래 응답"""

    id: int
    userId: int
    amount: str
    currency: str
    transactionTypeId: int
    isShared: bool
    date: str
    categoryId: int
    accountId: int | None = None
    description: str = ""
    notes: str | None = None
    version: int
    createdAt: str | None = None


class BalanceResponse(BaseModel):
    """사용자 잔고 응답"""

    userId: int
    personalBalance: str = Field(..., description="개인 잔고")
    familyBalance: str = Field(..., description="가족 잔고 (이 사용자가 가족에 기여한 누계)")


class TransactionMutationResponse(BaseModel):
    """거래 생성/수정 응답 (거래 + 적용 후 잔고)"""

    transaction: TransactionResponse
    balance: BalanceResponse | None = Field(default=None, description="행위자 잔고 (변화 없으면 None)")


class BalanceTransferResponse(BaseModel):
    """잔고 이체 기록 응답"""

    id: int
    userId: int
    fromPersonal: bool
    amount: str
    currency: str
    description: str | None = None
    date: str


class BalanceTransferResultResponse(BaseModel):
    """잔고 이체 결과 (기록 + 이체 후 잔고)"""

    transfer: BalanceTransferResponse
    balance: BalanceResponse


class HouseholdMemberResponse(BaseModel):
    """가구 구성원"""

    id: int
    username: str
    name: str


class HouseholdResponse(BaseModel):
    """가구 정보 + 구성원"""

    id: int | None = None
    name: str | None = None
    members: list[HouseholdMemberResponse] = Field(default_factory=list)


class InvitationResponse(BaseModel):
    """초대 코드 응답"""

    code: str
    inviterUserId: int
    inviterUsername: str
    householdId: int
    invitedUsername: str
    expiresAt: str


class InvitationAcceptResponse(BaseModel):
    """초대 수락 결과"""

    userId: int
    householdId: int


class IntegrityIssueResponse(BaseModel):
    """잔고 정합성 이슈"""

    id: int
    userId: int
    transactionId: int | None = None
    operation: str
    personalDelta: str
    familyDelta: str
    error: str
    status: str
    createdAt: str
    resolvedAt: str | None = None


class ReconcileResponse(BaseModel):
    """잔고 정합성 복구 결과"""

    userId: int
    consistent: bool = Field(..., description="불일치 없음 여부")
    applied: bool = Field(..., description="보정 적용 여부")
    drift: dict[str, Any] | None = None
