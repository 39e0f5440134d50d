"""
Web 모델 패키지

Pydantic 스키마 정의
"""

from web.models.requests import (
    BalanceTransferRequest,
    InvitationCreateRequest,
    ReconcileRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from web.models.responses import (
    BalanceResponse,
    BalanceTransferResponse,
    BalanceTransferResultResponse,
    HealthResponse,
    HouseholdMemberResponse,
    HouseholdResponse,
    IntegrityIssueResponse,
    InvitationAcceptResponse,
    InvitationResponse,
    ReconcileResponse,
    TransactionMutationResponse,
    TransactionResponse,
)

__all__ = [
    # Requests
    "BalanceTransferRequest",
    "InvitationCreateRequest",
    "ReconcileRequest",
    "TransactionCreateRequest",
    "TransactionUpdateRequest",
    # Responses
    "BalanceResponse",
    "BalanceTransferResponse",
    "BalanceTransferResultResponse",
    "HealthResponse",
    "HouseholdMemberResponse",
    "HouseholdResponse",
    "IntegrityIssueResponse",
    "InvitationAcceptResponse",
    "InvitationResponse",
    "ReconcileResponse",
    "TransactionMutationResponse",
    "TransactionResponse",
]
