"""
잔고 라우트

개인/가족 잔고 조회 및 잔고 이체 API
"""

from fastapi import APIRouter, Depends

from web.dependencies import get_balance_service, get_current_user_id
from web.models.requests import BalanceTransferRequest
from web.models.responses import (
    BalanceResponse,
    BalanceTransferResponse,
    BalanceTransferResultResponse,
)
from web.services.balance_service import BalanceService

router = APIRouter(prefix="/api/balance", tags=["Balance"])


@router.get("", response_model=BalanceResponse)
async def get_balance(
    user_id: int = Depends(get_current_user_id),
    service: BalanceService = Depends(get_balance_service),
) -> dict:
    """현재 사용자 잔고"""
    user = await service.get_balance(user_id)
    return user.balance_dict()


@router.get("/transfers", response_model=list[BalanceTransferResponse])
async def list_transfers(
    user_id: int = Depends(get_current_user_id),
    service: BalanceService = Depends(get_balance_service),
) -> list[dict]:
    """잔고 이체 내역 (최신순)"""
    transfers = await service.list_transfers(user_id)
    return [t.to_dict() for t in transfers]


@router.post("/transfers", response_model=BalanceTransferResultResponse, status_code=201)
async def create_transfer(
    request: BalanceTransferRequest,
    user_id: int = Depends(get_current_user_id),
    service: BalanceService = Depends(get_balance_service),
) -> dict:
    """개인 ↔ 가족 잔고 이체

    출금 측 잔고가 부족하면 400.
    """
    transfer, user = await service.transfer(
        user_id,
        from_personal=request.from_personal,
        amount=request.amount,
        description=request.description,
    )
    return {"transfer": transfer.to_dict(), "balance": user.balance_dict()}
