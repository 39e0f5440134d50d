"""
거래 라우트

거래 생성/조회/수정/삭제 API.
변경은 모두 MutationOrchestrator를 거쳐 잔고 반영과 알림이 함께 처리됨.
도메인 예외 → HTTP 상태 코드 변환은 web/app.py의 예외 핸들러가 담당.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.domain.models import TransactionState
from core.ledger.orchestrator import MutationOrchestrator, MutationResult
from core.storage.transaction_store import TransactionStore
from core.storage.user_store import UserStore
from core.types import TransactionKind
from web.dependencies import get_current_user_id, get_db, get_orchestrator
from web.models.requests import TransactionCreateRequest, TransactionUpdateRequest
from web.models.responses import TransactionMutationResponse, TransactionResponse

router = APIRouter(prefix="/api", tags=["Transactions"])


def _mutation_response(result: MutationResult, actor_id: int) -> dict:
    actor = result.balances.get(actor_id)
    return {
        "transaction": result.transaction.to_dict(),
        "balance": actor.balance_dict() if actor else None,
    }


@router.post(
    "/transactions",
    response_model=TransactionMutationResponse,
    status_code=201,
)
async def create_transaction(
    request: TransactionCreateRequest,
    user_id: int = Depends(get_current_user_id),
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> dict:
    """거래 생성

    소유자는 인증된 사용자로 고정. 잔고 델타 적용 후 BALANCE_UPDATE와
    TRANSACTION_CREATED가 전송됨 (공유 거래면 가구 구성원에게도).
    """
    draft = TransactionState(
        user_id=user_id,
        amount=request.amount,
        currency=request.currency,
        transaction_type_id=request.transaction_type_id,
        is_shared=request.is_shared,
        date=request.date,
        category_id=request.category_id,
        account_id=request.account_id,
        description=request.description,
        notes=request.notes,
    )

    result = await orchestrator.create_transaction(user_id, draft)
    return _mutation_response(result, user_id)


@router.get("/transactions", response_model=list[TransactionResponse])
async def list_transactions(
    transaction_type_id: TransactionKind | None = Query(
        default=None, alias="transactionTypeId", description="거래 유형 필터"
    ),
    is_shared: bool | None = Query(default=None, alias="isShared", description="공유 여부 필터"),
    start_date: date | None = Query(default=None, alias="startDate", description="시작일"),
    end_date: date | None = Query(default=None, alias="endDate", description="종료일"),
    limit: int = Query(default=100, ge=1, le=500, description="조회 개수"),
    offset: int = Query(default=0, ge=0, description="오프셋"),
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db),
) -> list[dict]:
    """내 거래 + 같은 가구 구성원의 공유 거래 (최신순)"""
    user = await UserStore(db).get_user(user_id)
    household_id = user.household_id if user else None

    transactions = await TransactionStore(db).list_transactions(
        user_id=user_id,
        household_id=household_id,
        transaction_type_id=transaction_type_id,
        is_shared=is_shared,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return [t.to_dict() for t in transactions]


@router.get("/transactions/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: int = Path(..., description="거래 ID"),
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db),
) -> dict:
    """거래 조회 (본인 거래 또는 같은 가구의 공유 거래)"""
    transaction = await TransactionStore(db).load_transaction(transaction_id)

    if transaction is not None and transaction.user_id != user_id:
        users = UserStore(db)
        viewer = await users.get_user(user_id)
        owner = await users.get_user(transaction.user_id)
        visible = (
            transaction.is_shared
            and viewer is not None
            and owner is not None
            and viewer.household_id is not None
            and viewer.household_id == owner.household_id
        )
        if not visible:
            transaction = None

    if transaction is None:
        raise HTTPException(status_code=404, detail=f"Transaction not found: {transaction_id}")

    return transaction.to_dict()


@router.put("/transactions/{transaction_id}", response_model=TransactionMutationResponse)
async def update_transaction(
    request: TransactionUpdateRequest,
    transaction_id: int = Path(..., description="거래 ID"),
    user_id: int = Depends(get_current_user_id),
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> dict:
    """거래 수정 (소유자만)

    expectedVersion을 지정하면 해당 버전일 때만 수정 (불일치 시 409).
    """
    result = await orchestrator.update_transaction(
        user_id,
        transaction_id,
        request.changes(),
        expected_version=request.expected_version,
    )
    return _mutation_response(result, user_id)


@router.delete("/transactions/{transaction_id}", status_code=204)
async def delete_transaction(
    transaction_id: int = Path(..., description="거래 ID"),
    user_id: int = Depends(get_current_user_id),
    orchestrator: MutationOrchestrator = Depends(get_orchestrator),
) -> Response:
    """거래 삭제 (소유자만, 생성 효과를 되돌림)"""
    await orchestrator.delete_transaction(user_id, transaction_id)
    return Response(status_code=204)
