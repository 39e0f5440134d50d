"""
정합성 라우트

잔고 반영 실패 이슈 조회 및 잔고 재계산/보정 API
"""

from fastapi import APIRouter, Depends, Query

from adapters.db.sqlite_adapter import SQLiteAdapter
from core.ledger.reconciler import BalanceReconciler
from core.storage.integrity_store import IntegrityStore
from core.types import IntegrityStatus
from web.dependencies import get_current_user_id, get_db, get_reconciler
from web.models.requests import ReconcileRequest
from web.models.responses import IntegrityIssueResponse, ReconcileResponse

router = APIRouter(prefix="/api/integrity", tags=["Integrity"])


@router.get("/issues", response_model=list[IntegrityIssueResponse])
async def list_issues(
    status: IntegrityStatus | None = Query(default=None, description="상태 필터 (OPEN/RESOLVED)"),
    user_id: int = Depends(get_current_user_id),
    db: SQLiteAdapter = Depends(get_db),
) -> list[dict]:
    """내 잔고 정합성 이슈 목록"""
    return await IntegrityStore(db).list_issues(status=status, user_id=user_id)


@router.post("/reconcile", response_model=ReconcileResponse)
async def reconcile(
    request: ReconcileRequest,
    user_id: int = Depends(get_current_user_id),
    reconciler: BalanceReconciler = Depends(get_reconciler),
) -> dict:
    """거래/이체 이력으로 잔고 재계산

    apply=true면 보정 델타를 적용하고 미해결 이슈를 해결 처리.
    """
    drift = await reconciler.reconcile(user_id, apply=request.apply)

    return {
        "userId": user_id,
        "consistent": drift is None,
        "applied": request.apply and drift is not None,
        "drift": drift.to_dict() if drift else None,
    }
