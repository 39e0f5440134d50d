"""
의존성 주입

FastAPI의 Depends를 사용한 의존성 관리.

프로세스 단위 객체(ConnectionRegistry, NotificationFanout, KeyedLock,
InvitationService)는 lifespan에서 생성하여 app.state에 보관.
DB 연결은 요청마다 열고 닫음.
"""

from pathlib import Path
from typing import AsyncGenerator

from fastapi import Depends, Header, HTTPException, Request

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import INotifier
from core.config.loader import Settings, get_settings
from core.ledger.orchestrator import MutationOrchestrator
from core.ledger.reconciler import BalanceReconciler
from core.realtime.fanout import NotificationFanout
from core.realtime.registry import ConnectionRegistry
from core.storage.integrity_store import IntegrityStore
from core.storage.transaction_store import TransactionStore
from core.storage.transfer_store import TransferStore
from core.storage.user_store import UserStore
from core.utils.locks import KeyedLock
from web.auth import AuthError, decode_access_token
from web.services.balance_service import BalanceService
from web.services.invitation_service import InvitationService


def get_app_settings() -> Settings:
    """애플리케이션 설정 반환"""
    return get_settings()


def get_db_path(request: Request) -> Path:
    return request.app.state.db_path


async def get_db(db_path: Path = Depends(get_db_path)) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (읽기 전용)"""
    async with SQLiteAdapter(db_path, readonly=True) as db:
        yield db


async def get_db_write(db_path: Path = Depends(get_db_path)) -> AsyncGenerator[SQLiteAdapter, None]:
    """DB 세션 반환 (쓰기 가능)"""
    async with SQLiteAdapter(db_path, readonly=False) as db:
        yield db


# =========================================================================
# 인증
# =========================================================================


def get_current_user_id(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_app_settings),
) -> int:
    """Authorization: Bearer <JWT> → 사용자 ID

    Raises:
        HTTPException: 401 (헤더 없음 또는 토큰 검증 실패)
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=401,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1].strip()
    try:
        return decode_access_token(token, settings.web_secret_key)
    except AuthError as e:
        raise HTTPException(
            status_code=401,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        ) from e


# =========================================================================
# 프로세스 단위 객체 (app.state)
# =========================================================================


def get_registry(request: Request) -> ConnectionRegistry:
    return request.app.state.registry


def get_fanout(request: Request) -> NotificationFanout:
    return request.app.state.fanout


def get_locks(request: Request) -> KeyedLock:
    return request.app.state.locks


def get_alert_notifier(request: Request) -> INotifier | None:
    return request.app.state.alert_notifier


def get_invitation_service(request: Request) -> InvitationService:
    return request.app.state.invitations


# =========================================================================
# 요청 단위 서비스
# =========================================================================


def get_orchestrator(
    db: SQLiteAdapter = Depends(get_db_write),
    fanout: NotificationFanout = Depends(get_fanout),
    locks: KeyedLock = Depends(get_locks),
    alert_notifier: INotifier | None = Depends(get_alert_notifier),
) -> MutationOrchestrator:
    return MutationOrchestrator(
        transactions=TransactionStore(db),
        balances=UserStore(db),
        dispatcher=fanout,
        integrity=IntegrityStore(db),
        alert_notifier=alert_notifier,
        locks=locks,
    )


def get_balance_service(
    db: SQLiteAdapter = Depends(get_db_write),
    fanout: NotificationFanout = Depends(get_fanout),
    locks: KeyedLock = Depends(get_locks),
) -> BalanceService:
    return BalanceService(
        balances=UserStore(db),
        transfers=TransferStore(db),
        dispatcher=fanout,
        integrity=IntegrityStore(db),
        locks=locks,
    )


def get_reconciler(
    db: SQLiteAdapter = Depends(get_db_write),
    locks: KeyedLock = Depends(get_locks),
) -> BalanceReconciler:
    return BalanceReconciler(
        transactions=TransactionStore(db),
        transfers=TransferStore(db),
        balances=UserStore(db),
        integrity=IntegrityStore(db),
        locks=locks,
    )
