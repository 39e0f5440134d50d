"""
FastAPI 애플리케이션

라우터 등록, 앱 설정, 도메인 예외 → HTTP 응답 변환.
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adapters.db.sqlite_adapter import SQLiteAdapter, init_schema
from adapters.slack.notifier import SlackNotifier
from core.config.loader import get_settings
from core.domain.errors import (
    BalanceApplyError,
    DataIntegrityError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    ValidationError,
    VersionConflictError,
)
from core.logging import setup_logging
from core.realtime.fanout import NotificationFanout
from core.realtime.registry import ConnectionRegistry
from core.storage.user_store import HouseholdDirectory
from core.utils.locks import KeyedLock
from web.routes import balance, health, household, integrity, invitations, transactions, ws
from web.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)


def _lifespan_for(db_path: Path | None):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """앱 생명주기 관리

        프로세스 단위 객체를 생성하여 app.state에 보관.
        """
        settings = get_settings()
        app.state.db_path = db_path or settings.db_path

        # 시작 시 - DB 스키마 자동 초기화
        async with SQLiteAdapter(app.state.db_path) as db:
            await init_schema(db)

        registry = ConnectionRegistry(send_timeout_sec=settings.realtime.send_timeout_sec)
        fanout = NotificationFanout(registry, HouseholdDirectory(app.state.db_path))

        app.state.registry = registry
        app.state.fanout = fanout
        app.state.locks = KeyedLock()
        app.state.invitations = InvitationService(fanout)
        app.state.alert_notifier = (
            SlackNotifier(settings.slack_webhook_url) if settings.slack_webhook_url else None
        )

        cleanup_task = asyncio.create_task(
            registry.run_cleanup(settings.realtime.cleanup_interval_sec)
        )
        logger.info(f"Web 시작: mode={settings.mode.value}, db={app.state.db_path}")

        yield

        # 종료 시 - 리소스 정리
        cleanup_task.cancel()
        with suppress(asyncio.CancelledError):
            await cleanup_task

        if app.state.alert_notifier is not None:
            await app.state.alert_notifier.close()

        logger.info("Web 종료")

    return lifespan


# =========================================================================
# 도메인 예외 → HTTP 응답
# =========================================================================


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error_response(400, str(exc))


async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(404, str(exc))


async def _version_conflict(request: Request, exc: VersionConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "detail": str(exc),
            "transactionId": exc.transaction_id,
            "expectedVersion": exc.expected,
            "currentVersion": exc.actual,
        },
    )


async def _persistence_error(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error(f"저장소 오류: {request.method} {request.url.path}: {exc}")
    return _error_response(503, "Storage temporarily unavailable")


async def _balance_apply_error(request: Request, exc: BalanceApplyError) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Transaction saved but balance update failed; flagged for reconciliation",
            "transactionId": exc.transaction_id,
        },
    )


async def _data_integrity_error(request: Request, exc: DataIntegrityError) -> JSONResponse:
    logger.error(f"데이터 무결성 오류: {request.method} {request.url.path}: {exc}")
    return _error_response(500, str(exc))


async def _ledger_error(request: Request, exc: LedgerError) -> JSONResponse:
    logger.error(f"처리되지 않은 도메인 오류: {exc}")
    return _error_response(500, str(exc))


def create_app(db_path: Path | None = None) -> FastAPI:
    """앱 생성

    Args:
        db_path: DB 경로 (None이면 secrets.yaml의 mode로 결정)
    """
    app = FastAPI(
        title="Nido API",
        description="가족 가계부 - 개인/가족 이중 잔고 및 실시간 알림",
        version=health.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=_lifespan_for(db_path),
    )

    # CORS 설정 (개발용)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(NotFoundError, _not_found)
    app.add_exception_handler(VersionConflictError, _version_conflict)
    app.add_exception_handler(PersistenceError, _persistence_error)
    app.add_exception_handler(BalanceApplyError, _balance_apply_error)
    app.add_exception_handler(DataIntegrityError, _data_integrity_error)
    app.add_exception_handler(LedgerError, _ledger_error)

    # =========================================================================
    # API 라우터 등록
    # =========================================================================

    app.include_router(health.router)
    app.include_router(transactions.router)
    app.include_router(balance.router)
    app.include_router(household.router)
    app.include_router(invitations.router)
    app.include_router(integrity.router)
    app.include_router(ws.router)

    return app


# 로깅 설정 (콘솔 + 파일)
setup_logging("web")

app = create_app()
