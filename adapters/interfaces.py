"""
어댑터 인터페이스 정의

Protocol 기반으로 정의하여 의존성 주입 및 Mock 교체 가능.
모든 구현체는 이 Protocol을 준수해야 함.
금액은 반드시 Decimal 타입 사용 (float 금지).
"""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from core.domain.models import BalanceTransfer, Household, TransactionState, UserState

if TYPE_CHECKING:
    from core.realtime.events import NotificationEvent


@runtime_checkable
class IConnection(Protocol):
    """푸시 채널 연결 핸들 인터페이스

    사용자 1명이 여러 연결(기기/탭)을 가질 수 있음.
    """

    @property
    def is_open(self) -> bool:
        """전송 가능한 상태인지 여부"""
        ...

    async def send_text(self, data: str) -> None:
        """텍스트 프레임 전송

        Raises:
            Exception: 전송 실패 시 (호출 측에서 처리)
        """
        ...


@runtime_checkable
class ITransactionRepository(Protocol):
    """거래 저장소 인터페이스"""

    async def load_transaction(self, transaction_id: int) -> TransactionState | None:
        """거래 조회

        Returns:
            거래 상태 또는 None (없음)

        Raises:
            DataIntegrityError: 저장된 금액이 숫자가 아닌 경우
            PersistenceError: 저장소 장애
        """
        ...

    async def save_transaction(self, state: TransactionState) -> TransactionState:
        """거래 저장 (생성 또는 수정)

        id가 없으면 생성 (version=1), 있으면 state.version과 저장된
        version이 같을 때만 수정 (version+1).

        Raises:
            NotFoundError: 수정 대상이 없는 경우
            VersionConflictError: version 불일치 (동시 수정)
            PersistenceError: 저장소 장애
        """
        ...

    async def delete_transaction(self, transaction_id: int) -> bool:
        """거래 삭제

        Returns:
            삭제 여부 (없으면 False)
        """
        ...

    async def list_transactions(
        self,
        user_id: int,
        household_id: int | None = None,
        transaction_type_id: int | None = None,
        is_shared: bool | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[TransactionState]:
        """사용자 거래 + 같은 가구의 공유 거래 목록"""
        ...

    async def list_user_transactions(self, user_id: int) -> list[TransactionState]:
        """사용자 소유의 활성 거래 전체 (정합성 재계산용)"""
        ...


@runtime_checkable
class IBalanceRepository(Protocol):
    """사용자 잔고 저장소 인터페이스

    잔고는 increment_user_balances로만 변경됨.
    """

    async def get_user(self, user_id: int) -> UserState | None:
        ...

    async def increment_user_balances(
        self,
        user_id: int,
        personal_delta: Decimal,
        family_delta: Decimal,
    ) -> UserState:
        """잔고에 델타를 원자적으로 더함 (read-modify-write 1회)

        Raises:
            NotFoundError: 사용자 없음
            PersistenceError: 저장소 장애
        """
        ...


@runtime_checkable
class IHouseholdDirectory(Protocol):
    """가구 구성원 조회 인터페이스"""

    async def get_member_ids(self, household_id: int) -> set[int]:
        ...


@runtime_checkable
class IUserDirectory(Protocol):
    """사용자/가구 관리 인터페이스 (초대 수락 흐름용)"""

    async def get_user_by_username(self, username: str) -> UserState | None:
        ...

    async def create_household(self, name: str, created_by_user_id: int) -> Household:
        """가구 생성 후 생성자를 구성원으로 등록"""
        ...

    async def set_household(self, user_id: int, household_id: int | None) -> UserState:
        """
        Raises:
            NotFoundError: 사용자 없음
        """
        ...


@runtime_checkable
class ITransferRepository(Protocol):
    """잔고 이체 기록 저장소 인터페이스"""

    async def save_transfer(self, transfer: BalanceTransfer) -> BalanceTransfer:
        ...

    async def list_transfers(self, user_id: int) -> list[BalanceTransfer]:
        ...


@runtime_checkable
class IIntegrityRecorder(Protocol):
    """잔고 정합성 이슈 기록 인터페이스

    거래 저장 후 잔고 반영에 실패한 경우 사후 복구를 위해 기록.
    """

    async def record_issue(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        personal_delta: Decimal,
        family_delta: Decimal,
        error: str,
    ) -> int:
        """이슈 기록

        Returns:
            이슈 ID
        """
        ...

    async def resolve_user_issues(self, user_id: int) -> int:
        """사용자의 미해결 이슈를 해결 처리

        Returns:
            해결 처리된 이슈 수
        """
        ...


@runtime_checkable
class INotifier(Protocol):
    """운영 알림 서비스 인터페이스

    Slack 등 외부 알림 채널로 운영자에게 메시지 전송.
    """

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Returns:
            전송 성공 여부
        """
        ...

    async def send_integrity_alert(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        error: str,
    ) -> bool:
        """잔고 정합성 이슈 알림 (CRITICAL)"""
        ...


@runtime_checkable
class INotificationDispatcher(Protocol):
    """클라이언트 푸시 알림 디스패처 인터페이스

    현재 구현은 즉시 전송(fire-and-forget)하는 NotificationFanout.
    호출 측 변경 없이 영속 큐 기반 구현으로 교체 가능.
    """

    async def notify_user(self, user_id: int, event: "NotificationEvent") -> bool:
        ...

    async def notify_household(
        self,
        household_id: int | None,
        event: "NotificationEvent",
        exclude_user_id: int | None = None,
    ) -> bool:
        ...
