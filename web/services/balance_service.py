"""
Balance 서비스

잔고 조회 및 개인 ↔ 가족 잔고 이체.
이체도 거래 변경과 같은 순서(기록 저장 → 잔고 증감 → BALANCE_UPDATE)로 처리.
"""

import logging
from decimal import Decimal

from adapters.interfaces import (
    IBalanceRepository,
    IIntegrityRecorder,
    INotificationDispatcher,
    ITransferRepository,
)
from core.domain.errors import (
    BalanceApplyError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from core.domain.models import BalanceTransfer, UserState
from core.ledger.balance import ZERO, transfer_delta
from core.realtime.events import NotificationEvent
from core.types import MutationKind
from core.utils.locks import KeyedLock, balance_key

logger = logging.getLogger(__name__)


class BalanceService:
    """Balance 서비스

    Args:
        balances: 사용자 잔고 저장소
        transfers: 이체 기록 저장소
        dispatcher: 푸시 알림 디스패처
        integrity: 잔고 반영 실패 기록 (선택)
        locks: 잔고 구간 락 (거래 조율자, 정합성 복구기와 공유)
    """

    def __init__(
        self,
        balances: IBalanceRepository,
        transfers: ITransferRepository,
        dispatcher: INotificationDispatcher,
        integrity: IIntegrityRecorder | None = None,
        locks: KeyedLock | None = None,
    ):
        self.balances = balances
        self.transfers = transfers
        self.dispatcher = dispatcher
        self.integrity = integrity
        self.locks = locks if locks is not None else KeyedLock()

    async def get_balance(self, user_id: int) -> UserState:
        user = await self.balances.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    async def transfer(
        self,
        user_id: int,
        from_personal: bool,
        amount: Decimal,
        description: str | None = None,
    ) -> tuple[BalanceTransfer, UserState]:
        """개인 ↔ 가족 잔고 이체

        Args:
            user_id: 사용자 ID
            from_personal: True면 개인 → 가족, False면 가족 → 개인
            amount: 이체 금액 (0 초과)

        Returns:
            (저장된 이체 기록, 이체 후 사용자 잔고)

        Raises:
            ValidationError: 금액이 0 이하
            InsufficientBalanceError: 출금 측 잔고 부족
            BalanceApplyError: 기록 저장 후 잔고 반영 실패
        """
        if amount <= ZERO:
            raise ValidationError("이체 금액은 0보다 커야 합니다")

        async with self.locks.hold(balance_key(user_id)):
            user = await self.get_balance(user_id)

            source = user.personal_balance if from_personal else user.family_balance
            if source < amount:
                side = "개인" if from_personal else "가족"
                raise InsufficientBalanceError(
                    f"{side} 잔고 부족: 보유 {format(source, 'f')}, 요청 {format(amount, 'f')}"
                )

            transfer = await self.transfers.save_transfer(
                BalanceTransfer(
                    user_id=user_id,
                    from_personal=from_personal,
                    amount=amount,
                    description=description,
                )
            )

            delta = transfer_delta(from_personal, amount)
            try:
                updated = await self.balances.increment_user_balances(
                    user_id, delta.personal, delta.family
                )
            except Exception as e:
                logger.warning(
                    f"데이터 정합성 경고: 이체 {transfer.id} 저장 후 잔고 반영 실패: {e}",
                    extra={"user_id": user_id, **delta.to_dict()},
                )
                if self.integrity is not None:
                    await self.integrity.record_issue(
                        user_id=user_id,
                        transaction_id=None,
                        operation=MutationKind.TRANSFER.value,
                        personal_delta=delta.personal,
                        family_delta=delta.family,
                        error=str(e),
                    )
                raise BalanceApplyError(None, user_id, e) from e

        logger.info(
            f"잔고 이체: 사용자 {user_id} {'개인→가족' if from_personal else '가족→개인'} "
            f"{format(amount, 'f')}",
        )

        await self.dispatcher.notify_user(user_id, NotificationEvent.balance_update(updated))
        return transfer, updated

    async def list_transfers(self, user_id: int) -> list[BalanceTransfer]:
        return await self.transfers.list_transfers(user_id)
