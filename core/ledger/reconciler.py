"""
잔고 정합성 복구 (Balance Reconciler)

저장된 거래/이체 이력으로부터 기대 잔고를 재계산하여 저장된 잔고와 비교.
거래 저장 후 잔고 반영에 실패한 경우(BalanceApplyError) 사후 복구에 사용.

기대 잔고 = Σ 활성 거래 효과 + Σ 잔고 이체 델타 (초기 잔고 0 기준)
"""

import logging
from dataclasses import dataclass
from typing import Any

from adapters.interfaces import (
    IBalanceRepository,
    IIntegrityRecorder,
    ITransactionRepository,
    ITransferRepository,
)
from core.domain.errors import NotFoundError
from core.ledger.balance import BalanceDelta, transaction_effect, transfer_delta
from core.utils.locks import KeyedLock, balance_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceDrift:
    """기대 잔고와 저장 잔고의 차이"""

    user_id: int
    expected: BalanceDelta
    actual: BalanceDelta

    @property
    def correction(self) -> BalanceDelta:
        """저장 잔고에 더해야 할 보정 델타"""
        return self.expected - self.actual

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "expected": {
                "personalBalance": format(self.expected.personal, "f"),
                "familyBalance": format(self.expected.family, "f"),
            },
            "actual": {
                "personalBalance": format(self.actual.personal, "f"),
                "familyBalance": format(self.actual.family, "f"),
            },
            "correction": self.correction.to_dict(),
        }


class BalanceReconciler:
    """잔고 정합성 복구기

    Args:
        transactions: 거래 저장소
        transfers: 잔고 이체 저장소
        balances: 사용자 잔고 저장소
        integrity: 정합성 이슈 기록 (선택, 복구 시 이슈 해결 처리)
        locks: 잔고 구간 락 (거래 조율자, 잔고 이체와 공유)
    """

    def __init__(
        self,
        transactions: ITransactionRepository,
        transfers: ITransferRepository,
        balances: IBalanceRepository,
        integrity: IIntegrityRecorder | None = None,
        locks: KeyedLock | None = None,
    ):
        self.transactions = transactions
        self.transfers = transfers
        self.balances = balances
        self.integrity = integrity
        self.locks = locks if locks is not None else KeyedLock()

    async def expected_balances(self, user_id: int) -> BalanceDelta:
        """이력으로부터 기대 잔고 재계산"""
        total = BalanceDelta()

        for state in await self.transactions.list_user_transactions(user_id):
            total = total + transaction_effect(state)

        for transfer in await self.transfers.list_transfers(user_id):
            total = total + transfer_delta(transfer.from_personal, transfer.amount)

        return total

    async def detect_drift(self, user_id: int) -> BalanceDrift | None:
        """기대 잔고와 저장 잔고 비교

        Returns:
            BalanceDrift 또는 None (일치 시)

        Raises:
            NotFoundError: 사용자 없음
        """
        user = await self.balances.get_user(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")

        expected = await self.expected_balances(user_id)
        actual = BalanceDelta(personal=user.personal_balance, family=user.family_balance)

        if expected == actual:
            return None

        drift = BalanceDrift(user_id=user_id, expected=expected, actual=actual)
        logger.warning(
            f"잔고 불일치 감지: 사용자 {user_id}",
            extra=drift.to_dict(),
        )
        return drift

    async def reconcile(self, user_id: int, apply: bool = False) -> BalanceDrift | None:
        """불일치 감지 및 (apply=True면) 보정 델타 적용

        보정도 increment_user_balances를 통해서만 적용됨.
        이력 조회 → 잔고 조회 → 보정은 사용자 잔고 락 안에서 실행.

        Returns:
            감지된 BalanceDrift 또는 None
        """
        async with self.locks.hold(balance_key(user_id)):
            drift = await self.detect_drift(user_id)

            if drift is None:
                if apply and self.integrity is not None:
                    await self.integrity.resolve_user_issues(user_id)
                return None

            if apply:
                correction = drift.correction
                await self.balances.increment_user_balances(
                    user_id,
                    correction.personal,
                    correction.family,
                )

                resolved = 0
                if self.integrity is not None:
                    resolved = await self.integrity.resolve_user_issues(user_id)

                logger.info(
                    f"잔고 보정 완료: 사용자 {user_id}, 해결된 이슈 {resolved}건",
                    extra=correction.to_dict(),
                )

        return drift
