"""
거래 변경 조율 (Mutation Orchestrator)

거래 생성/수정/삭제 1건을 다음 순서로 처리:

1. (수정/삭제) 변경 전 상태 조회 - 델타 계산을 위해 저장 전에 수행
2. 새 상태 저장 또는 삭제
3. 델타 계산 (core.ledger.balance)
4. 영향받는 사용자별로 잔고 증감 1회 적용
5. 소유자에게 BALANCE_UPDATE (잔고 변화가 없어도 항상) / TRANSACTION_* 전송
6. 변경 전후 중 하나라도 공유 거래면 가구에 TRANSACTION_* 전송 (행위자 제외)

1~4는 거래 ID 단위 락 안에서 실행되어 같은 거래에 대한 동시 수정이
델타를 중복/누락시키지 않음. 2~4는 소유자 잔고 락(balance_key) 안에서 실행되어
이체나 정합성 보정이 저장과 증감 사이에 끼어들지 못함.
저장 단계 실패 시 잔고/알림 단계로 진행하지 않음. 알림 실패는 결과에 영향 없음.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from adapters.interfaces import (
    IBalanceRepository,
    IIntegrityRecorder,
    INotificationDispatcher,
    INotifier,
    ITransactionRepository,
)
from core.domain.errors import (
    BalanceApplyError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    VersionConflictError,
)
from core.domain.models import TransactionState, UserState
from core.ledger.balance import BalanceDelta, mutation_deltas
from core.realtime.events import NotificationEvent
from core.types import MutationKind
from core.utils.locks import KeyedLock, balance_key

logger = logging.getLogger(__name__)


# 수정 가능한 필드 (id, user_id, version, created_at은 변경 불가)
MUTABLE_FIELDS = frozenset({
    "amount",
    "currency",
    "transaction_type_id",
    "is_shared",
    "date",
    "category_id",
    "account_id",
    "description",
    "notes",
})


@dataclass
class MutationResult:
    """변경 결과

    transaction: 저장된 새 상태 (삭제면 삭제 직전 상태)
    deltas: 사용자별 적용된 델타
    balances: 사용자별 적용 후 잔고
    """

    kind: MutationKind
    transaction: TransactionState
    deltas: dict[int, BalanceDelta] = field(default_factory=dict)
    balances: dict[int, UserState] = field(default_factory=dict)


class MutationOrchestrator:
    """거래 변경 조율자

    Args:
        transactions: 거래 저장소
        balances: 사용자 잔고 저장소
        dispatcher: 푸시 알림 디스패처
        integrity: 잔고 반영 실패 기록 (선택)
        alert_notifier: 운영 알림 (선택, 예: Slack)
        locks: 거래 ID 단위 락 (여러 조율자가 공유할 때 주입)
    """

    def __init__(
        self,
        transactions: ITransactionRepository,
        balances: IBalanceRepository,
        dispatcher: INotificationDispatcher,
        integrity: IIntegrityRecorder | None = None,
        alert_notifier: INotifier | None = None,
        locks: KeyedLock | None = None,
    ):
        self.transactions = transactions
        self.balances = balances
        self.dispatcher = dispatcher
        self.integrity = integrity
        self.alert_notifier = alert_notifier
        self.locks = locks if locks is not None else KeyedLock()

    # -------------------------------------------------------------------------
    # 공개 API
    # -------------------------------------------------------------------------

    async def create_transaction(
        self,
        actor_id: int,
        draft: TransactionState,
    ) -> MutationResult:
        """거래 생성

        소유자는 항상 행위자로 고정됨.
        """
        new_state = draft.with_changes(user_id=actor_id, id=None, version=0)

        async with self.locks.hold(balance_key(actor_id)):
            saved = await self._persist(new_state)
            result = await self._apply(MutationKind.CREATE, saved, None, saved)

        await self._dispatch(actor_id, result, was_shared=False)
        return result

    async def update_transaction(
        self,
        actor_id: int,
        transaction_id: int,
        changes: dict[str, Any],
        expected_version: int | None = None,
    ) -> MutationResult:
        """거래 수정

        Args:
            actor_id: 행위자 (소유자여야 함)
            transaction_id: 거래 ID
            changes: 변경할 필드 (MUTABLE_FIELDS만 허용)
            expected_version: 클라이언트가 본 version (None이면 검사 생략)

        Raises:
            NotFoundError: 거래 없음, 타인 소유 또는 이미 삭제됨
            VersionConflictError: expected_version 불일치
        """
        unknown = set(changes) - MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"수정할 수 없는 필드: {sorted(unknown)}")

        async with self.locks.hold(transaction_id):
            old_state = await self._load_owned(actor_id, transaction_id)

            if expected_version is not None and old_state.version != expected_version:
                raise VersionConflictError(transaction_id, expected_version, old_state.version)

            new_state = old_state.with_changes(**changes)

            async with self.locks.hold(balance_key(old_state.user_id)):
                saved = await self._persist(new_state)
                result = await self._apply(MutationKind.UPDATE, saved, old_state, saved)

        await self._dispatch(actor_id, result, was_shared=old_state.is_shared)
        return result

    async def delete_transaction(self, actor_id: int, transaction_id: int) -> MutationResult:
        """거래 삭제 (생성 효과를 정확히 1회 되돌림)

        삭제된 ID는 재사용되지 않으므로 이후 수정/삭제는 NotFoundError.

        Raises:
            NotFoundError: 거래 없음 또는 타인 소유
        """
        async with self.locks.hold(transaction_id):
            old_state = await self._load_owned(actor_id, transaction_id)

            async with self.locks.hold(balance_key(old_state.user_id)):
                try:
                    deleted = await self.transactions.delete_transaction(transaction_id)
                except LedgerError:
                    raise
                except Exception as e:
                    raise PersistenceError(f"거래 삭제 실패: {e}") from e

                if not deleted:
                    # 조회 후 삭제 사이에 다른 프로세스가 먼저 삭제함
                    raise NotFoundError(f"Transaction not found: {transaction_id}")

                result = await self._apply(MutationKind.DELETE, old_state, old_state, None)

        await self._dispatch(actor_id, result, was_shared=old_state.is_shared)
        return result

    # -------------------------------------------------------------------------
    # 단계별 처리
    # -------------------------------------------------------------------------

    async def _load_owned(self, actor_id: int, transaction_id: int) -> TransactionState:
        """1단계: 변경 전 상태 조회 (소유자 확인 포함)"""
        try:
            state = await self.transactions.load_transaction(transaction_id)
        except LedgerError:
            raise
        except Exception as e:
            raise PersistenceError(f"거래 조회 실패: {e}") from e

        # 타인 소유 거래는 존재 여부를 드러내지 않음
        if state is None or state.user_id != actor_id:
            raise NotFoundError(f"Transaction not found: {transaction_id}")

        return state

    async def _persist(self, state: TransactionState) -> TransactionState:
        """2단계: 저장"""
        try:
            return await self.transactions.save_transaction(state)
        except LedgerError:
            raise
        except Exception as e:
            raise PersistenceError(f"거래 저장 실패: {e}") from e

    async def _apply(
        self,
        kind: MutationKind,
        transaction: TransactionState,
        old_state: TransactionState | None,
        new_state: TransactionState | None,
    ) -> MutationResult:
        """3~4단계: 델타 계산 및 사용자별 1회 적용"""
        deltas = mutation_deltas(old_state, new_state)
        result = MutationResult(kind=kind, transaction=transaction, deltas=deltas)

        for user_id, delta in deltas.items():
            try:
                user = await self.balances.increment_user_balances(
                    user_id,
                    delta.personal,
                    delta.family,
                )
            except Exception as e:
                await self._report_apply_failure(kind, transaction, user_id, delta, e)
                raise BalanceApplyError(transaction.id, user_id, e) from e

            result.balances[user_id] = user

        logger.info(
            f"거래 {kind.value} 반영: id={transaction.id}",
            extra={
                "transaction_id": transaction.id,
                "deltas": {uid: d.to_dict() for uid, d in deltas.items()},
            },
        )
        return result

    async def _report_apply_failure(
        self,
        kind: MutationKind,
        transaction: TransactionState,
        user_id: int,
        delta: BalanceDelta,
        error: Exception,
    ) -> None:
        """저장은 되었으나 잔고 반영 실패 - 정합성 경고 기록"""
        logger.warning(
            f"데이터 정합성 경고: 거래 {transaction.id} {kind.value} 저장 후 "
            f"사용자 {user_id} 잔고 반영 실패: {error}",
            extra={"transaction_id": transaction.id, "user_id": user_id, **delta.to_dict()},
        )

        if self.integrity is not None:
            try:
                await self.integrity.record_issue(
                    user_id=user_id,
                    transaction_id=transaction.id,
                    operation=kind.value,
                    personal_delta=delta.personal,
                    family_delta=delta.family,
                    error=str(error),
                )
            except Exception as e:
                logger.error(f"정합성 이슈 기록 실패: {e}")

        if self.alert_notifier is not None:
            try:
                await self.alert_notifier.send_integrity_alert(
                    user_id=user_id,
                    transaction_id=transaction.id,
                    operation=kind.value,
                    error=str(error),
                )
            except Exception as e:
                logger.error(f"운영 알림 전송 실패: {e}")

    async def _dispatch(self, actor_id: int, result: MutationResult, was_shared: bool) -> None:
        """5~6단계: 알림 (best-effort, 실패해도 변경은 성공)"""
        transaction = result.transaction
        tx_event = NotificationEvent.transaction_changed(result.kind, transaction, actor_id)

        try:
            # 델타가 0이라 증감이 없었으면 현재 잔고를 조회해서 전송
            owner = result.balances.get(transaction.user_id)
            if owner is None:
                owner = await self.balances.get_user(transaction.user_id)

            targets = dict(result.balances)
            if owner is not None:
                targets.setdefault(owner.id, owner)

            for user_id, user in targets.items():
                await self.dispatcher.notify_user(user_id, NotificationEvent.balance_update(user))

            await self.dispatcher.notify_user(transaction.user_id, tx_event)

            if (was_shared or transaction.is_shared) and owner is not None:
                if owner.household_id is not None:
                    await self.dispatcher.notify_household(
                        owner.household_id,
                        tx_event,
                        exclude_user_id=actor_id,
                    )
        except Exception as e:
            logger.info(f"거래 {transaction.id} 알림 전송 중 오류 (무시): {e}")
