"""
인메모리 저장소

테스트용 Mock 저장소. 거래/사용자 잔고/가구/이체/정합성 이슈를
메모리에 보관.
ITransactionRepository, IBalanceRepository, IHouseholdDirectory,
ITransferRepository, IIntegrityRecorder Protocol 준수.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from core.domain.errors import NotFoundError, PersistenceError, VersionConflictError
from core.domain.models import BalanceTransfer, Household, TransactionState, UserState
from core.types import IntegrityStatus


@dataclass
class MemoryState:
    """Mock 상태 (메모리 내 저장)"""

    users: dict[int, UserState] = field(default_factory=dict)
    households: dict[int, Household] = field(default_factory=dict)
    transactions: dict[int, TransactionState] = field(default_factory=dict)
    transfers: dict[int, BalanceTransfer] = field(default_factory=dict)
    issues: dict[int, dict[str, Any]] = field(default_factory=dict)

    # 시뮬레이션 옵션
    should_fail_load: bool = False
    should_fail_save: bool = False
    should_fail_delete: bool = False
    should_fail_increment: bool = False

    # ID 카운터 (삭제된 ID는 재사용하지 않음)
    user_counter: int = 0
    household_counter: int = 0
    transaction_counter: int = 0
    transfer_counter: int = 0
    issue_counter: int = 0


class InMemoryLedgerStore:
    """인메모리 저장소

    사용 예시:
    ```python
    store = InMemoryLedgerStore()
    user = store.add_user("ana")

    saved = await store.save_transaction(state)
    await store.increment_user_balances(user.id, Decimal("-50"), Decimal("0"))

    # 장애 시뮬레이션
    store.state.should_fail_increment = True
    ```
    """

    def __init__(self, state: MemoryState | None = None):
        self.state = state or MemoryState()
        self._balance_lock = asyncio.Lock()

        # 호출 기록 (테스트 검증용)
        self.increment_calls: list[tuple[int, Decimal, Decimal]] = []

    # -------------------------------------------------------------------------
    # 상태 조작 메서드 (테스트용, 동기)
    # -------------------------------------------------------------------------

    def add_household(self, name: str, created_by_user_id: int = 0) -> Household:
        self.state.household_counter += 1
        household = Household(
            id=self.state.household_counter,
            name=name,
            created_by_user_id=created_by_user_id,
        )
        self.state.households[household.id] = household
        return household

    def add_user(
        self,
        username: str,
        household_id: int | None = None,
        personal_balance: Decimal = Decimal("0"),
        family_balance: Decimal = Decimal("0"),
    ) -> UserState:
        self.state.user_counter += 1
        user = UserState(
            id=self.state.user_counter,
            username=username,
            name=username.title(),
            personal_balance=personal_balance,
            family_balance=family_balance,
            household_id=household_id,
        )
        self.state.users[user.id] = user
        return user

    # -------------------------------------------------------------------------
    # IUserDirectory
    # -------------------------------------------------------------------------

    async def create_household(self, name: str, created_by_user_id: int) -> Household:
        household = self.add_household(name, created_by_user_id)
        await self.set_household(created_by_user_id, household.id)
        return household

    async def get_user_by_username(self, username: str) -> UserState | None:
        for user in self.state.users.values():
            if user.username == username:
                return user
        return None

    async def set_household(self, user_id: int, household_id: int | None) -> UserState:
        user = self.state.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        updated = UserState(
            id=user.id,
            username=user.username,
            name=user.name,
            personal_balance=user.personal_balance,
            family_balance=user.family_balance,
            household_id=household_id,
        )
        self.state.users[user_id] = updated
        return updated

    # -------------------------------------------------------------------------
    # ITransactionRepository
    # -------------------------------------------------------------------------

    async def load_transaction(self, transaction_id: int) -> TransactionState | None:
        if self.state.should_fail_load:
            raise PersistenceError("Mock load failure")
        return self.state.transactions.get(transaction_id)

    async def save_transaction(self, state: TransactionState) -> TransactionState:
        if self.state.should_fail_save:
            raise PersistenceError("Mock save failure")

        if state.id is None:
            self.state.transaction_counter += 1
            saved = state.with_changes(
                id=self.state.transaction_counter,
                version=1,
                created_at=datetime.now(timezone.utc),
            )
        else:
            current = self.state.transactions.get(state.id)
            if current is None:
                raise NotFoundError(f"Transaction not found: {state.id}")
            if current.version != state.version:
                raise VersionConflictError(state.id, state.version, current.version)
            saved = state.with_changes(version=current.version + 1)

        self.state.transactions[saved.id] = saved
        return saved

    async def delete_transaction(self, transaction_id: int) -> bool:
        if self.state.should_fail_delete:
            raise PersistenceError("Mock delete failure")
        return self.state.transactions.pop(transaction_id, None) is not None

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
        members = await self.get_member_ids(household_id) if household_id is not None else set()

        rows = []
        for tx in self.state.transactions.values():
            visible = tx.user_id == user_id or (tx.is_shared and tx.user_id in members)
            if not visible:
                continue
            if transaction_type_id is not None and tx.transaction_type_id != transaction_type_id:
                continue
            if is_shared is not None and tx.is_shared != is_shared:
                continue
            if start_date is not None and tx.date < start_date:
                continue
            if end_date is not None and tx.date > end_date:
                continue
            rows.append(tx)

        rows.sort(key=lambda tx: (tx.date, tx.id), reverse=True)
        return rows[offset:offset + limit]

    async def list_user_transactions(self, user_id: int) -> list[TransactionState]:
        return [tx for tx in self.state.transactions.values() if tx.user_id == user_id]

    # -------------------------------------------------------------------------
    # IBalanceRepository / IHouseholdDirectory
    # -------------------------------------------------------------------------

    async def get_user(self, user_id: int) -> UserState | None:
        return self.state.users.get(user_id)

    async def increment_user_balances(
        self,
        user_id: int,
        personal_delta: Decimal,
        family_delta: Decimal,
    ) -> UserState:
        async with self._balance_lock:
            if self.state.should_fail_increment:
                raise PersistenceError("Mock balance failure")

            user = self.state.users.get(user_id)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")

            updated = UserState(
                id=user.id,
                username=user.username,
                name=user.name,
                personal_balance=user.personal_balance + personal_delta,
                family_balance=user.family_balance + family_delta,
                household_id=user.household_id,
            )
            self.state.users[user_id] = updated
            self.increment_calls.append((user_id, personal_delta, family_delta))
            return updated

    async def get_member_ids(self, household_id: int) -> set[int]:
        return {u.id for u in self.state.users.values() if u.household_id == household_id}

    # -------------------------------------------------------------------------
    # ITransferRepository
    # -------------------------------------------------------------------------

    async def save_transfer(self, transfer: BalanceTransfer) -> BalanceTransfer:
        self.state.transfer_counter += 1
        saved = BalanceTransfer(
            id=self.state.transfer_counter,
            user_id=transfer.user_id,
            from_personal=transfer.from_personal,
            amount=transfer.amount,
            currency=transfer.currency,
            description=transfer.description,
            date=transfer.date,
        )
        self.state.transfers[saved.id] = saved
        return saved

    async def list_transfers(self, user_id: int) -> list[BalanceTransfer]:
        return sorted(
            (t for t in self.state.transfers.values() if t.user_id == user_id),
            key=lambda t: t.date,
            reverse=True,
        )

    # -------------------------------------------------------------------------
    # IIntegrityRecorder
    # -------------------------------------------------------------------------

    async def record_issue(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        personal_delta: Decimal,
        family_delta: Decimal,
        error: str,
    ) -> int:
        self.state.issue_counter += 1
        self.state.issues[self.state.issue_counter] = {
            "id": self.state.issue_counter,
            "user_id": user_id,
            "transaction_id": transaction_id,
            "operation": operation,
            "personal_delta": personal_delta,
            "family_delta": family_delta,
            "error": error,
            "status": IntegrityStatus.OPEN.value,
        }
        return self.state.issue_counter

    async def resolve_user_issues(self, user_id: int) -> int:
        resolved = 0
        for issue in self.state.issues.values():
            if issue["user_id"] == user_id and issue["status"] == IntegrityStatus.OPEN.value:
                issue["status"] = IntegrityStatus.RESOLVED.value
                resolved += 1
        return resolved

    @property
    def open_issues(self) -> list[dict[str, Any]]:
        return [
            i for i in self.state.issues.values()
            if i["status"] == IntegrityStatus.OPEN.value
        ]
