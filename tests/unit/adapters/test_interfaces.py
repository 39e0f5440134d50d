"""
Protocol 인터페이스 테스트

실제 구현체와 Mock 구현체가 같은 Protocol을 준수하는지 확인.
"""

import pytest

from adapters.db.sqlite_adapter import SQLiteAdapter
from adapters.interfaces import (
    IBalanceRepository,
    IConnection,
    IHouseholdDirectory,
    IIntegrityRecorder,
    INotificationDispatcher,
    INotifier,
    ITransactionRepository,
    ITransferRepository,
    IUserDirectory,
)
from adapters.mock import InMemoryLedgerStore, MockConnection, MockDispatcher, MockNotifier
from adapters.slack.notifier import SlackNotifier
from core.realtime.fanout import NotificationFanout
from core.realtime.registry import ConnectionRegistry
from core.storage import (
    HouseholdDirectory,
    IntegrityStore,
    TransactionStore,
    TransferStore,
    UserStore,
)


@pytest.fixture
def db() -> SQLiteAdapter:
    # 연결하지 않음 (Protocol 구조 검사만)
    return SQLiteAdapter(":memory:")


class TestStorageProtocols:
    """저장소 Protocol"""

    def test_transaction_repository(self, db) -> None:
        assert isinstance(TransactionStore(db), ITransactionRepository)
        assert isinstance(InMemoryLedgerStore(), ITransactionRepository)

    def test_balance_repository(self, db) -> None:
        assert isinstance(UserStore(db), IBalanceRepository)
        assert isinstance(InMemoryLedgerStore(), IBalanceRepository)

    def test_user_directory(self, db) -> None:
        assert isinstance(UserStore(db), IUserDirectory)
        assert isinstance(InMemoryLedgerStore(), IUserDirectory)

    def test_household_directory(self, db) -> None:
        assert isinstance(HouseholdDirectory(":memory:"), IHouseholdDirectory)
        assert isinstance(UserStore(db), IHouseholdDirectory)

    def test_transfer_repository(self, db) -> None:
        assert isinstance(TransferStore(db), ITransferRepository)

    def test_integrity_recorder(self, db) -> None:
        assert isinstance(IntegrityStore(db), IIntegrityRecorder)

    def test_transaction_store_is_not_balance_repository(self, db) -> None:
        assert not isinstance(TransactionStore(db), IBalanceRepository)


class TestNotificationProtocols:
    """알림 Protocol"""

    def test_notifier(self) -> None:
        assert isinstance(SlackNotifier(webhook_url="https://hooks.slack.com/test"), INotifier)
        assert isinstance(MockNotifier(), INotifier)

    def test_dispatcher(self) -> None:
        fanout = NotificationFanout(ConnectionRegistry(), InMemoryLedgerStore())
        assert isinstance(fanout, INotificationDispatcher)
        assert isinstance(MockDispatcher(), INotificationDispatcher)

    def test_connection(self) -> None:
        assert isinstance(MockConnection(), IConnection)

    def test_plain_object_is_not_connection(self) -> None:
        assert not isinstance(object(), IConnection)
