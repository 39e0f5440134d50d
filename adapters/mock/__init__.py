"""
Mock 어댑터

테스트용 Mock 구현체 제공.
Protocol 준수하여 실제 구현체와 교체 가능.
"""

from adapters.mock.connection import MockConnection
from adapters.mock.dispatcher import DispatchRecord, MockDispatcher
from adapters.mock.memory_store import InMemoryLedgerStore, MemoryState
from adapters.mock.notifier import MockNotifier

__all__ = [
    "DispatchRecord",
    "InMemoryLedgerStore",
    "MemoryState",
    "MockConnection",
    "MockDispatcher",
    "MockNotifier",
]
