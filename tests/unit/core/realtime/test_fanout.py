"""
NotificationFanout 테스트
"""

import pytest

from adapters.interfaces import INotificationDispatcher
from adapters.mock import InMemoryLedgerStore, MockConnection
from core.realtime.events import EventType, NotificationEvent
from core.realtime.fanout import NotificationFanout
from core.realtime.registry import ConnectionRegistry


class FailingDirectory:
    async def get_member_ids(self, household_id: int) -> set[int]:
        raise ConnectionError("directory down")


@pytest.fixture
def store() -> InMemoryLedgerStore:
    store = InMemoryLedgerStore()
    household = store.add_household("Casa")
    store.add_user("ana", household_id=household.id)  # 1
    store.add_user("bruno", household_id=household.id)  # 2
    store.add_user("carla")  # 3
    return store


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry(send_timeout_sec=0.1)


@pytest.fixture
def fanout(registry, store) -> NotificationFanout:
    return NotificationFanout(registry, store)


@pytest.fixture
def connections(registry) -> dict[int, MockConnection]:
    conns = {uid: MockConnection() for uid in (1, 2, 3)}
    for uid, conn in conns.items():
        registry.register(uid, conn)
    return conns


@pytest.fixture
def event() -> NotificationEvent:
    return NotificationEvent(EventType.TRANSACTION_CREATED, {"id": 7})


class TestNotifyUser:
    """notify_user"""

    def test_implements_dispatcher_protocol(self, fanout) -> None:
        assert isinstance(fanout, INotificationDispatcher)

    @pytest.mark.asyncio
    async def test_online(self, fanout, connections, event) -> None:
        assert await fanout.notify_user(2, event) is True
        assert connections[2].types == ["TRANSACTION_CREATED"]
        assert connections[1].sent == []

    @pytest.mark.asyncio
    async def test_offline(self, fanout, event) -> None:
        assert await fanout.notify_user(99, event) is False


class TestNotifyHousehold:
    """notify_household"""

    @pytest.mark.asyncio
    async def test_excludes_actor(self, fanout, connections, event) -> None:
        assert await fanout.notify_household(1, event, exclude_user_id=1) is True

        assert connections[1].sent == []
        assert connections[2].types == ["TRANSACTION_CREATED"]

    @pytest.mark.asyncio
    async def test_non_members_not_notified(self, fanout, connections, event) -> None:
        await fanout.notify_household(1, event)

        assert len(connections[1].sent) == 1
        assert len(connections[2].sent) == 1
        assert connections[3].sent == []

    @pytest.mark.asyncio
    async def test_none_household(self, fanout, connections, event) -> None:
        assert await fanout.notify_household(None, event) is False
        assert all(c.sent == [] for c in connections.values())

    @pytest.mark.asyncio
    async def test_only_actor_online(self, registry, store, event) -> None:
        registry.register(1, MockConnection())
        fanout = NotificationFanout(registry, store)

        assert await fanout.notify_household(1, event, exclude_user_id=1) is False

    @pytest.mark.asyncio
    async def test_directory_failure_swallowed(self, registry, connections, event) -> None:
        fanout = NotificationFanout(registry, FailingDirectory())

        assert await fanout.notify_household(1, event) is False
        assert all(c.sent == [] for c in connections.values())

    @pytest.mark.asyncio
    async def test_failing_member_does_not_block_others(
        self, registry, store, event
    ) -> None:
        bad, good = MockConnection(should_fail=True), MockConnection()
        registry.register(1, bad)
        registry.register(2, good)
        fanout = NotificationFanout(registry, store)

        await fanout.notify_household(1, event)

        assert len(good.sent) == 1
