"""
ConnectionRegistry 테스트
"""

import asyncio

import pytest

from adapters.mock import MockConnection
from core.realtime.events import EventType, NotificationEvent
from core.realtime.registry import ConnectionRegistry


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry(send_timeout_sec=0.1)


@pytest.fixture
def event() -> NotificationEvent:
    return NotificationEvent(EventType.BALANCE_UPDATE, {"userId": 1, "personalBalance": "10"})


class TestRegister:
    """등록/해제"""

    def test_register_multiple_handles(self, registry) -> None:
        registry.register(1, MockConnection())
        registry.register(1, MockConnection())

        assert registry.is_online(1)
        assert registry.connection_count(1) == 2
        assert registry.connection_count() == 2

    def test_register_same_handle_twice(self, registry) -> None:
        conn = MockConnection()
        registry.register(1, conn)
        registry.register(1, conn)

        assert registry.connection_count(1) == 1

    def test_unregister_keeps_other_handles(self, registry) -> None:
        first, second = MockConnection(), MockConnection()
        registry.register(1, first)
        registry.register(1, second)

        registry.unregister(1, first)

        assert registry.connection_count(1) == 1
        assert registry.is_online(1)

    def test_unregister_last_removes_user(self, registry) -> None:
        conn = MockConnection()
        registry.register(1, conn)

        registry.unregister(1, conn)

        assert not registry.is_online(1)
        assert registry.online_user_ids() == set()

    def test_unregister_unknown_is_noop(self, registry) -> None:
        registry.unregister(42, MockConnection())
        assert registry.connection_count() == 0


class TestSend:
    """전송"""

    @pytest.mark.asyncio
    async def test_all_open_handles_receive(self, registry, event) -> None:
        first, second = MockConnection(), MockConnection()
        registry.register(1, first)
        registry.register(1, second)

        assert await registry.send(1, event) is True

        assert first.types == ["BALANCE_UPDATE"]
        assert second.messages[0]["payload"] == {"userId": 1, "personalBalance": "10"}

    @pytest.mark.asyncio
    async def test_offline_user(self, registry, event) -> None:
        assert await registry.send(1, event) is False

    @pytest.mark.asyncio
    async def test_closed_handle_skipped(self, registry, event) -> None:
        open_conn, closed_conn = MockConnection(), MockConnection()
        closed_conn.close()
        registry.register(1, open_conn)
        registry.register(1, closed_conn)

        await registry.send(1, event)

        assert len(open_conn.sent) == 1
        assert closed_conn.sent == []

    @pytest.mark.asyncio
    async def test_only_closed_handles(self, registry, event) -> None:
        conn = MockConnection()
        conn.close()
        registry.register(1, conn)

        assert await registry.send(1, event) is False

    @pytest.mark.asyncio
    async def test_failure_does_not_raise(self, registry, event) -> None:
        good, bad = MockConnection(), MockConnection(should_fail=True)
        registry.register(1, good)
        registry.register(1, bad)

        assert await registry.send(1, event) is True

        assert len(good.sent) == 1
        assert registry.stats["failed"] == 1
        assert registry.stats["sent"] == 1

    @pytest.mark.asyncio
    async def test_slow_handle_times_out(self, registry, event) -> None:
        fast, slow = MockConnection(), MockConnection(delay_sec=1.0)
        registry.register(1, fast)
        registry.register(1, slow)

        started = asyncio.get_running_loop().time()
        await registry.send(1, event)
        elapsed = asyncio.get_running_loop().time() - started

        assert elapsed < 0.5
        assert len(fast.sent) == 1
        assert slow.sent == []
        assert registry.stats["failed"] == 1

    @pytest.mark.asyncio
    async def test_unregister_during_send(self, registry, event) -> None:
        """전송 중 등록 해제되어도 스냅샷 기준으로 안전하게 진행"""
        slow = MockConnection(delay_sec=0.01)
        registry.register(1, slow)

        task = asyncio.create_task(registry.send(1, event))
        await asyncio.sleep(0)
        registry.unregister(1, slow)

        assert await task is True
        assert len(slow.sent) == 1


class TestPrune:
    """닫힌 연결 정리"""

    def test_prune_removes_closed(self, registry) -> None:
        open_conn, closed_conn = MockConnection(), MockConnection()
        registry.register(1, open_conn)
        registry.register(1, closed_conn)
        closed_conn.close()

        assert registry.prune() == 1
        assert registry.connection_count(1) == 1

    def test_prune_drops_empty_users(self, registry) -> None:
        conn = MockConnection()
        registry.register(2, conn)
        conn.close()

        registry.prune()

        assert not registry.is_online(2)

    @pytest.mark.asyncio
    async def test_run_cleanup_cancellable(self, registry) -> None:
        conn = MockConnection()
        registry.register(1, conn)
        conn.close()

        task = asyncio.create_task(registry.run_cleanup(interval_sec=0.01))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        assert registry.connection_count() == 0
