"""
연결 레지스트리 (Connection Registry)

user_id → {연결 핸들} 매핑. 사용자 1명이 여러 연결을 동시에 가질 수 있고,
이벤트는 열린 연결 전부에 전송됨.

- 프로세스 수명 동안만 유지 (영속화 없음, 재시작 시 클라이언트 재연결)
- 모듈 전역이 아닌 인스턴스로 생성하여 app.state로 주입
- send는 핸들 집합의 스냅샷을 순회하므로 전송 중 등록/해제와 충돌하지 않음
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from adapters.interfaces import IConnection
from core.constants import Defaults

if TYPE_CHECKING:
    from core.realtime.events import NotificationEvent

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """연결 레지스트리

    Args:
        send_timeout_sec: 연결 1개당 전송 대기 한도 (느린 연결이 요청을 붙잡지 않도록)

    사용 예시:
    ```python
    registry = ConnectionRegistry()
    registry.register(user_id, connection)

    delivered = await registry.send(user_id, event)

    registry.unregister(user_id, connection)
    ```
    """

    def __init__(self, send_timeout_sec: float = Defaults.WS_SEND_TIMEOUT_SEC):
        self.send_timeout_sec = send_timeout_sec
        self._connections: dict[int, set[IConnection]] = {}

        # 통계
        self._sent_count = 0
        self._failed_count = 0

    # -------------------------------------------------------------------------
    # 등록 / 해제
    # -------------------------------------------------------------------------

    def register(self, user_id: int, handle: IConnection) -> None:
        """연결 등록 (사용자 집합이 없으면 생성)"""
        handles = self._connections.setdefault(user_id, set())
        handles.add(handle)

        logger.info(
            f"사용자 {user_id} 연결 등록. 활성 연결: {len(handles)}",
        )

    def unregister(self, user_id: int, handle: IConnection) -> None:
        """연결 해제 (집합이 비면 사용자 항목 제거)"""
        handles = self._connections.get(user_id)
        if handles is None:
            return

        handles.discard(handle)

        if not handles:
            del self._connections[user_id]
            logger.info(f"사용자 {user_id} 연결 모두 해제")
        else:
            logger.info(f"사용자 {user_id} 남은 연결: {len(handles)}")

    # -------------------------------------------------------------------------
    # 조회
    # -------------------------------------------------------------------------

    def is_online(self, user_id: int) -> bool:
        return user_id in self._connections

    def online_user_ids(self) -> set[int]:
        return set(self._connections)

    def connection_count(self, user_id: int | None = None) -> int:
        """연결 수 (user_id 지정 시 해당 사용자만)"""
        if user_id is not None:
            return len(self._connections.get(user_id, ()))
        return sum(len(handles) for handles in self._connections.values())

    @property
    def stats(self) -> dict[str, int]:
        return {
            "users": len(self._connections),
            "connections": self.connection_count(),
            "sent": self._sent_count,
            "failed": self._failed_count,
        }

    # -------------------------------------------------------------------------
    # 전송
    # -------------------------------------------------------------------------

    async def send(self, user_id: int, event: "NotificationEvent") -> bool:
        """사용자의 열린 연결 전부에 이벤트 전송

        열려 있지 않은 연결은 건너뜀. 전송 실패/타임아웃은 로그만 남기고
        예외를 올리지 않음.

        Returns:
            열린 연결 1개 이상에 전송을 시도했는지 여부
        """
        handles = list(self._connections.get(user_id, ()))
        open_handles = [h for h in handles if h.is_open]

        if not open_handles:
            logger.info(f"사용자 {user_id} 연결 없음, {event.type.value} 전송 생략")
            return False

        message = event.to_json()
        results = await asyncio.gather(
            *(self._send_one(user_id, h, message) for h in open_handles)
        )
        delivered = sum(1 for ok in results if ok)

        logger.info(
            f"사용자 {user_id}에게 {event.type.value} 전송 "
            f"({delivered}/{len(open_handles)} 연결)",
        )
        return True

    async def _send_one(self, user_id: int, handle: IConnection, message: str) -> bool:
        try:
            await asyncio.wait_for(handle.send_text(message), timeout=self.send_timeout_sec)
        except asyncio.TimeoutError:
            self._failed_count += 1
            logger.info(f"사용자 {user_id} 전송 타임아웃 ({self.send_timeout_sec}s)")
            return False
        except Exception as e:
            self._failed_count += 1
            logger.info(f"사용자 {user_id} 전송 실패: {e}")
            return False

        self._sent_count += 1
        return True

    # -------------------------------------------------------------------------
    # 정리
    # -------------------------------------------------------------------------

    def prune(self) -> int:
        """닫힌 연결 제거

        Returns:
            제거된 연결 수
        """
        removed = 0

        for user_id in list(self._connections):
            handles = self._connections.get(user_id)
            if handles is None:
                continue

            closed = {h for h in handles if not h.is_open}
            if closed:
                handles.difference_update(closed)
                removed += len(closed)

            if not handles:
                del self._connections[user_id]

        if removed:
            logger.info(f"닫힌 연결 {removed}개 정리")

        return removed

    async def run_cleanup(self, interval_sec: float = Defaults.WS_CLEANUP_INTERVAL_SEC) -> None:
        """주기적 정리 루프 (앱 lifespan에서 Task로 실행, 취소로 종료)"""
        while True:
            await asyncio.sleep(interval_sec)
            self.prune()
            logger.info(
                f"연결 정리: {self.connection_count()}개 연결, "
                f"{len(self._connections)}명 사용자",
            )
