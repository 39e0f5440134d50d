"""
Mock 푸시 연결

테스트용 연결 핸들. IConnection Protocol 준수.
전송된 메시지를 기록하여 테스트에서 검증 가능.
"""

import asyncio
import json
from typing import Any


class MockConnection:
    """Mock 연결 핸들

    사용 예시:
    ```python
    conn = MockConnection()
    registry.register(1, conn)

    await registry.send(1, event)
    assert conn.messages[0]["type"] == "BALANCE_UPDATE"

    conn.close()  # 이후 전송 대상에서 제외
    ```
    """

    def __init__(self, should_fail: bool = False, delay_sec: float = 0.0):
        """
        Args:
            should_fail: True면 모든 전송이 예외 발생 (에러 시나리오 테스트용)
            delay_sec: 전송 지연 (느린 연결 시뮬레이션)
        """
        self.should_fail = should_fail
        self.delay_sec = delay_sec
        self.sent: list[str] = []
        self._open = True

    @property
    def is_open(self) -> bool:
        return self._open

    async def send_text(self, data: str) -> None:
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        if self.should_fail:
            raise ConnectionError("Mock send failure")
        self.sent.append(data)

    def close(self) -> None:
        self._open = False

    # -------------------------------------------------------------------------
    # 테스트 헬퍼
    # -------------------------------------------------------------------------

    @property
    def messages(self) -> list[dict[str, Any]]:
        """전송된 메시지 (JSON 파싱됨)"""
        return [json.loads(m) for m in self.sent]

    @property
    def types(self) -> list[str]:
        """전송된 메시지 타입 목록"""
        return [m["type"] for m in self.messages]

    def clear(self) -> None:
        self.sent.clear()
