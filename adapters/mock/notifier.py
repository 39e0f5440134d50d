"""
Mock 알림 서비스

테스트용 Mock Notifier.
INotifier Protocol 준수.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from core.types import AlertLevel


@dataclass
class NotificationRecord:
    """알림 기록"""

    message: str
    level: str
    extra: dict[str, Any] | None
    timestamp: datetime
    sent: bool


class MockNotifier:
    """Mock 알림 서비스

    발송된 모든 알림을 기록하여 테스트에서 검증 가능.

    사용 예시:
    ```python
    notifier = MockNotifier()
    orchestrator = MutationOrchestrator(..., alert_notifier=notifier)

    # 잔고 반영 실패 후
    assert notifier.get_by_level("CRITICAL")
    ```
    """

    def __init__(self, should_fail: bool = False):
        """
        Args:
            should_fail: True면 모든 발송 실패 (에러 시나리오 테스트용)
        """
        self.should_fail = should_fail
        self.notifications: list[NotificationRecord] = []

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        record = NotificationRecord(
            message=message,
            level=level,
            extra=extra,
            timestamp=datetime.now(timezone.utc),
            sent=not self.should_fail,
        )
        self.notifications.append(record)
        return not self.should_fail

    async def send_integrity_alert(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        error: str,
    ) -> bool:
        return await self.send(
            message=f"잔고 정합성 이슈: 사용자 {user_id}, 거래 {transaction_id} ({operation})",
            level=AlertLevel.CRITICAL.value,
            extra={"user_id": user_id, "transaction_id": transaction_id, "error": error},
        )

    # -------------------------------------------------------------------------
    # 테스트 헬퍼 메서드
    # -------------------------------------------------------------------------

    def clear(self) -> None:
        self.notifications.clear()

    def get_by_level(self, level: str) -> list[NotificationRecord]:
        return [n for n in self.notifications if n.level == level]

    @property
    def last_notification(self) -> NotificationRecord | None:
        return self.notifications[-1] if self.notifications else None

    @property
    def message_count(self) -> int:
        return len(self.notifications)

    @property
    def failed_count(self) -> int:
        return sum(1 for n in self.notifications if not n.sent)
