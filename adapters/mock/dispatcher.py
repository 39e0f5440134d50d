"""
Mock 알림 디스패처

테스트용 디스패처. INotificationDispatcher Protocol 준수.
실제 전송 없이 notify_user / notify_household 호출만 기록.
"""

from dataclasses import dataclass

from core.realtime.events import EventType, NotificationEvent


@dataclass
class DispatchRecord:
    """디스패치 호출 기록"""

    target: str  # "user" 또는 "household"
    target_id: int | None
    event: NotificationEvent
    exclude_user_id: int | None = None


class MockDispatcher:
    """Mock 디스패처

    Args:
        should_fail: True면 모든 호출이 예외 발생
    """

    def __init__(self, should_fail: bool = False):
        self.should_fail = should_fail
        self.records: list[DispatchRecord] = []

    async def notify_user(self, user_id: int, event: NotificationEvent) -> bool:
        if self.should_fail:
            raise ConnectionError("Mock dispatch failure")
        self.records.append(DispatchRecord("user", user_id, event))
        return True

    async def notify_household(
        self,
        household_id: int | None,
        event: NotificationEvent,
        exclude_user_id: int | None = None,
    ) -> bool:
        if self.should_fail:
            raise ConnectionError("Mock dispatch failure")
        self.records.append(DispatchRecord("household", household_id, event, exclude_user_id))
        return True

    # -------------------------------------------------------------------------
    # 테스트 헬퍼
    # -------------------------------------------------------------------------

    def user_calls(self, event_type: EventType | None = None) -> list[DispatchRecord]:
        return [
            r for r in self.records
            if r.target == "user" and (event_type is None or r.event.type == event_type)
        ]

    def household_calls(self) -> list[DispatchRecord]:
        return [r for r in self.records if r.target == "household"]

    def clear(self) -> None:
        self.records.clear()
