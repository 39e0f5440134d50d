"""
알림 Fan-out

도메인 이벤트를 수신자 집합으로 변환하여 레지스트리로 전송.

- notify_user: 사용자 1명의 모든 연결로 직접 전송
- notify_household: 가구 구성원을 먼저 조회한 뒤, 제외 대상(보통 행위자)을
  뺀 구성원에게만 전송 (연결된 전체 사용자에게 뿌리지 않음)

재시도/확인응답/큐 없음. 수신자가 오프라인이면 이벤트는 버려지고,
클라이언트는 재연결 시 저장소에서 다시 조회하여 상태를 맞춤.
"""

import logging

from adapters.interfaces import IHouseholdDirectory
from core.realtime.events import NotificationEvent
from core.realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class NotificationFanout:
    """알림 Fan-out (INotificationDispatcher 구현)

    Args:
        registry: 연결 레지스트리
        directory: 가구 구성원 조회
    """

    def __init__(self, registry: ConnectionRegistry, directory: IHouseholdDirectory):
        self.registry = registry
        self.directory = directory

    async def notify_user(self, user_id: int, event: NotificationEvent) -> bool:
        """사용자 1명에게 전송

        Returns:
            열린 연결에 전송을 시도했는지 여부 (오프라인이면 False)
        """
        try:
            return await self.registry.send(user_id, event)
        except Exception as e:
            logger.info(f"사용자 {user_id} 알림 실패 ({event.type.value}): {e}")
            return False

    async def notify_household(
        self,
        household_id: int | None,
        event: NotificationEvent,
        exclude_user_id: int | None = None,
    ) -> bool:
        """가구 구성원에게 전송

        Args:
            household_id: 가구 ID (None이면 전송 없음)
            event: 이벤트
            exclude_user_id: 제외할 사용자 (행위자)

        Returns:
            구성원 1명 이상에게 전송을 시도했는지 여부
        """
        if household_id is None:
            return False

        try:
            member_ids = await self.directory.get_member_ids(household_id)
        except Exception as e:
            logger.info(f"가구 {household_id} 구성원 조회 실패, 알림 생략: {e}")
            return False

        recipients = sorted(
            uid for uid in member_ids
            if uid != exclude_user_id and self.registry.is_online(uid)
        )

        notified = False
        for user_id in recipients:
            if await self.notify_user(user_id, event):
                notified = True

        logger.info(
            f"가구 {household_id} 알림 {event.type.value}: "
            f"구성원 {len(member_ids)}명 중 온라인 {len(recipients)}명",
        )
        return notified
