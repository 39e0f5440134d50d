"""
실시간 푸시 알림

연결 레지스트리, 이벤트 정의, 가구 단위 Fan-out.
"""

from core.realtime.events import EventType, NotificationEvent
from core.realtime.fanout import NotificationFanout
from core.realtime.registry import ConnectionRegistry

__all__ = [
    "ConnectionRegistry",
    "EventType",
    "NotificationEvent",
    "NotificationFanout",
]
