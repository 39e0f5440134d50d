"""
푸시 알림 이벤트

클라이언트로 전송되는 메시지 타입과 직렬화 형식 정의.

와이어 형식 (UTF-8 텍스트 프레임, 메시지당 JSON 객체 1개):
    {"type": "<EventType>", "payload": <임의 JSON>}
"""

import json
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from core.domain.models import TransactionState, UserState
from core.types import MutationKind


class EventType(str, Enum):
    """푸시 이벤트 타입 (닫힌 열거형)"""

    BALANCE_UPDATE = "BALANCE_UPDATE"
    TRANSACTION_CREATED = "TRANSACTION_CREATED"
    TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
    TRANSACTION_DELETED = "TRANSACTION_DELETED"
    INVITATION_CREATED = "INVITATION_CREATED"
    INVITATION_ACCEPTED = "INVITATION_ACCEPTED"
    CONNECTION_ESTABLISHED = "CONNECTION_ESTABLISHED"


# 거래 변경 종류 → 이벤트 타입
TRANSACTION_EVENT_TYPES: dict[MutationKind, EventType] = {
    MutationKind.CREATE: EventType.TRANSACTION_CREATED,
    MutationKind.UPDATE: EventType.TRANSACTION_UPDATED,
    MutationKind.DELETE: EventType.TRANSACTION_DELETED,
}


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return format(value, "f")
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"JSON 직렬화 불가 타입: {type(value).__name__}")


@dataclass(frozen=True)
class NotificationEvent:
    """푸시 이벤트

    payload는 이벤트별 내용이며 Fan-out은 내용을 해석하지 않음.
    """

    type: EventType
    payload: dict[str, Any] = field(default_factory=dict)

    def to_message(self) -> dict[str, Any]:
        return {"type": self.type.value, "payload": self.payload}

    def to_json(self) -> str:
        return json.dumps(self.to_message(), ensure_ascii=False, default=_json_default)

    @classmethod
    def balance_update(cls, user: UserState) -> "NotificationEvent":
        return cls(EventType.BALANCE_UPDATE, user.balance_dict())

    @classmethod
    def transaction_changed(
        cls,
        kind: MutationKind,
        transaction: TransactionState,
        actor_id: int,
    ) -> "NotificationEvent":
        """TRANSACTION_CREATED / UPDATED / DELETED"""
        event_type = TRANSACTION_EVENT_TYPES[kind]

        if kind == MutationKind.DELETE:
            payload: dict[str, Any] = {
                "id": transaction.id,
                "userId": transaction.user_id,
                "isShared": transaction.is_shared,
            }
        else:
            payload = transaction.to_dict()

        payload["actorId"] = actor_id
        return cls(event_type, payload)

    @classmethod
    def connection_established(cls, user_id: int) -> "NotificationEvent":
        return cls(
            EventType.CONNECTION_ESTABLISHED,
            {"userId": user_id, "message": "Connected to Nido push channel"},
        )

    @classmethod
    def invitation_created(
        cls,
        code: str,
        inviter_user_id: int,
        inviter_username: str,
        expires_at: Any,
    ) -> "NotificationEvent":
        return cls(
            EventType.INVITATION_CREATED,
            {
                "code": code,
                "inviter": {"userId": inviter_user_id, "username": inviter_username},
                "expires": expires_at,
            },
        )

    @classmethod
    def invitation_accepted(
        cls,
        user_id: int,
        username: str,
        invited_username: str,
    ) -> "NotificationEvent":
        return cls(
            EventType.INVITATION_ACCEPTED,
            {"userId": user_id, "username": username, "invitedUsername": invited_username},
        )
