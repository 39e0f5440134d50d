"""
Invitation 서비스

가구 초대 코드 발급/검증/수락.

초대 코드는 프로세스 메모리에만 보관 (재시작 시 소멸).
모듈 전역이 아닌 인스턴스로 생성하여 app.state로 주입.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from adapters.interfaces import INotificationDispatcher, IUserDirectory
from core.constants import Defaults
from core.domain.errors import NotFoundError, ValidationError
from core.domain.models import UserState
from core.realtime.events import NotificationEvent
from core.utils.timezone import now_utc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Invitation:
    """초대 코드"""

    code: str
    inviter_user_id: int
    inviter_username: str
    household_id: int
    invited_username: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "inviterUserId": self.inviter_user_id,
            "inviterUsername": self.inviter_username,
            "householdId": self.household_id,
            "invitedUsername": self.invited_username,
            "expiresAt": self.expires_at.isoformat(),
        }


class InvitationService:
    """초대 코드 관리

    같은 초대자/가구/초대 대상 조합으로 다시 요청하면 만료 전까지 같은 코드를 반환.

    Args:
        dispatcher: 푸시 알림 디스패처
        ttl_sec: 코드 유효 기간 (초)
        clock: 현재 시각 함수 (테스트에서 교체)
    """

    def __init__(
        self,
        dispatcher: INotificationDispatcher,
        ttl_sec: int = Defaults.INVITATION_TTL_SEC,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.dispatcher = dispatcher
        self.ttl = timedelta(seconds=ttl_sec)
        self.clock = clock
        self._invitations: dict[str, Invitation] = {}

    def __len__(self) -> int:
        return len(self._invitations)

    def cleanup_expired(self) -> int:
        now = self.clock()
        expired = [code for code, inv in self._invitations.items() if inv.is_expired(now)]
        for code in expired:
            del self._invitations[code]
        return len(expired)

    async def create_invitation(
        self,
        users: IUserDirectory,
        inviter: UserState,
        invited_username: str,
    ) -> Invitation:
        """초대 코드 발급

        초대자에게 가구가 없으면 "<이름>'s household" 가구를 먼저 생성.
        초대 대상이 가입된 사용자면 INVITATION_CREATED 전송.

        Raises:
            ValidationError: 자기 자신을 초대한 경우
        """
        if invited_username == inviter.username:
            raise ValidationError("자기 자신은 초대할 수 없습니다")

        self.cleanup_expired()

        household_id = inviter.household_id
        if household_id is None:
            household = await users.create_household(f"{inviter.name}'s household", inviter.id)
            household_id = household.id

        for invitation in self._invitations.values():
            if (
                invitation.inviter_user_id == inviter.id
                and invitation.household_id == household_id
                and invitation.invited_username == invited_username
            ):
                return invitation

        code = secrets.token_hex(4)
        while code in self._invitations:
            code = secrets.token_hex(4)

        invitation = Invitation(
            code=code,
            inviter_user_id=inviter.id,
            inviter_username=inviter.username,
            household_id=household_id,
            invited_username=invited_username,
            expires_at=self.clock() + self.ttl,
        )
        self._invitations[code] = invitation

        logger.info(
            f"초대 코드 발급: {inviter.username} → {invited_username}",
            extra={"household_id": household_id},
        )

        invited = await users.get_user_by_username(invited_username)
        if invited is not None:
            await self.dispatcher.notify_user(
                invited.id,
                NotificationEvent.invitation_created(
                    code, inviter.id, inviter.username, invitation.expires_at
                ),
            )

        return invitation

    def validate(self, code: str) -> Invitation:
        """코드 검증 (만료된 코드는 제거)

        Raises:
            NotFoundError: 없거나 만료된 코드
        """
        invitation = self._invitations.get(code)
        if invitation is None:
            raise NotFoundError(f"Invitation not found: {code}")

        if invitation.is_expired(self.clock()):
            del self._invitations[code]
            raise NotFoundError(f"Invitation expired: {code}")

        return invitation

    def list_for_inviter(self, user_id: int) -> list[Invitation]:
        self.cleanup_expired()
        return [inv for inv in self._invitations.values() if inv.inviter_user_id == user_id]

    async def accept(self, users: IUserDirectory, code: str, user: UserState) -> UserState:
        """초대 수락: 사용자를 초대자의 가구에 등록하고 코드 소멸

        Raises:
            NotFoundError: 없거나 만료된 코드
            ValidationError: 초대 대상이 아닌 사용자
        """
        invitation = self.validate(code)

        if invitation.invited_username != user.username:
            raise ValidationError("이 초대 코드의 대상이 아닙니다")

        updated = await users.set_household(user.id, invitation.household_id)
        del self._invitations[code]

        logger.info(
            f"초대 수락: {user.username} → 가구 {invitation.household_id}",
        )

        await self.dispatcher.notify_user(
            invitation.inviter_user_id,
            NotificationEvent.invitation_accepted(
                user.id, user.username, invitation.invited_username
            ),
        )

        return updated
