"""
Slack 알림 서비스

Slack Webhook을 통해 운영자에게 알림을 전송.
잔고 반영 실패(정합성 이슈) 등 수동 개입이 필요한 상황에 사용.
INotifier Protocol 준수.
"""

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from core.types import AlertLevel

logger = logging.getLogger(__name__)


# 레벨별 이모지 매핑
LEVEL_EMOJI = {
    AlertLevel.INFO.value: ":white_check_mark:",
    AlertLevel.WARNING.value: ":warning:",
    AlertLevel.ERROR.value: ":x:",
    AlertLevel.CRITICAL.value: ":rotating_light:",
}

# 레벨별 색상 매핑 (Slack attachment color)
LEVEL_COLOR = {
    AlertLevel.INFO.value: "#36A64F",
    AlertLevel.WARNING.value: "#FFA500",
    AlertLevel.ERROR.value: "#FF0000",
    AlertLevel.CRITICAL.value: "#8B0000",
}


class SlackNotifier:
    """Slack 알림 서비스

    사용 예시:
    ```python
    notifier = SlackNotifier(webhook_url="https://hooks.slack.com/...")

    await notifier.send("서버 시작됨", level="INFO")
    await notifier.send_integrity_alert(
        user_id=3,
        transaction_id=42,
        operation="update",
        error="database is locked",
    )
    ```
    """

    def __init__(
        self,
        webhook_url: str,
        channel: str | None = None,
        username: str = "Nido",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            webhook_url: Slack Incoming Webhook URL
            channel: 채널 오버라이드 (기본값은 Webhook 설정 사용)
            username: 메시지 발송자 이름
            timeout: HTTP 요청 타임아웃 (초)
            transport: httpx 전송 계층 (테스트에서 MockTransport 주입)
        """
        if not webhook_url:
            raise ValueError("webhook_url은 필수입니다")

        self.webhook_url = webhook_url
        self.channel = channel
        self.username = username
        self.timeout = timeout
        self._transport = transport

        # httpx 비동기 클라이언트 (재사용)
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """HTTP 클라이언트 반환 (lazy initialization)"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def send(
        self,
        message: str,
        level: str = "INFO",
        extra: dict[str, Any] | None = None,
    ) -> bool:
        """알림 전송

        Args:
            message: 알림 메시지
            level: 알림 레벨 (INFO, WARNING, ERROR, CRITICAL)
            extra: 추가 데이터 (attachment fields로 표시)

        Returns:
            전송 성공 여부
        """
        emoji = LEVEL_EMOJI.get(level, ":bell:")
        color = LEVEL_COLOR.get(level, "#808080")

        payload: dict[str, Any] = {
            "username": self.username,
            "attachments": [
                {
                    "color": color,
                    "text": f"{emoji} *[{level}]* {message}",
                    "footer": f"Nido | {self._format_timestamp()}",
                }
            ],
        }

        if self.channel:
            payload["channel"] = self.channel

        if extra:
            payload["attachments"][0]["fields"] = [
                {"title": key, "value": str(value), "short": True}
                for key, value in extra.items()
            ]

        return await self._send_payload(payload)

    async def send_integrity_alert(
        self,
        user_id: int,
        transaction_id: int | None,
        operation: str,
        error: str,
    ) -> bool:
        """잔고 정합성 이슈 알림 (scripts/reconcile_balances.py 안내 포함)"""
        fields = [
            {"title": "사용자", "value": str(user_id), "short": True},
            {"title": "거래", "value": str(transaction_id), "short": True},
            {"title": "작업", "value": operation, "short": True},
            {"title": "오류", "value": error, "short": False},
        ]

        payload: dict[str, Any] = {
            "username": self.username,
            "attachments": [
                {
                    "color": LEVEL_COLOR[AlertLevel.CRITICAL.value],
                    "title": f"{LEVEL_EMOJI[AlertLevel.CRITICAL.value]} 잔고 정합성 이슈",
                    "text": f"복구: python scripts/reconcile_balances.py --user-id {user_id} --apply",
                    "fields": fields,
                    "footer": f"Nido | {self._format_timestamp()}",
                }
            ],
        }

        if self.channel:
            payload["channel"] = self.channel

        return await self._send_payload(payload)

    async def _send_payload(self, payload: dict[str, Any]) -> bool:
        try:
            client = await self._get_client()
            response = await client.post(self.webhook_url, json=payload)

            if response.status_code == 200:
                logger.debug("Slack 알림 전송 성공")
                return True

            logger.warning(
                "Slack 알림 전송 실패: status=%s, body=%s",
                response.status_code,
                response.text,
            )
            return False

        except httpx.TimeoutException:
            logger.error("Slack 알림 전송 타임아웃")
            return False
        except httpx.HTTPError as e:
            logger.error("Slack 알림 전송 HTTP 에러: %s", e)
            return False

    def _format_timestamp(self) -> str:
        return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")

    async def __aenter__(self) -> "SlackNotifier":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
