"""
푸시 채널 (WebSocket)

WS /ws?userId=<id>&token=<jwt>

- userId 누락/형식 오류, 토큰 검증 실패, 토큰 사용자 불일치 → 1008로 종료
- 연결 시 레지스트리에 등록하고 CONNECTION_ESTABLISHED 전송
- 클라이언트 메시지는 기록만 함
- 종료/오류 시 등록 해제
"""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from core.config.loader import get_settings
from core.realtime.events import NotificationEvent
from web.auth import AuthError, decode_access_token
from web.websocket.connection import WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Push"])


def _authenticate(websocket: WebSocket) -> int | None:
    """쿼리 파라미터로 사용자 확인 (실패 시 None)"""
    raw_user_id = websocket.query_params.get("userId")
    token = websocket.query_params.get("token")

    if not raw_user_id or not token:
        return None

    try:
        user_id = int(raw_user_id)
        token_user_id = decode_access_token(token, get_settings().web_secret_key)
    except (ValueError, AuthError) as e:
        logger.info(f"푸시 채널 인증 실패: {e}")
        return None

    return user_id if user_id == token_user_id else None


@router.websocket("/ws")
async def push_channel(websocket: WebSocket) -> None:
    await websocket.accept()

    user_id = _authenticate(websocket)
    if user_id is None:
        logger.info("푸시 채널 연결 거부: 사용자 확인 실패")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    registry = websocket.app.state.registry
    handle = WebSocketConnection(websocket)
    registry.register(user_id, handle)

    try:
        await handle.send_text(NotificationEvent.connection_established(user_id).to_json())

        while True:
            message = await websocket.receive_text()
            try:
                parsed = json.loads(message)
                logger.debug(f"사용자 {user_id} 메시지 수신: {parsed.get('type')}")
            except (ValueError, AttributeError):
                logger.debug(f"사용자 {user_id} 메시지 형식 오류 (무시)")

    except WebSocketDisconnect as e:
        logger.info(f"사용자 {user_id} 연결 종료 (code={e.code})")
    except Exception as e:
        logger.warning(f"사용자 {user_id} 푸시 채널 오류: {e}")
    finally:
        registry.unregister(user_id, handle)
