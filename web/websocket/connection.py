"""
WebSocket 연결 핸들

Starlette WebSocket을 IConnection Protocol로 감쌈.
"""

from fastapi import WebSocket
from starlette.websockets import WebSocketState


class WebSocketConnection:
    """WebSocket 연결 핸들

    레지스트리는 핸들 객체의 동일성으로 연결을 구분하므로
    WebSocket 1개당 인스턴스 1개만 생성.
    """

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, data: str) -> None:
        await self.websocket.send_text(data)

    def __repr__(self) -> str:
        client = self.websocket.client
        return f"WebSocketConnection({client.host}:{client.port})" if client else "WebSocketConnection()"
