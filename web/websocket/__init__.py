"""
푸시 채널 (WebSocket)
"""

from web.websocket.connection import WebSocketConnection

__all__ = [
    "WebSocketConnection",
]
