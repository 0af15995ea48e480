import logging
from collections import defaultdict
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect


logger = logging.getLogger(__name__)


class ConnectionManager:
    """Fan-out of JSON messages to every socket subscribed to a channel."""

    def __init__(self) -> None:
        self.channels: dict[str, set[WebSocket]] = defaultdict(set)

    async def connect(self, channel: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self.channels[channel].add(websocket)

    def disconnect(self, channel: str, websocket: WebSocket) -> None:
        sockets = self.channels.get(channel)
        if sockets is None:
            return
        sockets.discard(websocket)
        if not sockets:
            del self.channels[channel]

    def subscribers(self, channel: str) -> int:
        return len(self.channels.get(channel, ()))

    async def broadcast(self, channel: str, message: dict[str, Any]) -> None:
        dead: list[WebSocket] = []
        for websocket in list(self.channels.get(channel, ())):
            try:
                await websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.warning("dropping websocket on %s: %r", channel, exc)
                dead.append(websocket)
        for websocket in dead:
            self.disconnect(channel, websocket)


manager = ConnectionManager()
