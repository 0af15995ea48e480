from typing import Annotated

from fastapi import APIRouter, Depends, WebSocket, status
from sqlalchemy.orm import Session
from starlette.websockets import WebSocketDisconnect

from journal_api.api.deps import user_from_token
from journal_api.db.session import get_db
from journal_api.realtime.manager import manager
from journal_api.services.notifications import user_channel


router = APIRouter()


@router.websocket("/ws/notifications")
async def notifications_ws(
    websocket: WebSocket,
    token: str,
    db: Annotated[Session, Depends(get_db)],
) -> None:
    user = user_from_token(db, token)
    if not user:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    channel = user_channel(user.id)
    # the session is only needed for the handshake
    db.close()
    await manager.connect(channel, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        manager.disconnect(channel, websocket)
