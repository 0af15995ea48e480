import logging
from typing import Any

from sqlalchemy.orm import Session

from journal_api.models import User
from journal_api.realtime.manager import manager
from journal_api.services.friendships import find_between


logger = logging.getLogger(__name__)

FRIEND_REQUEST_RECEIVED = "FRIEND_REQUEST_RECEIVED"
FRIEND_REQUEST_ACCEPTED = "FRIEND_REQUEST_ACCEPTED"
ENTRY_SHARED = "ENTRY_SHARED"


def user_channel(user_id: int) -> str:
    return f"user:{user_id}"


async def notify_user(db: Session, sender: User, recipient_id: int, event_type: str, **data: Any) -> bool:
    channel = user_channel(recipient_id)
    if not manager.subscribers(channel):
        return False

    friendship = find_between(db, sender.id, recipient_id)
    if friendship is not None and not friendship.notifications_enabled:
        logger.debug(
            "notification muted",
            extra={"event_type": event_type, "sender_id": sender.id, "recipient_id": recipient_id},
        )
        return False

    await manager.broadcast(
        channel,
        {"type": event_type, "from": sender.username, **data},
    )
    return True
