from typing import Annotated
import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from journal_api.api.deps import get_current_user, get_user_by_username
from journal_api.db.session import get_db
from journal_api.models import Friendship, FriendshipStatus, User
from journal_api.schemas.friendship import (
    BlockCreate,
    FriendRequestCreate,
    FriendRequestReject,
    FriendshipRead,
    NotificationSettings,
)
from journal_api.schemas.user import UserSummary
from journal_api.services import notifications
from journal_api.services.friendships import find_between, list_friends, withdraw_shares


router = APIRouter(prefix="/friends", tags=["friends"])
logger = logging.getLogger(__name__)


def _get_pending_request(db: Session, requester: User, recipient: User) -> Friendship | None:
    return (
        db.query(Friendship)
        .filter(
            Friendship.requester_id == requester.id,
            Friendship.recipient_id == recipient.id,
            Friendship.status == FriendshipStatus.PENDING,
        )
        .first()
    )


@router.get("/", response_model=list[UserSummary])
def get_friends(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[User]:
    return list_friends(db, current_user.id)


@router.get("/requests/incoming", response_model=list[FriendshipRead])
def list_incoming_requests(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[Friendship]:
    return (
        db.query(Friendship)
        .filter(Friendship.recipient_id == current_user.id, Friendship.status == FriendshipStatus.PENDING)
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        .all()
    )


@router.get("/requests/outgoing", response_model=list[FriendshipRead])
def list_outgoing_requests(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[Friendship]:
    return (
        db.query(Friendship)
        .filter(Friendship.requester_id == current_user.id, Friendship.status == FriendshipStatus.PENDING)
        .order_by(Friendship.created_at.desc(), Friendship.id.desc())
        .all()
    )


@router.get("/blocked", response_model=list[UserSummary])
def list_blocked_users(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[User]:
    blocks = (
        db.query(Friendship)
        .filter(
            or_(Friendship.requester_id == current_user.id, Friendship.recipient_id == current_user.id),
            Friendship.status == FriendshipStatus.BLOCKED,
            Friendship.blocked_by_id == current_user.id,
        )
        .all()
    )
    return sorted((block.other(current_user.id) for block in blocks), key=lambda user: user.username)


@router.post("/requests", response_model=FriendshipRead, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    payload: FriendRequestCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Friendship:
    other = get_user_by_username(db, payload.username)
    if other.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot send a friend request to yourself")

    friendship = find_between(db, current_user.id, other.id)
    if friendship is not None:
        if friendship.status == FriendshipStatus.BLOCKED:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Friendship is blocked")
        if friendship.status != FriendshipStatus.REJECTED:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Friendship already exists")
        # a rejected request can be reopened by either side
        friendship.requester_id = current_user.id
        friendship.recipient_id = other.id
        friendship.status = FriendshipStatus.PENDING
        friendship.rejection_reason = None
    else:
        friendship = Friendship(requester_id=current_user.id, recipient_id=other.id)

    db.add(friendship)
    db.commit()
    db.refresh(friendship)

    logger.info(
        "friend request sent",
        extra={"friendship_id": friendship.id, "requester_id": current_user.id, "recipient_id": other.id},
    )
    await notifications.notify_user(db, current_user, other.id, notifications.FRIEND_REQUEST_RECEIVED)
    return friendship


@router.post("/requests/{username}/accept", response_model=FriendshipRead)
async def accept_friend_request(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Friendship:
    requester = get_user_by_username(db, username)
    friendship = _get_pending_request(db, requester, current_user)
    if not friendship:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend request not found")

    friendship.status = FriendshipStatus.ACCEPTED
    db.add(friendship)
    db.commit()
    db.refresh(friendship)

    logger.info("friend request accepted", extra={"friendship_id": friendship.id})
    await notifications.notify_user(db, current_user, requester.id, notifications.FRIEND_REQUEST_ACCEPTED)
    return friendship


@router.post("/requests/{username}/reject", response_model=FriendshipRead)
def reject_friend_request(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    payload: Annotated[FriendRequestReject | None, Body()] = None,
) -> Friendship:
    requester = get_user_by_username(db, username)
    friendship = _get_pending_request(db, requester, current_user)
    if not friendship:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friend request not found")

    friendship.status = FriendshipStatus.REJECTED
    friendship.rejection_reason = payload.reason if payload else None
    db.add(friendship)
    db.commit()
    db.refresh(friendship)

    logger.info("friend request rejected", extra={"friendship_id": friendship.id})
    return friendship


@router.delete("/requests/{username}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_friend_request(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    recipient = get_user_by_username(db, username)
    friendship = _get_pending_request(db, current_user, recipient)
    if not friendship:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Pending friend request not found")

    db.delete(friendship)
    db.commit()
    logger.info("friend request canceled", extra={"requester_id": current_user.id, "recipient_id": recipient.id})
    return None


@router.post("/blocks", response_model=FriendshipRead)
def block_user(
    payload: BlockCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Friendship:
    other = get_user_by_username(db, payload.username)
    if other.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot block yourself")

    friendship = find_between(db, current_user.id, other.id)
    if friendship is not None and friendship.status == FriendshipStatus.BLOCKED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already blocked")

    if friendship is None:
        friendship = Friendship(requester_id=current_user.id, recipient_id=other.id)

    friendship.status = FriendshipStatus.BLOCKED
    friendship.block_reason = payload.reason
    friendship.blocked_by_id = current_user.id
    withdraw_shares(db, current_user.id, other.id)
    db.add(friendship)
    db.commit()
    db.refresh(friendship)

    logger.info("user blocked", extra={"friendship_id": friendship.id, "blocked_by_id": current_user.id})
    return friendship


@router.delete("/blocks/{username}", status_code=status.HTTP_204_NO_CONTENT)
def unblock_user(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    other = get_user_by_username(db, username)
    friendship = find_between(db, current_user.id, other.id)
    if not friendship or friendship.status != FriendshipStatus.BLOCKED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Blocked user not found")
    if friendship.blocked_by_id != current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the user who blocked can unblock")

    db.delete(friendship)
    db.commit()
    logger.info("user unblocked", extra={"user_id": current_user.id, "other_id": other.id})
    return None


@router.patch("/{username}/notifications", response_model=FriendshipRead)
def update_notifications(
    username: str,
    payload: NotificationSettings,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Friendship:
    other = get_user_by_username(db, username)
    friendship = find_between(db, current_user.id, other.id)
    if not friendship:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friendship not found")

    friendship.notifications_enabled = payload.enabled
    db.add(friendship)
    db.commit()
    db.refresh(friendship)
    return friendship


@router.delete("/{username}", status_code=status.HTTP_204_NO_CONTENT)
def remove_friend(
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    other = get_user_by_username(db, username)
    friendship = find_between(db, current_user.id, other.id)
    if not friendship or friendship.status != FriendshipStatus.ACCEPTED:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Friendship not found")

    withdraw_shares(db, current_user.id, other.id)
    db.delete(friendship)
    db.commit()
    logger.info("friend removed", extra={"user_id": current_user.id, "other_id": other.id})
    return None
