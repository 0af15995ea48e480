from datetime import date
from typing import Annotated
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from journal_api.api.deps import get_current_user, get_user_by_username
from journal_api.db.session import get_db
from journal_api.models import Entry, EntryMessage, User
from journal_api.schemas.entry import (
    EntryCreate,
    EntryMessageCreate,
    EntryMessageRead,
    EntryRead,
    EntryShares,
    EntryUpdate,
    EntryWriteResult,
)
from journal_api.services import notifications
from journal_api.services.friendships import are_friends


router = APIRouter(prefix="/entries", tags=["entries"])
logger = logging.getLogger(__name__)


def _get_own_entry(db: Session, entry_id: int, current_user: User) -> Entry:
    entry = db.query(Entry).filter(Entry.id == entry_id, Entry.author_id == current_user.id).first()
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry


def _get_readable_entry(db: Session, entry_id: int, current_user: User) -> Entry:
    entry = db.query(Entry).filter(Entry.id == entry_id).first()
    if not entry or (entry.author_id != current_user.id and not entry.is_shared_with(current_user.id)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry


def _resolve_peer(db: Session, author: User, username: str) -> User:
    peer = get_user_by_username(db, username)
    if peer.id == author.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot share an entry with yourself")
    if not are_friends(db, author.id, peer.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Entries can only be shared with friends",
        )
    return peer


def _resolve_peers(db: Session, author: User, usernames: list[str]) -> list[User]:
    return [_resolve_peer(db, author, username) for username in dict.fromkeys(usernames)]


async def _announce_shares(db: Session, author: User, entry: Entry, peers: list[User]) -> None:
    for peer in peers:
        await notifications.notify_user(
            db,
            author,
            peer.id,
            notifications.ENTRY_SHARED,
            entry_id=entry.id,
            title=entry.title,
        )


@router.post("/", response_model=EntryWriteResult, status_code=status.HTTP_201_CREATED)
async def save_entry(
    payload: EntryCreate,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> EntryWriteResult:
    entry_date = payload.entry_date or date.today()
    peers = _resolve_peers(db, current_user, payload.shared_with) if payload.shared_with is not None else None

    entry = (
        db.query(Entry)
        .filter(Entry.author_id == current_user.id, Entry.entry_date == entry_date)
        .first()
    )
    created = entry is None
    if created:
        entry = Entry(author_id=current_user.id, entry_date=entry_date)
        db.add(entry)

    previous_ids = {user.id for user in entry.shared_users}
    entry.title = payload.title
    entry.keywords = payload.content.keywords
    entry.key_events = payload.content.key_events
    entry.summary = payload.content.summary
    if peers is not None:
        entry.shared_users = peers

    db.commit()
    db.refresh(entry)

    logger.info(
        "entry saved",
        extra={"user_id": current_user.id, "entry_id": entry.id, "was_created": created},
    )

    if peers:
        await _announce_shares(db, current_user, entry, [p for p in peers if p.id not in previous_ids])

    if not created:
        response.status_code = status.HTTP_200_OK
    return EntryWriteResult(
        message="Entry created" if created else "Entry updated",
        entry=EntryRead.model_validate(entry),
    )


@router.get("/", response_model=list[EntryRead])
def list_entries(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    response: Response,
) -> list[Entry]:
    response.headers["Cache-Control"] = "private, no-store"
    return (
        db.query(Entry)
        .filter(Entry.author_id == current_user.id)
        .order_by(Entry.entry_date.desc(), Entry.id.desc())
        .all()
    )


@router.get("/latest", response_model=EntryRead | None)
def get_latest_entry(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry | None:
    return (
        db.query(Entry)
        .filter(Entry.author_id == current_user.id)
        .order_by(Entry.entry_date.desc(), Entry.id.desc())
        .first()
    )


@router.get("/shared", response_model=list[EntryRead])
def list_shared_entries(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[Entry]:
    return (
        db.query(Entry)
        .join(Entry.shared_users)
        .filter(User.id == current_user.id)
        .order_by(Entry.entry_date.desc(), Entry.id.desc())
        .all()
    )


@router.get("/shared/{entry_id}", response_model=EntryRead)
def get_shared_entry(
    entry_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    entry = db.query(Entry).filter(Entry.id == entry_id).first()
    if not entry or not entry.is_shared_with(current_user.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry not found")
    return entry


@router.get("/{entry_id}", response_model=EntryRead)
def get_entry(
    entry_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    return _get_own_entry(db, entry_id, current_user)


@router.patch("/{entry_id}", response_model=EntryRead)
def update_entry(
    entry_id: int,
    payload: EntryUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    entry = _get_own_entry(db, entry_id, current_user)

    if payload.title is not None:
        entry.title = payload.title
    if payload.content is not None:
        entry.keywords = payload.content.keywords
        entry.key_events = payload.content.key_events
        entry.summary = payload.content.summary

    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> None:
    entry = _get_own_entry(db, entry_id, current_user)
    db.delete(entry)
    db.commit()
    logger.info("entry deleted", extra={"user_id": current_user.id, "entry_id": entry_id})
    return None


@router.put("/{entry_id}/shares", response_model=EntryRead)
async def replace_shares(
    entry_id: int,
    payload: EntryShares,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    entry = _get_own_entry(db, entry_id, current_user)
    peers = _resolve_peers(db, current_user, payload.usernames)

    previous_ids = {user.id for user in entry.shared_users}
    entry.shared_users = peers
    db.add(entry)
    db.commit()
    db.refresh(entry)

    await _announce_shares(db, current_user, entry, [p for p in peers if p.id not in previous_ids])
    return entry


@router.post("/{entry_id}/shares/{username}", response_model=EntryRead)
async def add_share(
    entry_id: int,
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    entry = _get_own_entry(db, entry_id, current_user)
    peer = _resolve_peer(db, current_user, username)

    if entry.is_shared_with(peer.id):
        return entry

    entry.shared_users.append(peer)
    db.add(entry)
    db.commit()
    db.refresh(entry)

    await _announce_shares(db, current_user, entry, [peer])
    return entry


@router.delete("/{entry_id}/shares/{username}", response_model=EntryRead)
def remove_share(
    entry_id: int,
    username: str,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Entry:
    entry = _get_own_entry(db, entry_id, current_user)
    peer = get_user_by_username(db, username)
    if not entry.is_shared_with(peer.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Entry is not shared with this user")

    entry.shared_users = [user for user in entry.shared_users if user.id != peer.id]
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


@router.get("/{entry_id}/messages", response_model=list[EntryMessageRead])
def list_messages(
    entry_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[EntryMessage]:
    entry = _get_readable_entry(db, entry_id, current_user)
    return entry.messages


@router.post("/{entry_id}/messages", response_model=EntryMessageRead, status_code=status.HTTP_201_CREATED)
def post_message(
    entry_id: int,
    payload: EntryMessageCreate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> EntryMessage:
    entry = _get_readable_entry(db, entry_id, current_user)
    message = EntryMessage(entry_id=entry.id, author_id=current_user.id, content=payload.content)
    db.add(message)
    db.commit()
    db.refresh(message)
    return message
