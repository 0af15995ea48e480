from sqlalchemy import or_
from sqlalchemy.orm import Session

from journal_api.models import Entry, Friendship, FriendshipStatus, User


def find_between(db: Session, user_id: int, other_id: int) -> Friendship | None:
    """Return the single friendship row linking two users, whichever side requested it."""
    low_id, high_id = sorted((user_id, other_id))
    return (
        db.query(Friendship)
        .filter(Friendship.user_low_id == low_id, Friendship.user_high_id == high_id)
        .first()
    )


def are_friends(db: Session, user_id: int, other_id: int) -> bool:
    friendship = find_between(db, user_id, other_id)
    return friendship is not None and friendship.status == FriendshipStatus.ACCEPTED


def list_friends(db: Session, user_id: int) -> list[User]:
    friendships = (
        db.query(Friendship)
        .filter(
            or_(Friendship.requester_id == user_id, Friendship.recipient_id == user_id),
            Friendship.status == FriendshipStatus.ACCEPTED,
        )
        .all()
    )
    friends = [friendship.other(user_id) for friendship in friendships]
    return sorted(friends, key=lambda user: user.username)


def withdraw_shares(db: Session, user_id: int, other_id: int) -> int:
    """Unshare every entry either user shared with the other. Caller commits."""
    pair = {user_id, other_id}
    entries = db.query(Entry).filter(Entry.author_id.in_(list(pair))).all()
    removed = 0
    for entry in entries:
        kept = [user for user in entry.shared_users if user.id not in pair]
        removed += len(entry.shared_users) - len(kept)
        entry.shared_users = kept
    return removed
