from journal_api.models.user import User
from journal_api.models.entry import Entry, EntryMessage, entry_shares
from journal_api.models.friendship import Friendship, FriendshipStatus
from journal_api.models.contact import Contact

__all__ = ["User", "Entry", "EntryMessage", "entry_shares", "Friendship", "FriendshipStatus", "Contact"]
