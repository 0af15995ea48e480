from datetime import datetime

from pydantic import BaseModel, Field

from journal_api.models.friendship import FriendshipStatus
from journal_api.schemas.user import UserSummary


class FriendRequestCreate(BaseModel):
    username: str


class FriendRequestReject(BaseModel):
    reason: str | None = Field(None, max_length=255)


class BlockCreate(BaseModel):
    username: str
    reason: str | None = Field(None, max_length=255)


class NotificationSettings(BaseModel):
    enabled: bool


class FriendshipRead(BaseModel):
    id: int
    requester: UserSummary
    recipient: UserSummary
    status: FriendshipStatus
    rejection_reason: str | None
    block_reason: str | None
    notifications_enabled: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
