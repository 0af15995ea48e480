import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from journal_api.db.base import Base


class FriendshipStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    BLOCKED = "blocked"


class Friendship(Base):
    __tablename__ = "friendships"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    requester_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    recipient_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    # requester/recipient sorted, so the pair is unique whichever side asked
    user_low_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    user_high_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    status: Mapped[FriendshipStatus] = mapped_column(
        Enum(
            FriendshipStatus,
            name="friendship_status",
            native_enum=False,
            length=16,
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        default=FriendshipStatus.PENDING,
        index=True,
    )
    rejection_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    block_reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    blocked_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    requester: Mapped["User"] = relationship("User", foreign_keys=[requester_id])
    recipient: Mapped["User"] = relationship("User", foreign_keys=[recipient_id])

    __table_args__ = (
        UniqueConstraint("requester_id", "recipient_id", name="uq_friendship_direction"),
        UniqueConstraint("user_low_id", "user_high_id", name="uq_friendship_pair"),
    )

    @validates("requester_id", "recipient_id")
    def _sync_pair(self, key: str, value: int) -> int:
        other = self.recipient_id if key == "requester_id" else self.requester_id
        if value is not None and other is not None:
            self.user_low_id, self.user_high_id = sorted((value, other))
        return value

    def other(self, user_id: int) -> "User":
        return self.recipient if self.requester_id == user_id else self.requester
