from datetime import date, datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Table, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from journal_api.db.base import Base


entry_shares = Table(
    "entry_shares",
    Base.metadata,
    Column("entry_id", ForeignKey("entries.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Entry(Base):
    __tablename__ = "entries"
    __table_args__ = (UniqueConstraint("author_id", "entry_date", name="uq_entry_author_date"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    title: Mapped[str] = mapped_column(String(255))
    keywords: Mapped[str] = mapped_column(Text)
    key_events: Mapped[str] = mapped_column(Text)
    summary: Mapped[str] = mapped_column(Text)
    entry_date: Mapped[date] = mapped_column(index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    author: Mapped["User"] = relationship(back_populates="entries")
    shared_users: Mapped[list["User"]] = relationship(secondary=entry_shares, order_by="User.username")
    messages: Mapped[list["EntryMessage"]] = relationship(
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="EntryMessage.id",
    )

    @property
    def content(self) -> dict[str, str]:
        return {
            "keywords": self.keywords,
            "key_events": self.key_events,
            "summary": self.summary,
        }

    @property
    def author_username(self) -> str:
        return self.author.username

    @property
    def shared_with(self) -> list[str]:
        return [user.username for user in self.shared_users]

    def is_shared_with(self, user_id: int) -> bool:
        return any(user.id == user_id for user in self.shared_users)


class EntryMessage(Base):
    __tablename__ = "entry_messages"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    entry_id: Mapped[int] = mapped_column(ForeignKey("entries.id", ondelete="CASCADE"), index=True)
    author_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    content: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    entry: Mapped["Entry"] = relationship(back_populates="messages")
    author: Mapped["User"] = relationship()

    @property
    def author_username(self) -> str:
        return self.author.username
