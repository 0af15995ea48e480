from datetime import date, datetime

from pydantic import BaseModel, Field


class EntryContent(BaseModel):
    keywords: str = Field(min_length=1)
    key_events: str = Field(min_length=1)
    summary: str = Field(min_length=1)


class EntryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: EntryContent
    entry_date: date | None = None
    shared_with: list[str] | None = None


class EntryUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    content: EntryContent | None = None


class EntryRead(BaseModel):
    id: int
    title: str
    content: EntryContent
    entry_date: date
    author_username: str
    shared_with: list[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EntryWriteResult(BaseModel):
    message: str
    entry: EntryRead


class EntryShares(BaseModel):
    usernames: list[str]


class EntryMessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=4000)


class EntryMessageRead(BaseModel):
    id: int
    entry_id: int
    author_username: str
    content: str
    created_at: datetime

    class Config:
        from_attributes = True
