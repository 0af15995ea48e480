from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


class ContactCreate(BaseModel):
    subject: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    body: str = Field(..., min_length=1, max_length=10000)


class ContactRead(BaseModel):
    id: int
    subject: str
    email: EmailStr
    body: str
    created_at: datetime

    class Config:
        from_attributes = True


class ContactSubmitted(BaseModel):
    message: str
    contact: ContactRead
