from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field


USERNAME_PATTERN = r"^[A-Za-z0-9_.-]+$"


class UserBase(BaseModel):
    username: str
    email: EmailStr
    birth_date: date
    motto: str = ""


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(min_length=1)
    confirm_password: str = Field(min_length=1)
    birth_date: date
    motto: str = Field("", max_length=255)
    profile_image: str = Field("", max_length=512)


class UserUpdate(BaseModel):
    username: str | None = Field(None, min_length=3, max_length=64, pattern=USERNAME_PATTERN)
    email: EmailStr | None = None
    birth_date: date | None = None
    motto: str | None = Field(None, max_length=255)


class UserRead(UserBase):
    id: int
    profile_image: str
    created_at: datetime

    class Config:
        from_attributes = True


class UserSummary(BaseModel):
    id: int
    username: str
    email: EmailStr
    profile_image: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class ProfileImageRead(BaseModel):
    message: str
    profile_image: str
