from typing import Annotated
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import or_
from sqlalchemy.orm import Session

from journal_api.api.deps import get_current_user
from journal_api.core.config import settings
from journal_api.core.security import create_access_token, hash_password, verify_password
from journal_api.db.session import get_db
from journal_api.models import User
from journal_api.schemas.user import AuthResponse, UserCreate, UserRead


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _auth_response(user: User, message: str) -> AuthResponse:
    access_token = create_access_token(str(user.id), username=user.username)
    return AuthResponse(
        message=message,
        access_token=access_token,
        user=UserRead.model_validate(user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register_user(payload: UserCreate, db: Annotated[Session, Depends(get_db)]) -> AuthResponse:
    if payload.password != payload.confirm_password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Passwords do not match")

    if len(payload.password) < settings.password_min_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {settings.password_min_length} characters long",
        )

    if db.query(User).filter(User.username == payload.username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")

    if db.query(User).filter(User.email == payload.email).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

    user = User(
        username=payload.username,
        email=payload.email,
        hashed_password=hash_password(payload.password),
        birth_date=payload.birth_date,
        motto=payload.motto,
        profile_image=payload.profile_image,
    )
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info("user registered", extra={"user_id": user.id})
    return _auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: Annotated[Session, Depends(get_db)],
) -> AuthResponse:
    identifier = form_data.username.strip()
    user = db.query(User).filter(or_(User.username == identifier, User.email == identifier)).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not verify_password(form_data.password, user.hashed_password):
        logger.warning("failed login", extra={"user_id": user.id})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password")

    return _auth_response(user, "Login successful")


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: Annotated[User, Depends(get_current_user)]) -> User:
    return current_user
