from typing import Annotated
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from journal_api.api.deps import get_current_user, get_user_by_username
from journal_api.core.config import settings
from journal_api.db.session import get_db
from journal_api.models import User
from journal_api.schemas.user import ProfileImageRead, UserRead, UserSummary, UserUpdate
from journal_api.services.images import (
    InvalidImageError,
    is_allowed_upload,
    profile_image_path,
    save_as_webp,
)


router = APIRouter(prefix="/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=list[UserSummary])
def list_users(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    q: Annotated[str | None, Query(max_length=64)] = None,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> list[User]:
    query = db.query(User)
    if q:
        query = query.filter(User.username.istartswith(q, autoescape=True))
    return query.order_by(User.username).limit(limit).all()


@router.get("/{username}", response_model=UserRead)
def get_user(username: str, db: Annotated[Session, Depends(get_db)]) -> User:
    return get_user_by_username(db, username)


@router.patch("/me", response_model=UserRead)
def update_current_user(
    payload: UserUpdate,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    data = payload.model_dump(exclude_unset=True, exclude_none=True)

    username = data.get("username")
    if username and username != current_user.username:
        if db.query(User).filter(User.username == username).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists")

    email = data.get("email")
    if email and email != current_user.email:
        if db.query(User).filter(User.email == email).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already in use")

    for key, value in data.items():
        setattr(current_user, key, value)

    db.add(current_user)
    db.commit()
    db.refresh(current_user)

    logger.info("profile updated", extra={"user_id": current_user.id, "fields": sorted(data)})
    return current_user


@router.put("/me/profile-image", response_model=ProfileImageRead)
async def upload_profile_image(
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    profile_image: UploadFile = File(..., description="JPEG or PNG image, converted to WebP"),
) -> ProfileImageRead:
    if not is_allowed_upload(profile_image.filename, profile_image.content_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File type not allowed")

    data = await profile_image.read(settings.profile_image_max_bytes + 1)
    if len(data) > settings.profile_image_max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Profile image is too large",
        )

    destination = profile_image_path(settings.upload_dir, current_user.id)
    try:
        save_as_webp(
            data,
            destination,
            settings.profile_image_quality,
            settings.profile_image_max_pixels,
        )
    except InvalidImageError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    current_user.profile_image = f"uploads/{destination.name}"
    db.add(current_user)
    db.commit()

    logger.info("profile image updated", extra={"user_id": current_user.id, "bytes": len(data)})
    return ProfileImageRead(message="Profile image updated", profile_image=current_user.profile_image)


@router.get("/{user_id}/profile-image", response_class=FileResponse)
def get_profile_image(user_id: int, db: Annotated[Session, Depends(get_db)]) -> FileResponse:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    path = profile_image_path(settings.upload_dir, user.id)
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Image not found")

    return FileResponse(path, media_type="image/webp")
