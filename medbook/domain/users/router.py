"""User router - identity and profile photo endpoints"""

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from ...auth import Actor, get_current_actor
from ...database import get_db
from ...schemas import MessageResponse, UserResponse
from .service import UserService

router = APIRouter(prefix="/users", tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


@router.get("/me", response_model=UserResponse)
async def get_me(
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return service.get_me(actor)


@router.post("/profile-photo")
async def upload_profile_photo(
    photo: UploadFile = File(...),
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    """Upload a profile photo to R2 (private) and return a presigned URL"""
    return await service.upload_profile_photo(actor, photo)


@router.delete("/profile-photo", response_model=MessageResponse)
async def delete_profile_photo(
    actor: Actor = Depends(get_current_actor),
    service: UserService = Depends(get_user_service),
):
    return service.delete_profile_photo(actor)
