"""User service - identity and profile photo storage"""

import logging
import uuid
from typing import Optional

from fastapi import HTTPException, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import storage
from ...auth import Actor
from ...config import MAX_PHOTO_SIZE_BYTES
from ...models import User

logger = logging.getLogger(__name__)


def photo_url_for(user: User) -> Optional[str]:
    if not user.photo_key:
        return None
    return storage.generate_presigned_url(user.photo_key)


def serialize_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "userType": user.role,
        "photoUrl": photo_url_for(user),
        "createdAt": user.created_at,
    }


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def get_me(self, actor: Actor) -> dict:
        return serialize_user(actor.user)

    async def upload_profile_photo(self, actor: Actor, photo: UploadFile) -> dict:
        """Store a new photo, point the user at it and drop the previous object"""
        user = actor.user
        logger.info(f"📤 Uploading profile photo for user {user.id}")

        extension = storage.ALLOWED_IMAGE_TYPES.get(photo.content_type or "")
        if not extension:
            raise HTTPException(
                status_code=400,
                detail="Invalid file type. Only image files are allowed.",
            )

        contents = await photo.read()
        if not contents:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        if len(contents) > MAX_PHOTO_SIZE_BYTES:
            raise HTTPException(
                status_code=400,
                detail=f"File size exceeds {MAX_PHOTO_SIZE_BYTES // (1024 * 1024)}MB limit. "
                f"Your file is {len(contents) / (1024 * 1024):.2f}MB.",
            )

        key = f"profile-photos/{user.id}/{uuid.uuid4()}.{extension}"
        try:
            storage.put_object(key, contents, photo.content_type)
        except Exception as e:
            logger.error(f"❌ Profile photo upload failed for user {user.id}: {e}")
            raise HTTPException(status_code=500, detail="Upload failed") from e

        previous_key = user.photo_key
        user.photo_key = key
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        if previous_key:
            self._delete_stale_object(previous_key)

        return {"photoUrl": storage.generate_presigned_url(key)}

    def delete_profile_photo(self, actor: Actor) -> dict:
        user = actor.user
        if not user.photo_key:
            raise HTTPException(status_code=404, detail="No profile photo to delete")

        key = user.photo_key
        user.photo_key = None
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

        self._delete_stale_object(key)
        logger.info(f"🗑️ Removed profile photo for user {user.id}")
        return {"message": "Profile photo deleted successfully"}

    def _delete_stale_object(self, key: str) -> None:
        # Key is already unlinked from the user
        try:
            storage.delete_object(key)
        except Exception as e:
            logger.warning(f"⚠️ Could not delete object {key} from storage: {e}")
