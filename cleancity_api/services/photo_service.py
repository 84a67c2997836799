"""Photo attachments: owner-only upload and delete, path resolution for downloads"""
import logging
import os
import secrets
import time
from typing import Optional

from sqlalchemy.orm import Session

from cleancity_api.config import settings
from cleancity_api.errors import ErrorKind, ServiceError
from cleancity_api.models import Occurrence, Photo
from cleancity_api.storage import FileStore

logger = logging.getLogger(__name__)


def make_stored_name(original_name: Optional[str]) -> str:
    """Unique on-store name that keeps the client's extension."""
    ext = os.path.splitext(original_name or "")[1].lower()
    return f"photo-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


class PhotoService:
    def __init__(self, db: Session, file_store: FileStore):
        self.db = db
        self.file_store = file_store

    def upload(
        self,
        occurrence_id: str,
        user_id: str,
        file_name: Optional[str],
        content_type: Optional[str],
        data: Optional[bytes],
    ) -> Photo:
        if not data:
            raise ServiceError(ErrorKind.INVALID_INPUT, "No file provided")
        if content_type not in settings.ALLOWED_MIME_TYPES:
            raise ServiceError(
                ErrorKind.INVALID_INPUT,
                "Invalid file type. Only JPEG, PNG and WebP are allowed.",
            )
        if len(data) > settings.MAX_FILE_SIZE:
            raise ServiceError(
                ErrorKind.INVALID_INPUT,
                f"File too large. Maximum size is {settings.MAX_FILE_SIZE} bytes",
            )

        # Shared users, even with ADMIN permission, cannot upload
        occurrence = self.db.get(Occurrence, occurrence_id)
        if not occurrence or occurrence.user_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")

        path = self.file_store.write(make_stored_name(file_name), data)
        photo = Photo(
            occurrence_id=occurrence_id,
            user_id=user_id,
            file_name=file_name or os.path.basename(path),
            file_path=path,
            file_size=len(data),
            mime_type=content_type,
        )
        self.db.add(photo)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            self.file_store.delete(path)
            raise
        self.db.refresh(photo)

        logger.info(f"Photo {photo.id} ({len(data)} bytes) stored at {path}")
        return photo

    def list_for_occurrence(self, occurrence_id: str) -> list[Photo]:
        return (
            self.db.query(Photo)
            .filter(Photo.occurrence_id == occurrence_id)
            .order_by(Photo.created_at.desc())
            .all()
        )

    def delete(self, photo_id: str, user_id: str):
        photo = self.db.get(Photo, photo_id)
        if not photo or photo.user_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")

        # Missing files are fine; the row is always removed
        self.file_store.delete(photo.file_path)
        self.db.delete(photo)
        self.db.commit()
        logger.info(f"Photo {photo_id} deleted by {user_id}")

    def resolve(self, photo_id: str) -> Photo:
        """Photo whose bytes are still present in the file store."""
        photo = self.db.get(Photo, photo_id)
        if not photo or not self.file_store.exists(photo.file_path):
            raise ServiceError(ErrorKind.NOT_FOUND, "Photo not found")
        return photo
