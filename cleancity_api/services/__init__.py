"""Service layer. Each service is built per request around the request's session."""
from fastapi import Depends
from sqlalchemy.orm import Session

from cleancity_api.database import get_db
from cleancity_api.services.auth_service import AuthService
from cleancity_api.services.occurrence_service import OccurrenceService
from cleancity_api.services.photo_service import PhotoService
from cleancity_api.services.share_service import ShareService
from cleancity_api.storage import FileStore, get_file_store


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_occurrence_service(
    db: Session = Depends(get_db), file_store: FileStore = Depends(get_file_store),
) -> OccurrenceService:
    return OccurrenceService(db, file_store)


def get_share_service(db: Session = Depends(get_db)) -> ShareService:
    return ShareService(db)


def get_photo_service(
    db: Session = Depends(get_db), file_store: FileStore = Depends(get_file_store),
) -> PhotoService:
    return PhotoService(db, file_store)
