"""Occurrence lifecycle with owner-only mutation"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from cleancity_api.errors import ErrorKind, ServiceError
from cleancity_api.models import Occurrence, OccurrenceStatus
from cleancity_api.storage import FileStore

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "title", "description", "latitude", "longitude", "address",
    "accelerometer_x", "accelerometer_y", "accelerometer_z",
    "temperature", "humidity", "pressure",
)


class OccurrenceService:
    def __init__(self, db: Session, file_store: FileStore):
        self.db = db
        self.file_store = file_store

    def _get_owned(self, occurrence_id: str, user_id: str) -> Occurrence:
        """Only the literal owner may mutate; share grants never count."""
        occurrence = self.db.get(Occurrence, occurrence_id)
        if not occurrence or occurrence.user_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")
        return occurrence

    def create(self, user_id: str, fields: dict) -> Occurrence:
        occurrence = Occurrence(
            user_id=user_id,
            status=OccurrenceStatus.PENDING,
            **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS},
        )
        self.db.add(occurrence)
        self.db.commit()
        self.db.refresh(occurrence)
        logger.info(f"Occurrence {occurrence.id} created by {user_id}")
        return occurrence

    def get_by_id(self, occurrence_id: str) -> Occurrence:
        occurrence = self.db.get(Occurrence, occurrence_id)
        if not occurrence:
            raise ServiceError(ErrorKind.NOT_FOUND, "Occurrence not found")
        return occurrence

    def list_all(self, page: int = 1, limit: int = 50) -> tuple[list[Occurrence], int]:
        query = self.db.query(Occurrence)
        total = query.count()
        occurrences = (
            query.order_by(Occurrence.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return occurrences, total

    def list_for_user(self, user_id: str, page: int = 1, limit: int = 10) -> tuple[list[Occurrence], int]:
        query = self.db.query(Occurrence).filter(Occurrence.user_id == user_id)
        total = query.count()
        occurrences = (
            query.order_by(Occurrence.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return occurrences, total

    def list_by_bounds(self, min_lat: float, max_lat: float, min_lon: float, max_lon: float) -> list[Occurrence]:
        return (
            self.db.query(Occurrence)
            .filter(
                Occurrence.latitude >= min_lat,
                Occurrence.latitude <= max_lat,
                Occurrence.longitude >= min_lon,
                Occurrence.longitude <= max_lon,
            )
            .all()
        )

    def update(self, occurrence_id: str, user_id: str, fields: dict) -> Occurrence:
        occurrence = self._get_owned(occurrence_id, user_id)
        for key, value in fields.items():
            if key in EDITABLE_FIELDS:
                setattr(occurrence, key, value)
        self.db.commit()
        self.db.refresh(occurrence)
        logger.info(f"Occurrence {occurrence_id} updated by {user_id}")
        return occurrence

    def update_status(self, occurrence_id: str, user_id: str, status: OccurrenceStatus) -> Occurrence:
        occurrence = self._get_owned(occurrence_id, user_id)
        occurrence.status = status
        self.db.commit()
        self.db.refresh(occurrence)
        logger.info(f"Occurrence {occurrence_id} marked {status.value}")
        return occurrence

    def delete(self, occurrence_id: str, user_id: str):
        occurrence = self._get_owned(occurrence_id, user_id)
        file_paths = [photo.file_path for photo in occurrence.photos]

        # Photo and share rows go with the occurrence (ORM cascade)
        self.db.delete(occurrence)
        self.db.commit()

        for path in file_paths:
            try:
                self.file_store.delete(path)
            except Exception as e:
                logger.error(f"Could not remove photo file {path} of occurrence {occurrence_id}: {e}")

        logger.info(f"Occurrence {occurrence_id} deleted with {len(file_paths)} photo(s)")

    def stats(self) -> dict:
        rows = (
            self.db.query(Occurrence.status, func.count().label("cnt"))
            .group_by(Occurrence.status)
            .all()
        )
        stats = {"pending": 0, "verified": 0, "resolved": 0}
        for row in rows:
            stats[row.status.value.lower()] += row.cnt
        stats["total"] = sum(stats.values())
        return stats
