"""Occurrence sharing: grants, revocation and access checks.

A grant is unique per (occurrence, recipient); sharing the same pair again
updates the stored permission. Permission levels are recorded on the grant
but access checks do not distinguish between them: any grant gives access.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleancity_api.errors import ErrorKind, ServiceError
from cleancity_api.models import Occurrence, SharedOccurrence, SharePermission, User

logger = logging.getLogger(__name__)


class ShareService:
    def __init__(self, db: Session):
        self.db = db

    def _find_grant(self, occurrence_id: str, user_id: str):
        return (
            self.db.query(SharedOccurrence)
            .filter(
                SharedOccurrence.occurrence_id == occurrence_id,
                SharedOccurrence.shared_with_id == user_id,
            )
            .first()
        )

    def share(
        self, user_id: str, occurrence_id: str, recipient_email: str, permission: SharePermission,
    ) -> tuple[SharedOccurrence, bool]:
        """Create or update a grant. Returns (grant, created)."""
        occurrence = self.db.get(Occurrence, occurrence_id)
        if not occurrence or occurrence.user_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized: You can only share your own occurrences")

        recipient = self.db.query(User).filter(User.email == recipient_email).first()
        if not recipient:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found")

        if recipient.id == user_id:
            raise ServiceError(ErrorKind.INVALID_INPUT, "Cannot share with yourself")

        existing = self._find_grant(occurrence_id, recipient.id)
        if existing:
            existing.permission = permission
            self.db.commit()
            self.db.refresh(existing)
            logger.info(f"Share {existing.id} permission set to {permission.value}")
            return existing, False

        grant = SharedOccurrence(
            occurrence_id=occurrence_id,
            shared_by_id=user_id,
            shared_with_id=recipient.id,
            permission=permission,
        )
        self.db.add(grant)
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent share inserted the pair first; fall back to updating it
            self.db.rollback()
            existing = self._find_grant(occurrence_id, recipient.id)
            if existing is None:
                raise
            existing.permission = permission
            self.db.commit()
            self.db.refresh(existing)
            return existing, False

        self.db.refresh(grant)
        logger.info(f"Occurrence {occurrence_id} shared with {recipient.id} ({permission.value})")
        return grant, True

    def shared_with_me(self, user_id: str) -> list[SharedOccurrence]:
        return (
            self.db.query(SharedOccurrence)
            .filter(SharedOccurrence.shared_with_id == user_id)
            .order_by(SharedOccurrence.created_at.desc())
            .all()
        )

    def shared_by_me(self, user_id: str) -> list[SharedOccurrence]:
        return (
            self.db.query(SharedOccurrence)
            .filter(SharedOccurrence.shared_by_id == user_id)
            .order_by(SharedOccurrence.created_at.desc())
            .all()
        )

    def revoke(self, share_id: str, user_id: str):
        grant = self.db.get(SharedOccurrence, share_id)
        if not grant:
            raise ServiceError(ErrorKind.NOT_FOUND, "Share not found")

        # Only the sharer may revoke; recipients cannot remove themselves
        if grant.shared_by_id != user_id:
            raise ServiceError(ErrorKind.FORBIDDEN, "Unauthorized")

        self.db.delete(grant)
        self.db.commit()
        logger.info(f"Share {share_id} revoked by {user_id}")

    def can_access(self, occurrence_id: str, user_id: str) -> bool:
        occurrence = self.db.get(Occurrence, occurrence_id)
        if not occurrence:
            return False
        if occurrence.user_id == user_id:
            return True
        return self._find_grant(occurrence_id, user_id) is not None
