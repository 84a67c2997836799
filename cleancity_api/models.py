"""SQLAlchemy models for the CleanCity database"""
import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    Column, String, DateTime, Float, Integer, Text, ForeignKey,
    Enum as SAEnum, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from cleancity_api.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class OccurrenceStatus(str, enum.Enum):
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    RESOLVED = "RESOLVED"


class SharePermission(str, enum.Enum):
    VIEW = "VIEW"
    EDIT = "EDIT"
    ADMIN = "ADMIN"


class User(Base):
    """Registered app users"""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    password_hash = Column(String(255), nullable=False)
    avatar = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    occurrences = relationship("Occurrence", back_populates="user")


class Occurrence(Base):
    """Geolocated citizen report with optional sensor readings"""
    __tablename__ = "occurrences"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    # Location
    latitude = Column(Float, nullable=False, index=True)
    longitude = Column(Float, nullable=False, index=True)
    address = Column(String(500), nullable=True)

    # Device sensors
    accelerometer_x = Column(Float, nullable=True)
    accelerometer_y = Column(Float, nullable=True)
    accelerometer_z = Column(Float, nullable=True)
    temperature = Column(Float, nullable=True)
    humidity = Column(Float, nullable=True)
    pressure = Column(Float, nullable=True)

    status = Column(SAEnum(OccurrenceStatus), nullable=False, default=OccurrenceStatus.PENDING, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="occurrences")
    photos = relationship(
        "Photo", back_populates="occurrence", cascade="all, delete-orphan",
        order_by="Photo.created_at.desc()",
    )
    shares = relationship("SharedOccurrence", back_populates="occurrence", cascade="all, delete-orphan")


class Photo(Base):
    """Image attached to an occurrence; bytes live in the file store"""
    __tablename__ = "photos"

    id = Column(String(36), primary_key=True, default=_new_id)
    occurrence_id = Column(String(36), ForeignKey("occurrences.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False)
    file_name = Column(String(255), nullable=False)  # original client file name
    file_path = Column(String(500), nullable=False)  # file store path / object name
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    occurrence = relationship("Occurrence", back_populates="photos")


class SharedOccurrence(Base):
    """Access grant from an occurrence owner to another user"""
    __tablename__ = "shared_occurrences"

    id = Column(String(36), primary_key=True, default=_new_id)
    occurrence_id = Column(String(36), ForeignKey("occurrences.id", ondelete="CASCADE"), nullable=False)
    shared_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    shared_with_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    permission = Column(SAEnum(SharePermission), nullable=False, default=SharePermission.VIEW)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    occurrence = relationship("Occurrence", back_populates="shares")
    shared_by = relationship("User", foreign_keys=[shared_by_id])
    shared_with = relationship("User", foreign_keys=[shared_with_id])

    __table_args__ = (
        UniqueConstraint("occurrence_id", "shared_with_id", name="uq_occurrence_shared_with"),
    )
