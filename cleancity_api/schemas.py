from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from cleancity_api.models import OccurrenceStatus, SharePermission


class CamelModel(BaseModel):
    """Snake-case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Auth ---
class SignupRequest(CamelModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    password: str


class LoginRequest(CamelModel):
    email: str
    password: str


class UpdateProfileRequest(CamelModel):
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    avatar: Optional[str] = None


class ChangePasswordRequest(CamelModel):
    old_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class UserPublic(CamelModel):
    id: str
    email: str
    full_name: str


class UserProfile(CamelModel):
    id: str
    email: str
    full_name: str
    avatar: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class AuthResult(CamelModel):
    user: UserProfile
    token: str


# --- Occurrences ---
class OccurrenceCreate(CamelModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: Optional[str] = None
    accelerometer_x: Optional[float] = None
    accelerometer_y: Optional[float] = None
    accelerometer_z: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None


class OccurrenceUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    address: Optional[str] = None
    accelerometer_x: Optional[float] = None
    accelerometer_y: Optional[float] = None
    accelerometer_z: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None

    @field_validator("title", "description", "latitude", "longitude")
    @classmethod
    def required_fields_not_null(cls, v):
        # Omitting a field leaves it unchanged; an explicit null is rejected
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class StatusUpdate(CamelModel):
    status: OccurrenceStatus


class PhotoOut(CamelModel):
    id: str
    occurrence_id: str
    user_id: str
    file_name: str
    file_path: str
    file_size: int
    mime_type: str
    created_at: datetime


class OccurrenceOut(CamelModel):
    id: str
    user_id: str
    title: str
    description: str
    latitude: float
    longitude: float
    address: Optional[str] = None
    accelerometer_x: Optional[float] = None
    accelerometer_y: Optional[float] = None
    accelerometer_z: Optional[float] = None
    temperature: Optional[float] = None
    humidity: Optional[float] = None
    pressure: Optional[float] = None
    status: OccurrenceStatus
    created_at: datetime
    updated_at: datetime
    photos: list[PhotoOut] = []


class OccurrenceWithOwner(OccurrenceOut):
    user: Optional[UserPublic] = None


class ShareRecipientOut(CamelModel):
    id: str
    shared_with_id: str
    permission: SharePermission
    created_at: datetime
    shared_with: UserPublic


class OccurrenceDetail(OccurrenceOut):
    shared_with: list[ShareRecipientOut] = Field(
        default=[], validation_alias="shares", serialization_alias="sharedWith",
    )


class OccurrenceStats(CamelModel):
    total: int
    pending: int
    verified: int
    resolved: int


# --- Shares ---
class ShareRequest(CamelModel):
    occurrence_id: str = Field(min_length=1)
    user_email: str = Field(min_length=1)
    permission: SharePermission


class ShareOut(CamelModel):
    id: str
    occurrence_id: str
    shared_by_id: str
    shared_with_id: str
    permission: SharePermission
    created_at: datetime


class SharedWithMeOut(ShareOut):
    occurrence: OccurrenceWithOwner
    shared_by: UserPublic


class SharedByMeOut(ShareOut):
    occurrence: OccurrenceOut
    shared_with: UserPublic


class AccessOut(CamelModel):
    occurrence_id: str
    can_access: bool
