"""Account lifecycle: signup, login, profile and password changes"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cleancity_api.auth import (
    MIN_PASSWORD_LENGTH, create_access_token, hash_password, verify_password,
)
from cleancity_api.errors import ErrorKind, ServiceError
from cleancity_api.models import User

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
PASSWORD_TOO_SHORT = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def _get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def signup(self, full_name: str, email: str, password: str) -> tuple[User, str]:
        if self._get_by_email(email):
            raise ServiceError(ErrorKind.CONFLICT, "User already exists with this email")

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ServiceError(ErrorKind.INVALID_INPUT, PASSWORD_TOO_SHORT)

        user = User(
            email=email,
            full_name=full_name,
            password_hash=hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent signup for the same email
            self.db.rollback()
            raise ServiceError(ErrorKind.CONFLICT, "User already exists with this email")
        self.db.refresh(user)

        logger.info(f"New user signed up: {user.id}")
        return user, create_access_token(user.id, user.email)

    def login(self, email: str, password: str) -> tuple[User, str]:
        user = self._get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise ServiceError(ErrorKind.UNAUTHENTICATED, INVALID_CREDENTIALS)

        return user, create_access_token(user.id, user.email)

    def get_profile(self, user_id: str) -> User:
        user = self.db.get(User, user_id)
        if not user:
            raise ServiceError(ErrorKind.NOT_FOUND, "User not found")
        return user

    def update_profile(
        self, user_id: str, full_name: Optional[str] = None, avatar: Optional[str] = None,
    ) -> User:
        user = self.get_profile(user_id)
        if full_name is not None:
            user.full_name = full_name
        if avatar is not None:
            user.avatar = avatar
        self.db.commit()
        self.db.refresh(user)
        return user

    def change_password(self, user_id: str, old_password: str, new_password: str):
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise ServiceError(ErrorKind.INVALID_INPUT, PASSWORD_TOO_SHORT)

        user = self.get_profile(user_id)
        if not verify_password(old_password, user.password_hash):
            raise ServiceError(ErrorKind.UNAUTHENTICATED, "Invalid password")

        user.password_hash = hash_password(new_password)
        self.db.commit()
        logger.info(f"Password changed for user {user_id}")
