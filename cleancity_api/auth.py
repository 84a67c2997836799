"""Password hashing, JWT issuance and the request authorization gates"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from cleancity_api.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

MIN_PASSWORD_LENGTH = 6


@dataclass
class Identity:
    """Claims carried by a verified session token."""
    user_id: str
    email: str
    issued_at: datetime
    expires_at: datetime


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRATION_HOURS),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[Identity]:
    """Return the token's identity, or None for any malformed, forged or expired token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        user_id = payload.get("userId") or payload.get("sub")
        email = payload.get("email")
        if not user_id or not email:
            return None
        return Identity(
            user_id=str(user_id),
            email=str(email),
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (JWTError, KeyError, ValueError, TypeError):
        return None


def get_optional_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Identity]:
    """Attach the caller's identity when a valid bearer token is present.

    Never rejects a request: absence, an invalid token or a fault while
    verifying all leave the request anonymous.
    """
    identity = None
    try:
        if credentials is not None:
            identity = decode_access_token(credentials.credentials)
    except Exception as e:
        logger.warning(f"Optional auth degraded to anonymous: {e}")
        identity = None
    request.state.identity = identity
    return identity


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization token",
        )

    identity = decode_access_token(credentials.credentials)
    if identity is None:
        logger.warning(f"Rejected invalid token on {request.method} {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    request.state.identity = identity
    return identity
