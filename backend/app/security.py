"""Authentication helpers for FastAPI endpoints.

Passwords are hashed with Argon2id; access tokens are HS256 JWTs carrying the
user id in ``sub``. The role is always re-read from the users table so that a
promotion or demotion applies to tokens that were already issued.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from argon2 import PasswordHasher
from argon2 import exceptions as argon_exc
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.errors import AuthenticationError, AuthorizationError
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

PASSWORD_HASHER = PasswordHasher()
ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """The resolved caller handed to the service layer."""

    user_id: str
    role: UserRole = UserRole.user

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin


def hash_password(password: str) -> str:
    return PASSWORD_HASHER.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return PASSWORD_HASHER.verify(password_hash, password)
    except (argon_exc.VerifyMismatchError, argon_exc.InvalidHashError):
        return False


def create_access_token(user_id: str, role: UserRole) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "role": role.value,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the user id in a valid token, or raise AuthenticationError."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected access token: %s", exc)
        raise AuthenticationError("Invalid or expired token")
    return str(payload["sub"])


_bearer_scheme = HTTPBearer(auto_error=False)


def _resolve_identity(db: Session, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[Identity]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    user_id = decode_access_token(credentials.credentials)
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise AuthenticationError("User no longer exists")
    return Identity(user_id=user.user_id, role=user.role)


def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Optional[Identity]:
    """Anonymous callers resolve to None; a bad token is still rejected."""
    return _resolve_identity(db, credentials)


def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> Identity:
    identity = _resolve_identity(db, credentials)
    if identity is None:
        raise AuthenticationError()
    return identity


def get_admin_identity(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise AuthorizationError("Admin role required")
    return identity
