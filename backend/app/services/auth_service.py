"""Account registration, login and profile management."""
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.models.user import User, UserRole
from app.security import Identity, create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def register_user(db: Session, name: str, email: str, password: str, college=None, phone=None) -> User:
    """Create a regular user account; admin rights are only granted by promotion."""
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User already exists with this email")

    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=UserRole.user,
        college=college,
        phone=phone,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("User already exists with this email")
    db.refresh(user)
    logger.info("Registered user %s (%s)", user.user_id, email)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(user.password_hash, password):
        logger.info("Failed login for %s", email)
        raise AuthenticationError("Invalid credentials")
    logger.info("User %s logged in", user.user_id)
    return user


def issue_token(user: User) -> str:
    return create_access_token(user.user_id, user.role)


def get_user(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFoundError("User not found")
    return user


def update_profile(db: Session, identity: Identity, changes: dict[str, Any]) -> User:
    user = get_user(db, identity.user_id)
    if "name" in changes and not (changes["name"] or "").strip():
        raise ValidationError("Name is required")
    for field, value in changes.items():
        setattr(user, field, value.strip() if isinstance(value, str) else value)
    db.commit()
    db.refresh(user)
    logger.info("Updated profile of user %s", user.user_id)
    return user


def change_password(db: Session, identity: Identity, current_password: str, new_password: str) -> User:
    user = get_user(db, identity.user_id)
    if not verify_password(user.password_hash, current_password):
        raise AuthenticationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    db.commit()
    db.refresh(user)
    logger.info("User %s changed password", user.user_id)
    return user


def promote_to_admin(db: Session, user_id: str) -> User:
    user = get_user(db, user_id)
    if user.role != UserRole.admin:
        user.role = UserRole.admin
        db.commit()
        db.refresh(user)
        logger.info("Promoted user %s to admin", user_id)
    return user
