"""Authentication and profile routes."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.common import DataResponse
from app.schemas.user import (
    AuthResponse, LoginRequest, PasswordUpdate, ProfileUpdate, RegisterRequest, UserOut,
)
from app.security import Identity, get_admin_identity, get_current_identity
from app.services import auth_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account and return an access token."""
    user = auth_service.register_user(db, **payload.model_dump())
    return {"token": auth_service.issue_token(user), "data": user}


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.email, payload.password)
    return {"token": auth_service.issue_token(user), "data": user}


@router.get("/me", response_model=DataResponse[UserOut])
def get_me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)):
    return {"data": auth_service.get_user(db, identity.user_id)}


@router.put("/profile", response_model=DataResponse[UserOut])
def update_profile(
    payload: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    user = auth_service.update_profile(db, identity, payload.model_dump(exclude_unset=True))
    return {"data": user}


@router.put("/password", response_model=AuthResponse)
def update_password(
    payload: PasswordUpdate,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Change password; a fresh token is returned."""
    user = auth_service.change_password(db, identity, payload.current_password, payload.new_password)
    return {"token": auth_service.issue_token(user), "data": user}


@router.put("/promote/{user_id}", response_model=DataResponse[UserOut])
def promote_to_admin(
    user_id: str,
    identity: Identity = Depends(get_admin_identity),
    db: Session = Depends(get_db),
):
    """Grant the admin role (admin only)."""
    user = auth_service.promote_to_admin(db, user_id)
    return {"data": user, "message": f"{user.name} is now an admin"}
