# app/routes/auth.py
import logging
from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import ConflictAlreadyExists, Unauthorized, ValidationFailed
from app.services.deps import get_db, get_current_user
from app.services.memberships import active_membership
from app.models.user import User
from app.schemas.auth import RegisterRequest, LoginRequest, LoginResponse, UserInfo
from app.core.security import (
    verify_password,
    hash_password,
    create_jwt_token,
    validate_password_strength
)

logger = logging.getLogger("openpolitics.auth")
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def build_user_info(db: Session, user: User) -> UserInfo:
    """Helper to build UserInfo from User model."""
    membership = active_membership(db, user.id)
    return UserInfo(
        userId=user.id,
        username=user.username,
        displayName=user.display_name,
        pincode=user.pincode,
        partyId=membership.party_id if membership else None,
    )


def build_jwt_for_user(user: User) -> str:
    """Helper to build JWT token for user."""
    return create_jwt_token({
        "sub": str(user.id),
        "username": user.username,
    })


@router.post("/register", response_model=LoginResponse, status_code=201)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    """
    Create an account and return a JWT for it.
    """
    is_valid, error_msg = validate_password_strength(payload.password)
    if not is_valid:
        raise ValidationFailed(error_msg)

    if db.query(User.id).filter(User.username == payload.username).first():
        raise ConflictAlreadyExists("Username already taken")

    user = User(
        username=payload.username,
        display_name=payload.display_name,
        pincode=payload.pincode,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictAlreadyExists("Username already taken")
    db.refresh(user)
    logger.info(f"Registered user {user.id} ({user.username})")

    return LoginResponse(
        access_token=build_jwt_for_user(user),
        token_type="bearer",
        user=build_user_info(db, user)
    )


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    """
    Standard username/password login.
    Returns JWT on success.
    """
    user = db.query(User).filter(User.username == payload.username).first()

    if not user or not verify_password(payload.password, user.hashed_password):
        logger.info(f"Failed login for {payload.username}")
        raise Unauthorized("Invalid credentials")

    return LoginResponse(
        access_token=build_jwt_for_user(user),
        token_type="bearer",
        user=build_user_info(db, user)
    )


@router.get("/me", response_model=UserInfo)
def me(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return build_user_info(db, user)
