from datetime import datetime, timezone
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from resume_tailor.database import get_db
from resume_tailor.models.user import User, UserRole
from resume_tailor.routers.auth_deps import get_current_user, get_optional_user
from resume_tailor.schemas.auth import LoginRequest, RegisterRequest, Token, UserResponse
from resume_tailor.services import auth as auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["auth"]
)


def _issue_token(user: User) -> Token:
    access_token = auth_service.create_access_token(data={
        "sub": user.email,
        "role": user.role.value if hasattr(user.role, "value") else user.role,
        "user_id": user.id,
    })
    return Token(access_token=access_token, token_type="bearer", user=UserResponse.model_validate(user))


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    email = data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        email=email,
        full_name=data.full_name,
        hashed_password=auth_service.get_password_hash(data.password),
        role=UserRole.USER,
        last_signed_in=datetime.now(timezone.utc),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return _issue_token(user)


@router.post("/login", response_model=Token)
def login(login_data: LoginRequest, db: Session = Depends(get_db)):
    # JSON body rather than form-data for frontend compatibility
    user = db.query(User).filter(User.email == login_data.email.lower()).first()
    if not user or not auth_service.verify_password(login_data.password, user.hashed_password):
        logger.warning("Failed login attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=400, detail="User is inactive")

    user.last_signed_in = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return _issue_token(user)


@router.get("/me", response_model=Optional[UserResponse])
def get_me(current_user: Optional[User] = Depends(get_optional_user)):
    """Current user, or null for anonymous callers."""
    return current_user


@router.post("/logout")
def logout(current_user: User = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy
    logger.info(f"User {current_user.id} logged out")
    return {"success": True}
