import re

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.dependencies import require_user
from app.models.user import User
from app.schemas.user import LoginRequest, TokenResponse, UserCreate, UserResponse
from app.services import auth_service

router = APIRouter(prefix="/users", tags=["users"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@router.post("", response_model=TokenResponse)
async def register_user(req: UserCreate, db: Session = Depends(get_db)):
    if not req.name.strip():
        raise HTTPException(status_code=400, detail="Name is required")
    if not _EMAIL_RE.match(req.email.strip()):
        raise HTTPException(status_code=400, detail="Please include a valid email")
    if len(req.password) < settings.min_password_length:
        raise HTTPException(
            status_code=400,
            detail=f"Password must be at least {settings.min_password_length} characters",
        )
    token = auth_service.register(db, req.name, req.email, req.password, req.avatar)
    return TokenResponse(token=token)


auth_router = APIRouter(prefix="/auth", tags=["auth"])


@auth_router.post("", response_model=TokenResponse)
async def login(req: LoginRequest, db: Session = Depends(get_db)):
    token = auth_service.login(db, req.email, req.password)
    if token is None:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return TokenResponse(token=token)


@auth_router.get("", response_model=UserResponse)
async def current_user(user_id: str = Depends(require_user), db: Session = Depends(get_db)):
    user = db.query(User).filter(User.id == user_id).first()
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        avatar=user.avatar,
        created_at=user.created_at,
    )
