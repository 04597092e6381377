import logging
import uuid

from sqlalchemy.orm import Session

from app.config import settings
from app.errors import ConflictError
from app.models.user import User
from app.utils.clock import utcnow
from app.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def register(db: Session, name: str, email: str, password: str, avatar: str | None = None) -> str:
    email = email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise ConflictError("User already exists")

    user = User(
        id=str(uuid.uuid4()),
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        avatar=avatar or settings.default_avatar,
        created_at=utcnow(),
    )
    db.add(user)
    db.commit()
    logger.info("Registered user %s", user.id)
    return create_access_token(user.id)


def login(db: Session, email: str, password: str) -> str | None:
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if not user or not verify_password(user.password_hash, password):
        return None
    return create_access_token(user.id)
