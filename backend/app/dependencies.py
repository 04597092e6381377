from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.utils.security import decode_access_token


async def require_user(
    authorization: str | None = Header(None),
    db: Session = Depends(get_db),
) -> str:
    """Resolve the bearer token to the id of an existing user."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="No token, authorization denied")
    user_id = decode_access_token(authorization[7:])
    if user_id is None:
        raise HTTPException(status_code=401, detail="Token is not valid")
    if not db.query(User.id).filter(User.id == user_id).first():
        raise HTTPException(status_code=401, detail="Token is not valid")
    return user_id
