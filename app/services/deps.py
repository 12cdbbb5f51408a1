import logging
from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError

from app.core.database import SessionLocal
from app.core.errors import Unauthorized
from app.core.security import decode_jwt_token
from app.models.user import User

logger = logging.getLogger("openpolitics.deps")
logger.setLevel(logging.INFO)

# auto_error=False so anonymous callers reach optional endpoints
oauth2_scheme = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def _user_from_token(token: Optional[HTTPAuthorizationCredentials], db: Session) -> Optional[User]:
    if token is None:
        return None
    try:
        payload = decode_jwt_token(token.credentials)
        sub = payload.get("sub")
        if sub is None:
            raise Unauthorized("Invalid token")
        user_id = int(sub)
    except (JWTError, ValueError):
        raise Unauthorized("Invalid token")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.warning(f"Token for unknown user {user_id}")
        raise Unauthorized("Invalid token")
    return user

def get_current_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> User:
    user = _user_from_token(token, db)
    if user is None:
        raise Unauthorized()
    return user

def get_optional_user(
    token: Optional[HTTPAuthorizationCredentials] = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Current user or None; a malformed token is still rejected."""
    return _user_from_token(token, db)
