from passlib.context import CryptContext
from jose import jwt
from datetime import datetime, timedelta, timezone
from app.core.config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_MINUTES
import re

pwd_ctx = CryptContext(schemes=["bcrypt"], deprecated="auto")

PINCODE_RE = re.compile(r"^\d{6}$")

def hash_password(p: str) -> str:
    return pwd_ctx.hash(p)

def verify_password(plain: str, hashed: str) -> bool:
    return pwd_ctx.verify(plain, hashed)

def create_jwt_token(data: dict, expires_minutes: int = JWT_EXPIRES_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, JWT_SECRET, algorithm=JWT_ALGORITHM)

def decode_jwt_token(token: str) -> dict:
    """Raises JWTError for a bad signature or an expired token."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])

def is_valid_pincode(code: str) -> bool:
    return bool(PINCODE_RE.match(code or ""))

def validate_password_strength(password: str) -> tuple[bool, str]:
    """
    Validate password meets strength requirements.
    Returns (is_valid, error_message)

    Requirements:
    - At least 8 characters
    - At least 1 letter
    - At least 1 number
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if not re.search(r"[A-Za-z]", password):
        return False, "Password must contain at least one letter"

    if not re.search(r"[0-9]", password):
        return False, "Password must contain at least one number"

    return True, ""
