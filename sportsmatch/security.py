from datetime import datetime, timedelta, UTC
from typing import Any, Dict

import bcrypt
import jwt

from .config import JWT_ALGORITHM, JWT_EXPIRES_IN_DAYS, JWT_SECRET
from .errors import Unauthorized


def hash_password(password: str) -> str:
    """Hash a password using bcrypt. Truncates to 72 bytes for bcrypt compatibility."""
    password_bytes = password.encode("utf-8")[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    password_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode("utf-8"))


def create_access_token(user_id: str, email: str, expires_in: timedelta = None) -> str:
    """Issue a signed bearer token for a user."""
    now = datetime.now(UTC)
    payload = {
        "user_id": user_id,
        "email": email,
        "iat": now,
        "exp": now + (expires_in or timedelta(days=JWT_EXPIRES_IN_DAYS)),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify a bearer token and return its claims."""
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError:
        raise Unauthorized("Invalid or expired token")
