from typing import Any, Dict, Optional

from ..errors import Conflict, Unauthorized
from ..models import User
from ..security import hash_password, verify_password, create_access_token
from ..store import QueryEngine, FindOptions

PUBLIC_FIELDS = ("id", "email", "name", "created_at")


def _public(user: Dict[str, Any]) -> Dict[str, Any]:
    return {name: user.get(name) for name in PUBLIC_FIELDS}


def get_user_by_email(query: QueryEngine, email: str) -> Optional[Dict[str, Any]]:
    """Get a user by email."""
    return query.find_unique("users", email=email)


def register(
    query: QueryEngine, email: str, password: str, name: Optional[str] = None
) -> Dict[str, Any]:
    """Create a new user and issue a token."""
    if get_user_by_email(query, email) is not None:
        raise Conflict("User with this email already exists")

    user = query.create(
        "users",
        User(email=email, password_hash=hash_password(password), name=name),
        FindOptions(select=PUBLIC_FIELDS),
    )
    return {"user": user, "token": create_access_token(user["id"], user["email"])}


def login(query: QueryEngine, email: str, password: str) -> Dict[str, Any]:
    """Authenticate a user by email and password."""
    user = get_user_by_email(query, email)
    if user is None or not verify_password(password, user["password_hash"]):
        raise Unauthorized("Invalid email or password")

    return {"user": _public(user), "token": create_access_token(user["id"], user["email"])}
