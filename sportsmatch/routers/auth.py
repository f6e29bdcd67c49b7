from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..dependencies import get_query
from ..services import auth as auth_service
from ..store import QueryEngine

router = APIRouter(prefix="/api/auth", tags=["auth"])

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    """Schema for registering a user."""
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str = Field(min_length=6)
    name: Optional[str] = None


class LoginRequest(BaseModel):
    """Schema for logging in."""
    email: str = Field(pattern=EMAIL_PATTERN)
    password: str


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, query: QueryEngine = Depends(get_query)):
    result = auth_service.register(query, payload.email, payload.password, payload.name)
    return {"success": True, "data": result, "message": "User registered successfully"}


@router.post("/login")
def login(payload: LoginRequest, query: QueryEngine = Depends(get_query)):
    result = auth_service.login(query, payload.email, payload.password)
    return {"success": True, "data": result, "message": "Login successful"}
