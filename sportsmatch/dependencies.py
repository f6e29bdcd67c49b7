from typing import Any, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .cache import Cache
from .errors import Unauthorized
from .prediction import PredictionGenerator
from .security import decode_access_token
from .store import QueryEngine

bearer_scheme = HTTPBearer(auto_error=False)


def get_query(request: Request) -> QueryEngine:
    return request.app.state.query


def get_cache(request: Request) -> Cache:
    return request.app.state.cache


def get_predictor(request: Request) -> PredictionGenerator:
    return request.app.state.predictor


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """Require a valid bearer token; returns its claims."""
    if credentials is None:
        raise Unauthorized("No token provided")
    claims = decode_access_token(credentials.credentials)
    return {"user_id": claims.get("user_id"), "email": claims.get("email")}
