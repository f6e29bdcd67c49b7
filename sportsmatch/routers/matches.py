from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..cache import Cache
from ..dependencies import get_cache, get_predictor, get_query, require_user
from ..models import MatchStatus
from ..prediction import PredictionGenerator
from ..services import matches as matches_service
from ..store import QueryEngine

router = APIRouter(prefix="/api/matches", tags=["matches"])


class MatchCreate(BaseModel):
    """Schema for creating a match."""
    home_team_id: str
    away_team_id: str
    date: datetime
    status: Optional[MatchStatus] = None


class MatchUpdate(BaseModel):
    """Schema for a partial match update."""
    date: Optional[datetime] = None
    status: Optional[MatchStatus] = None
    home_score: Optional[int] = Field(default=None, ge=0)
    away_score: Optional[int] = Field(default=None, ge=0)


@router.get("")
async def list_matches(
    status: Optional[MatchStatus] = None,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    matches = await matches_service.get_all(query, cache, status)
    return {"success": True, "data": matches}


@router.get("/{match_id}")
async def get_match(
    match_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    match = await matches_service.get_by_id(query, cache, match_id)
    return {"success": True, "data": match}


@router.get("/{match_id}/prediction")
async def get_match_prediction(
    match_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
    predictor: PredictionGenerator = Depends(get_predictor),
):
    prediction = await matches_service.get_prediction(query, cache, predictor, match_id)
    return {"success": True, "data": prediction}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_user)])
async def create_match(
    payload: MatchCreate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
    predictor: PredictionGenerator = Depends(get_predictor),
):
    match = await matches_service.create(query, cache, predictor, payload.model_dump())
    return {"success": True, "data": match, "message": "Match created successfully"}


@router.put("/{match_id}", dependencies=[Depends(require_user)])
async def update_match(
    match_id: str,
    payload: MatchUpdate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    match = await matches_service.update(
        query, cache, match_id, payload.model_dump(exclude_unset=True, exclude_none=True)
    )
    return {"success": True, "data": match, "message": "Match updated successfully"}


@router.delete("/{match_id}", dependencies=[Depends(require_user)])
async def delete_match(
    match_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    await matches_service.delete(query, cache, match_id)
    return {"success": True, "message": "Match deleted successfully"}
