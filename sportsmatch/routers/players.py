from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from ..cache import Cache
from ..dependencies import get_cache, get_query, require_user
from ..services import players as players_service
from ..store import QueryEngine

router = APIRouter(prefix="/api/players", tags=["players"])


class PlayerCreate(BaseModel):
    """Schema for creating a player."""
    name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    age: int = Field(ge=16, le=50)
    team_id: str
    goals: int = Field(default=0, ge=0)
    assists: int = Field(default=0, ge=0)
    matches_played: int = Field(default=0, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=10)


class PlayerUpdate(BaseModel):
    """Schema for a partial player update."""
    name: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = Field(default=None, min_length=1)
    age: Optional[int] = Field(default=None, ge=16, le=50)
    team_id: Optional[str] = None
    goals: Optional[int] = Field(default=None, ge=0)
    assists: Optional[int] = Field(default=None, ge=0)
    matches_played: Optional[int] = Field(default=None, ge=0)
    rating: Optional[float] = Field(default=None, ge=0, le=10)


@router.get("")
async def list_players(
    team_id: Optional[str] = None,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    players = await players_service.get_all(query, cache, team_id)
    return {"success": True, "data": players}


@router.get("/{player_id}")
async def get_player(
    player_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    player = await players_service.get_by_id(query, cache, player_id)
    return {"success": True, "data": player}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_user)])
async def create_player(
    payload: PlayerCreate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    player = await players_service.create(query, cache, payload.model_dump())
    return {"success": True, "data": player, "message": "Player created successfully"}


@router.put("/{player_id}", dependencies=[Depends(require_user)])
async def update_player(
    player_id: str,
    payload: PlayerUpdate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    player = await players_service.update(
        query, cache, player_id, payload.model_dump(exclude_unset=True, exclude_none=True)
    )
    return {"success": True, "data": player, "message": "Player updated successfully"}


@router.delete("/{player_id}", dependencies=[Depends(require_user)])
async def delete_player(
    player_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    await players_service.delete(query, cache, player_id)
    return {"success": True, "message": "Player deleted successfully"}
