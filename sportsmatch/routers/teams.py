from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field, field_validator

from ..cache import Cache
from ..dependencies import get_cache, get_query, require_user
from ..services import teams as teams_service
from ..store import QueryEngine

router = APIRouter(prefix="/api/teams", tags=["teams"])


def _not_in_future(value: Optional[int]) -> Optional[int]:
    if value is not None and value > datetime.now().year:
        raise ValueError("founded_year cannot be in the future")
    return value


class TeamCreate(BaseModel):
    """Schema for creating a team."""
    name: str = Field(min_length=1)
    country: str = Field(min_length=1)
    founded_year: int = Field(ge=1800)
    stadium: str = Field(min_length=1)

    @field_validator("founded_year")
    @classmethod
    def check_founded_year(cls, value: int) -> int:
        return _not_in_future(value)


class TeamUpdate(BaseModel):
    """Schema for a partial team update."""
    name: Optional[str] = Field(default=None, min_length=1)
    country: Optional[str] = Field(default=None, min_length=1)
    founded_year: Optional[int] = Field(default=None, ge=1800)
    stadium: Optional[str] = Field(default=None, min_length=1)

    @field_validator("founded_year")
    @classmethod
    def check_founded_year(cls, value: Optional[int]) -> Optional[int]:
        return _not_in_future(value)


@router.get("")
async def list_teams(
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    teams = await teams_service.get_all(query, cache)
    return {"success": True, "data": teams}


@router.get("/{team_id}")
async def get_team(
    team_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    team = await teams_service.get_by_id(query, cache, team_id)
    return {"success": True, "data": team}


@router.post("", status_code=status.HTTP_201_CREATED, dependencies=[Depends(require_user)])
async def create_team(
    payload: TeamCreate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    team = await teams_service.create(query, cache, payload.model_dump())
    return {"success": True, "data": team, "message": "Team created successfully"}


@router.put("/{team_id}", dependencies=[Depends(require_user)])
async def update_team(
    team_id: str,
    payload: TeamUpdate,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    team = await teams_service.update(
        query, cache, team_id, payload.model_dump(exclude_unset=True, exclude_none=True)
    )
    return {"success": True, "data": team, "message": "Team updated successfully"}


@router.delete("/{team_id}", dependencies=[Depends(require_user)])
async def delete_team(
    team_id: str,
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    await teams_service.delete(query, cache, team_id)
    return {"success": True, "message": "Team deleted successfully"}
