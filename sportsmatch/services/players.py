from typing import Any, Dict, List, Optional

from ..cache import Cache
from ..cache_keys import PLAYERS_ALL, player_key, players_by_team_key, keys_for
from ..errors import NotFound, ValidationFailure
from ..models import Player
from ..store import QueryEngine, FindOptions, Include, Sort

TEAM_SUMMARY = Include("team", select=("id", "name", "country"))
WITH_TEAM = FindOptions(include=(Include("team"),))


async def get_all(
    query: QueryEngine, cache: Cache, team_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Players by rating (unrated last), optionally restricted to one team."""
    cache_key = players_by_team_key(team_id) if team_id else PLAYERS_ALL
    options = FindOptions(
        where={"team_id": team_id} if team_id else {},
        sort=Sort.desc("rating"),
        include=(TEAM_SUMMARY,),
    )
    return await cache.read(cache_key, lambda: query.find_many("players", options))


async def get_by_id(query: QueryEngine, cache: Cache, player_id: str) -> Dict[str, Any]:
    def compute():
        player = query.find_one("players", player_id, WITH_TEAM)
        if player is None:
            raise NotFound("Player not found")
        return player

    return await cache.read(player_key(player_id), compute)


def _require_team(query: QueryEngine, team_id: str) -> None:
    if query.find_one("teams", team_id) is None:
        raise ValidationFailure("Team not found")


async def create(query: QueryEngine, cache: Cache, data: Dict[str, Any]) -> Dict[str, Any]:
    _require_team(query, data["team_id"])
    player = query.create("players", Player(**data), WITH_TEAM)
    await cache.invalidate(*keys_for("players", player))
    return player


async def update(
    query: QueryEngine, cache: Cache, player_id: str, data: Dict[str, Any]
) -> Dict[str, Any]:
    previous = query.find_one("players", player_id)
    if previous is None:
        raise NotFound("Player not found")
    if "team_id" in data and data["team_id"] != previous["team_id"]:
        _require_team(query, data["team_id"])

    player = query.update("players", player_id, data, WITH_TEAM)
    # A transfer touches both the old and the new team's keys
    await cache.invalidate(*keys_for("players", previous, player))
    return player


async def delete(query: QueryEngine, cache: Cache, player_id: str) -> None:
    removed = query.delete("players", player_id)
    await cache.invalidate(*keys_for("players", *removed["players"]))
