from typing import Any, Dict, List

from ..cache import Cache
from ..cache_keys import TEAMS_ALL, team_key, keys_for, merge
from ..errors import NotFound
from ..models import Team
from ..store import QueryEngine, FindOptions, Include, Sort

LIST_OPTIONS = FindOptions(
    sort=Sort.asc("name"),
    include=(Include("players", select=("id", "name", "position")),),
)

DETAIL_OPTIONS = FindOptions(
    include=(
        Include("players"),
        Include(
            "home_matches",
            include=(Include("away_team", select=("id", "name")),),
            sort=Sort.desc("date"),
            take=5,
        ),
        Include(
            "away_matches",
            include=(Include("home_team", select=("id", "name")),),
            sort=Sort.desc("date"),
            take=5,
        ),
    ),
)

WITH_PLAYERS = FindOptions(include=(Include("players"),))


async def get_all(query: QueryEngine, cache: Cache) -> List[Dict[str, Any]]:
    """All teams by name, each with a player summary."""
    return await cache.read(TEAMS_ALL, lambda: query.find_many("teams", LIST_OPTIONS))


async def get_by_id(query: QueryEngine, cache: Cache, team_id: str) -> Dict[str, Any]:
    """A team with its squad and five most recent home and away matches."""
    def compute():
        team = query.find_one("teams", team_id, DETAIL_OPTIONS)
        if team is None:
            raise NotFound("Team not found")
        return team

    return await cache.read(team_key(team_id), compute)


def _dependent_keys(query: QueryEngine, team_id: str) -> List[str]:
    players = query.find_many("players", FindOptions(where={"team_id": team_id}))
    home = query.find_many("matches", FindOptions(where={"home_team_id": team_id}))
    away = query.find_many("matches", FindOptions(where={"away_team_id": team_id}))
    return merge(keys_for("players", *players), keys_for("matches", *home, *away))


async def create(query: QueryEngine, cache: Cache, data: Dict[str, Any]) -> Dict[str, Any]:
    team = query.create("teams", Team(**data), WITH_PLAYERS)
    await cache.invalidate(*keys_for("teams", team))
    return team


async def update(
    query: QueryEngine, cache: Cache, team_id: str, data: Dict[str, Any]
) -> Dict[str, Any]:
    team = query.update("teams", team_id, data, WITH_PLAYERS)
    await cache.invalidate(*merge(keys_for("teams", team), _dependent_keys(query, team_id)))
    return team


async def delete(query: QueryEngine, cache: Cache, team_id: str) -> None:
    """Delete a team together with its players and every match it plays in."""
    removed = query.delete("teams", team_id)
    await cache.invalidate(*merge(
        keys_for("teams", *removed["teams"]),
        keys_for("players", *removed.get("players", [])),
        keys_for("matches", *removed.get("matches", [])),
    ))
