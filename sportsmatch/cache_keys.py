"""Cache key builders and the entity -> affected-keys dependency map."""
from typing import Any, Iterable, List, Mapping

TEAMS_ALL = "teams:all"
PLAYERS_ALL = "players:all"
MATCHES_ALL = "matches:all"


def team_key(team_id: str) -> str:
    return f"team:{team_id}"


def player_key(player_id: str) -> str:
    return f"player:{player_id}"


def players_by_team_key(team_id: str) -> str:
    return f"players:team:{team_id}"


def match_key(match_id: str) -> str:
    return f"match:{match_id}"


def matches_by_status_key(status: str) -> str:
    return f"matches:status:{status}"


# Every cached result that embeds an entity of the given collection.
# Templates are formatted against the entity's fields, old and new state alike.
INVALIDATION_MAP = {
    "teams": (
        TEAMS_ALL,
        "team:{id}",
        # player and match listings embed a team summary
        PLAYERS_ALL,
        "players:team:{id}",
        MATCHES_ALL,
    ),
    "players": (
        # the team listing embeds each squad
        TEAMS_ALL,
        PLAYERS_ALL,
        "player:{id}",
        "players:team:{team_id}",
        "team:{team_id}",
    ),
    "matches": (
        MATCHES_ALL,
        "match:{id}",
        "matches:status:{status}",
        "team:{home_team_id}",
        "team:{away_team_id}",
    ),
    "users": (),
}


def keys_for(collection: str, *states: Mapping[str, Any]) -> List[str]:
    """Expand the templates for each given entity state, without duplicates."""
    keys = []
    for state in states:
        if state is None:
            continue
        for template in INVALIDATION_MAP[collection]:
            key = template.format(**state)
            if key not in keys:
                keys.append(key)
    return keys


def merge(*groups: Iterable[str]) -> List[str]:
    keys = []
    for group in groups:
        for key in group:
            if key not in keys:
                keys.append(key)
    return keys
