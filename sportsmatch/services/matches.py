from typing import Any, Dict, List, Optional

from ..cache import Cache
from ..cache_keys import MATCHES_ALL, match_key, matches_by_status_key, keys_for
from ..errors import Conflict, NotFound, ValidationFailure
from ..models import Match, Prediction
from ..prediction import PredictionGenerator
from ..store import QueryEngine, FindOptions, Include, Sort

WITH_TEAMS = FindOptions(include=(Include("home_team"), Include("away_team")))


async def get_all(
    query: QueryEngine, cache: Cache, status: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Matches by date, newest first, optionally filtered by status."""
    cache_key = matches_by_status_key(status) if status else MATCHES_ALL
    summary = ("id", "name", "country")
    options = FindOptions(
        where={"status": status} if status else {},
        sort=Sort.desc("date"),
        include=(
            Include("home_team", select=summary),
            Include("away_team", select=summary),
        ),
    )
    return await cache.read(cache_key, lambda: query.find_many("matches", options))


async def get_by_id(query: QueryEngine, cache: Cache, match_id: str) -> Dict[str, Any]:
    def compute():
        match = query.find_one("matches", match_id, WITH_TEAMS)
        if match is None:
            raise NotFound("Match not found")
        return match

    return await cache.read(match_key(match_id), compute)


async def create(
    query: QueryEngine,
    cache: Cache,
    predictor: PredictionGenerator,
    data: Dict[str, Any],
) -> Dict[str, Any]:
    """Schedule a match; scheduled matches get a prediction up front."""
    if data["home_team_id"] == data["away_team_id"]:
        raise Conflict("Home and away teams must be different")

    home_team = query.find_one("teams", data["home_team_id"])
    away_team = query.find_one("teams", data["away_team_id"])
    if home_team is None or away_team is None:
        raise ValidationFailure("One or both teams not found")

    status = data.get("status") or "scheduled"
    prediction = None
    if status == "scheduled":
        prediction = await predictor.generate(home_team["name"], away_team["name"])

    match = query.create(
        "matches",
        Match(
            **{**data, "status": status},
            prediction=prediction.model_dump() if prediction else None,
        ),
        WITH_TEAMS,
    )
    await cache.invalidate(*keys_for("matches", match))
    return match


async def update(
    query: QueryEngine, cache: Cache, match_id: str, data: Dict[str, Any]
) -> Dict[str, Any]:
    previous = query.find_one("matches", match_id)
    if previous is None:
        raise NotFound("Match not found")

    match = query.update("matches", match_id, data, WITH_TEAMS)
    # Old and new status lists both change when the status moves
    await cache.invalidate(*keys_for("matches", previous, match))
    return match


async def delete(query: QueryEngine, cache: Cache, match_id: str) -> None:
    removed = query.delete("matches", match_id)
    await cache.invalidate(*keys_for("matches", *removed["matches"]))


async def get_prediction(
    query: QueryEngine,
    cache: Cache,
    predictor: PredictionGenerator,
    match_id: str,
) -> Dict[str, Any]:
    """Stored prediction, or a freshly generated one saved onto the match."""
    match = await get_by_id(query, cache, match_id)
    if match.get("prediction"):
        return Prediction.model_validate(match["prediction"]).model_dump()

    prediction = await predictor.generate(match["home_team"]["name"], match["away_team"]["name"])
    updated = query.update("matches", match_id, {"prediction": prediction.model_dump()})
    await cache.invalidate(*keys_for("matches", updated))
    return prediction.model_dump()
