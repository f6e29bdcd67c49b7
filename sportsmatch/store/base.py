from datetime import datetime, timedelta, UTC
from typing import Dict, Type
from uuid import uuid4

from sqlmodel import SQLModel

from ..models import User, Team, Player, Match

COLLECTIONS: Dict[str, Type[SQLModel]] = {
    "users": User,
    "teams": Team,
    "players": Player,
    "matches": Match,
}

# Fields an update can never change
IMMUTABLE_FIELDS = ("id", "created_at")

# Dependents removed with their parent: parent collection -> (child collection, foreign keys)
CASCADES = {
    "teams": (
        ("players", ("team_id",)),
        ("matches", ("home_team_id", "away_team_id")),
    ),
}


def model_for(collection: str) -> Type[SQLModel]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise ValueError(f"Unknown collection: {collection}") from None


def new_id() -> str:
    return str(uuid4())


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def touched_at(previous: datetime) -> datetime:
    """A fresh updated_at that is always later than the previous one."""
    now = datetime.now(UTC)
    floor = as_utc(previous) + timedelta(microseconds=1)
    return now if now >= floor else floor


def clean_update(model: Type[SQLModel], fields: dict) -> dict:
    """Drop immutable keys and reject fields the entity does not have."""
    unknown = [name for name in fields if name not in model.model_fields]
    if unknown:
        raise ValueError(f"Unknown fields for {model.__name__}: {', '.join(sorted(unknown))}")
    return {name: value for name, value in fields.items() if name not in IMMUTABLE_FIELDS}
