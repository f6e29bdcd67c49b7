"""Declarative reads and writes over an entity store.

Supports the query shapes the services need and nothing more: equality or
membership filters, a single-key stable sort, fixed relation includes (which
may nest one more level) and field projection. Results are plain dicts, so
nothing returned here aliases store-owned objects.

Unknown-key policy:
- ``select`` names a field the entity does not have -> silently omitted.
- ``where`` names a field the entity does not have -> compared against None.
- ``include`` names an undeclared relation -> ValueError.
- ``update`` names a field the entity does not have -> ValueError.
"""
import typing
from dataclasses import dataclass, field
from datetime import datetime, UTC
from typing import Any, Dict, List, Mapping, Optional, Tuple

from sqlmodel import SQLModel

from .base import as_utc, model_for


@dataclass(frozen=True)
class Sort:
    field: str
    descending: bool = False

    @classmethod
    def asc(cls, name: str) -> "Sort":
        return cls(name)

    @classmethod
    def desc(cls, name: str) -> "Sort":
        return cls(name, descending=True)


@dataclass(frozen=True)
class Include:
    relation: str
    select: Optional[Tuple[str, ...]] = None
    include: Tuple["Include", ...] = ()
    sort: Optional[Sort] = None
    take: Optional[int] = None


@dataclass(frozen=True)
class FindOptions:
    where: Mapping[str, Any] = field(default_factory=dict)
    sort: Optional[Sort] = None
    include: Tuple[Include, ...] = ()
    select: Optional[Tuple[str, ...]] = None
    take: Optional[int] = None


@dataclass(frozen=True)
class Relation:
    target: str
    foreign_key: str
    many: bool
    default_take: Optional[int] = None


# For "many" relations the foreign key lives on the target, otherwise on the source.
RELATIONS: Dict[str, Dict[str, Relation]] = {
    "teams": {
        "players": Relation("players", "team_id", many=True),
        "home_matches": Relation("matches", "home_team_id", many=True, default_take=10),
        "away_matches": Relation("matches", "away_team_id", many=True, default_take=10),
    },
    "players": {
        "team": Relation("teams", "team_id", many=False),
    },
    "matches": {
        "home_team": Relation("teams", "home_team_id", many=False),
        "away_team": Relation("teams", "away_team_id", many=False),
    },
    "users": {},
}

_NEUTRAL_VALUES = {
    bool: False,
    int: 0,
    float: 0.0,
    str: "",
    datetime: datetime.min.replace(tzinfo=UTC),
}

_MEMBERSHIP_TYPES = (list, tuple, set, frozenset)


def relation_for(collection: str, name: str) -> Relation:
    try:
        return RELATIONS[collection][name]
    except KeyError:
        raise ValueError(f"Unknown relation {collection}.{name}") from None


def neutral_value(collection: str, name: str) -> Any:
    """Stand-in ordering value for a missing or null field."""
    info = model_for(collection).model_fields.get(name)
    if info is None:
        return 0
    annotation = info.annotation
    candidates = typing.get_args(annotation) or (annotation,)
    for candidate in candidates:
        if candidate in _NEUTRAL_VALUES:
            return _NEUTRAL_VALUES[candidate]
    return 0


def matches_where(entity: SQLModel, where: Mapping[str, Any]) -> bool:
    for name, expected in where.items():
        value = getattr(entity, name, None)
        if isinstance(expected, _MEMBERSHIP_TYPES):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


def sort_entities(collection: str, entities: List[SQLModel], sort: Sort) -> List[SQLModel]:
    neutral = neutral_value(collection, sort.field)

    def key(entity):
        value = getattr(entity, sort.field, None)
        if value is None:
            value = neutral
        if isinstance(value, datetime):
            value = as_utc(value)
        return value

    # sorted() is stable in both directions
    return sorted(entities, key=key, reverse=sort.descending)


def project(entity: SQLModel, select: Optional[Tuple[str, ...]]) -> Dict[str, Any]:
    data = entity.model_dump()
    if select is None:
        return data
    return {name: data[name] for name in select if name in data}


class QueryEngine:
    """Find, create, update and delete over an entity store."""

    def __init__(self, store):
        self.store = store

    def find_one(
        self, collection: str, entity_id: str, options: FindOptions = None
    ) -> Optional[Dict[str, Any]]:
        options = options or FindOptions()
        entity = self.store.get(collection, entity_id)
        if entity is None:
            return None
        return self._shape(collection, entity, options.select, options.include)

    def find_many(self, collection: str, options: FindOptions = None) -> List[Dict[str, Any]]:
        options = options or FindOptions()
        entities = [e for e in self.store.all(collection) if matches_where(e, options.where)]
        if options.sort is not None:
            entities = sort_entities(collection, entities, options.sort)
        if options.take is not None:
            entities = entities[:options.take]
        return [self._shape(collection, e, options.select, options.include) for e in entities]

    def find_unique(self, collection: str, **equals) -> Optional[Dict[str, Any]]:
        entity = self.store.find_unique(collection, **equals)
        return entity.model_dump() if entity is not None else None

    def create(
        self, collection: str, entity: SQLModel, options: FindOptions = None
    ) -> Dict[str, Any]:
        options = options or FindOptions()
        stored = self.store.insert(collection, entity)
        return self._shape(collection, stored, options.select, options.include)

    def update(
        self, collection: str, entity_id: str, fields: dict, options: FindOptions = None
    ) -> Dict[str, Any]:
        """Partial update: only the given fields change, updated_at is refreshed."""
        options = options or FindOptions()
        updated = self.store.update(collection, entity_id, fields)
        return self._shape(collection, updated, options.select, options.include)

    def delete(self, collection: str, entity_id: str) -> Dict[str, List[Dict[str, Any]]]:
        removed = self.store.delete(collection, entity_id)
        return {name: [e.model_dump() for e in rows] for name, rows in removed.items()}

    def _shape(self, collection, entity, select, includes) -> Dict[str, Any]:
        record = project(entity, select)
        for include in includes:
            relation = relation_for(collection, include.relation)
            record[include.relation] = self._expand(entity, relation, include)
        return record

    def _expand(self, entity: SQLModel, relation: Relation, include: Include):
        if not relation.many:
            related = self.store.get(relation.target, getattr(entity, relation.foreign_key))
            if related is None:
                return None
            return self._shape(relation.target, related, include.select, include.include)

        related = [
            row for row in self.store.all(relation.target)
            if getattr(row, relation.foreign_key) == entity.id
        ]
        if include.sort is not None:
            related = sort_entities(relation.target, related, include.sort)
        take = include.take if include.take is not None else relation.default_take
        if take is not None:
            related = related[:take]
        return [self._shape(relation.target, row, include.select, include.include) for row in related]
