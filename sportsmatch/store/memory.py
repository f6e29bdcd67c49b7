import threading
from datetime import datetime, UTC
from typing import Dict, List, Optional

from loguru import logger
from sqlmodel import SQLModel

from ..errors import NotFound
from ..models import Team, Player, Match
from .base import COLLECTIONS, CASCADES, model_for, new_id, touched_at, clean_update


class EntityStore:
    """In-memory entity collections keyed by id, in insertion order.

    Stored instances are never handed out for mutation: inserts and updates
    replace the stored object, so a reader holding an older instance keeps a
    consistent snapshot. A single re-entrant lock makes the team cascade
    visible to readers all at once.
    """

    kind = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self._collections: Dict[str, Dict[str, SQLModel]] = {name: {} for name in COLLECTIONS}

    def _rows(self, collection: str) -> Dict[str, SQLModel]:
        model_for(collection)
        return self._collections[collection]

    def get(self, collection: str, entity_id: str) -> Optional[SQLModel]:
        if entity_id is None:
            return None
        with self._lock:
            return self._rows(collection).get(entity_id)

    def all(self, collection: str) -> List[SQLModel]:
        with self._lock:
            return list(self._rows(collection).values())

    def find_unique(self, collection: str, **equals) -> Optional[SQLModel]:
        for entity in self.all(collection):
            if all(getattr(entity, name, None) == value for name, value in equals.items()):
                return entity
        return None

    def insert(self, collection: str, entity: SQLModel) -> SQLModel:
        model = model_for(collection)
        now = datetime.now(UTC)
        data = entity.model_dump()
        data.update(id=new_id(), created_at=now, updated_at=now)
        stored = model.model_validate(data)
        with self._lock:
            self._rows(collection)[stored.id] = stored
        return stored

    def update(self, collection: str, entity_id: str, fields: dict) -> SQLModel:
        model = model_for(collection)
        changes = clean_update(model, fields)
        with self._lock:
            rows = self._rows(collection)
            current = rows.get(entity_id)
            if current is None:
                raise NotFound(f"{model.__name__} not found")
            data = current.model_dump()
            data.update(changes)
            data["updated_at"] = touched_at(current.updated_at)
            updated = model.model_validate(data)
            rows[entity_id] = updated
        return updated

    def delete(self, collection: str, entity_id: str) -> Dict[str, List[SQLModel]]:
        """Remove an entity and its dependents; returns everything removed."""
        model = model_for(collection)
        with self._lock:
            rows = self._rows(collection)
            entity = rows.get(entity_id)
            if entity is None:
                raise NotFound(f"{model.__name__} not found")

            removed = {collection: [entity]}
            for child, foreign_keys in CASCADES.get(collection, ()):
                removed[child] = [
                    row for row in self._collections[child].values()
                    if any(getattr(row, key) == entity_id for key in foreign_keys)
                ]

            for name, entities in removed.items():
                for row in entities:
                    del self._collections[name][row.id]

        if len(removed) > 1:
            logger.debug(
                f"Deleted {collection}:{entity_id} with "
                + ", ".join(f"{len(rows)} {name}" for name, rows in removed.items() if name != collection)
            )
        return removed

    def clear(self) -> None:
        with self._lock:
            for rows in self._collections.values():
                rows.clear()

    def seed_sample_data(self) -> None:
        """Two teams, two players and one predicted fixture."""
        united = self.insert("teams", Team(
            name="Manchester United", country="England", founded_year=1878, stadium="Old Trafford"
        ))
        liverpool = self.insert("teams", Team(
            name="Liverpool FC", country="England", founded_year=1892, stadium="Anfield"
        ))

        self.insert("players", Player(
            name="John Doe", position="Forward", age=25, goals=15, assists=8,
            matches_played=30, rating=8.5, team_id=united.id
        ))
        self.insert("players", Player(
            name="Jane Smith", position="Midfielder", age=23, goals=5, assists=12,
            matches_played=28, rating=7.8, team_id=liverpool.id
        ))

        self.insert("matches", Match(
            home_team_id=united.id,
            away_team_id=liverpool.id,
            date=datetime(2024, 12, 31, 20, 0, tzinfo=UTC),
            status="scheduled",
            prediction={
                "home_win_probability": 0.45,
                "away_win_probability": 0.35,
                "draw_probability": 0.20,
                "predicted_score": {"home": 2, "away": 1},
                "confidence": 0.75,
            },
        ))
        logger.info("In-memory store seeded with sample data")

    def close(self) -> None:
        self.clear()
