from datetime import datetime, UTC
from typing import Dict, List, Optional

from loguru import logger
from sqlmodel import Session, SQLModel, func, select, or_

from ..database import make_engine, create_db_and_tables
from ..errors import NotFound
from .base import CASCADES, model_for, new_id, touched_at, clean_update


class SqlEntityStore:
    """Entity store backed by a relational database through SQLModel.

    Same surface as the in-memory EntityStore; the team cascade runs in a
    single transaction.
    """

    kind = "sql"

    def __init__(self, database_url: str = None, engine=None):
        self.engine = engine if engine is not None else make_engine(database_url)
        create_db_and_tables(self.engine)

    def _session(self) -> Session:
        return Session(self.engine, expire_on_commit=False)

    def get(self, collection: str, entity_id: str) -> Optional[SQLModel]:
        if entity_id is None:
            return None
        with self._session() as db:
            return db.get(model_for(collection), entity_id)

    def all(self, collection: str) -> List[SQLModel]:
        model = model_for(collection)
        with self._session() as db:
            return list(db.exec(select(model).order_by(model.created_at)).all())

    def find_unique(self, collection: str, **equals) -> Optional[SQLModel]:
        model = model_for(collection)
        statement = select(model).where(
            *(getattr(model, name) == value for name, value in equals.items())
        )
        with self._session() as db:
            return db.exec(statement).first()

    def insert(self, collection: str, entity: SQLModel) -> SQLModel:
        model = model_for(collection)
        data = entity.model_dump()
        with self._session() as db:
            # created_at is the insertion order, so it must never tie
            latest = db.exec(select(func.max(model.created_at))).one()
            now = touched_at(latest) if latest is not None else datetime.now(UTC)
            data.update(id=new_id(), created_at=now, updated_at=now)
            row = model.model_validate(data)
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    def update(self, collection: str, entity_id: str, fields: dict) -> SQLModel:
        model = model_for(collection)
        changes = clean_update(model, fields)
        with self._session() as db:
            row = db.get(model, entity_id)
            if row is None:
                raise NotFound(f"{model.__name__} not found")
            for name, value in changes.items():
                setattr(row, name, value)
            row.updated_at = touched_at(row.updated_at)
            db.add(row)
            db.commit()
            db.refresh(row)
        return row

    def delete(self, collection: str, entity_id: str) -> Dict[str, List[SQLModel]]:
        model = model_for(collection)
        with self._session() as db:
            row = db.get(model, entity_id)
            if row is None:
                raise NotFound(f"{model.__name__} not found")

            removed = {collection: [row]}
            for child, foreign_keys in CASCADES.get(collection, ()):
                child_model = model_for(child)
                statement = select(child_model).where(
                    or_(*(getattr(child_model, key) == entity_id for key in foreign_keys))
                )
                removed[child] = list(db.exec(statement).all())

            for name, rows in removed.items():
                if name == collection:
                    continue
                for dependent in rows:
                    db.delete(dependent)
            db.delete(row)
            db.commit()

        if len(removed) > 1:
            logger.debug(
                f"Deleted {collection}:{entity_id} with "
                + ", ".join(f"{len(rows)} {name}" for name, rows in removed.items() if name != collection)
            )
        return removed

    def clear(self) -> None:
        SQLModel.metadata.drop_all(self.engine)
        create_db_and_tables(self.engine)

    def close(self) -> None:
        self.engine.dispose()
