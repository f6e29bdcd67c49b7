from loguru import logger

from .memory import EntityStore
from .sql import SqlEntityStore
from .query import QueryEngine, FindOptions, Include, Sort


def create_store(database_url: str = None, seed: bool = False):
    """Durable store when a database is configured, in-memory otherwise."""
    if database_url:
        logger.info("Using SQL entity store")
        return SqlEntityStore(database_url)

    logger.warning("DATABASE_URL not set, using in-memory store (data is lost on restart)")
    store = EntityStore()
    if seed:
        store.seed_sample_data()
    return store


__all__ = [
    "EntityStore",
    "SqlEntityStore",
    "QueryEngine",
    "FindOptions",
    "Include",
    "Sort",
    "create_store",
]
