from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine


def make_engine(database_url: str):
    """Create an engine for the durable store."""
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite:///"):
            return create_engine(
                database_url, echo=False, connect_args=connect_args, poolclass=StaticPool
            )
        return create_engine(database_url, echo=False, connect_args=connect_args)
    return create_engine(database_url, echo=False, pool_pre_ping=True)


def create_db_and_tables(engine) -> None:
    """Create all database tables."""
    # Table models register on import
    from . import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
