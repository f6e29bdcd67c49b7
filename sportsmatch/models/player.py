from datetime import datetime, UTC
from typing import Optional
from sqlmodel import SQLModel, Field


class Player(SQLModel, table=True):
    __tablename__ = "players"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str
    position: str
    age: int
    team_id: str = Field(foreign_key="teams.id", index=True)

    # Cumulative stats
    goals: int = Field(default=0)
    assists: int = Field(default=0)
    matches_played: int = Field(default=0)
    rating: Optional[float] = Field(default=None)  # 0-10

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
