from datetime import datetime, UTC
from typing import Any, Dict, Literal, Optional
from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field

MatchStatus = Literal["scheduled", "live", "finished"]


class Match(SQLModel, table=True):
    __tablename__ = "matches"

    id: Optional[str] = Field(default=None, primary_key=True)

    home_team_id: str = Field(foreign_key="teams.id", index=True)
    away_team_id: str = Field(foreign_key="teams.id", index=True)

    date: datetime = Field(index=True)
    status: str = Field(default="scheduled", index=True)  # scheduled, live, finished

    # Actual results
    home_score: Optional[int] = Field(default=None)
    away_score: Optional[int] = Field(default=None)

    # Serialized Prediction payload
    prediction: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
