from datetime import datetime, UTC
from typing import Optional
from sqlmodel import SQLModel, Field


class Team(SQLModel, table=True):
    __tablename__ = "teams"

    id: Optional[str] = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    country: str
    founded_year: int
    stadium: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
