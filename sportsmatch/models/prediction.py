from typing import Optional
from sqlmodel import SQLModel, Field


class PredictedScore(SQLModel):
    home: int
    away: int


class Prediction(SQLModel):
    """Outcome prediction embedded in a match (stored as JSON, not a table)."""

    home_win_probability: float = Field(ge=0, le=1)
    away_win_probability: float = Field(ge=0, le=1)
    draw_probability: float = Field(ge=0, le=1)
    predicted_score: Optional[PredictedScore] = None
    confidence: float = Field(ge=0, le=1)
