from .user import User
from .team import Team
from .player import Player
from .match import Match, MatchStatus
from .prediction import Prediction, PredictedScore

__all__ = [
    "User",
    "Team",
    "Player",
    "Match",
    "MatchStatus",
    "Prediction",
    "PredictedScore",
]
