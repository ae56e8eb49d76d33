"""Game engine and state management."""

from core.game.state import GameState, Phase
from core.game.engine import InvalidBet, apply_action, start_round, validate_bet

__all__ = [
    "GameState",
    "Phase",
    "InvalidBet",
    "apply_action",
    "start_round",
    "validate_bet",
]
