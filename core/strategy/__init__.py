"""Strategy tables and table rules."""

from core.strategy.rules import DEFAULT_RULES, GameRules
from core.strategy.basic import (
    Action,
    BasicStrategy,
    StrategyRecommendation,
    is_action_optimal,
    recommend,
)

__all__ = [
    "DEFAULT_RULES",
    "GameRules",
    "Action",
    "BasicStrategy",
    "StrategyRecommendation",
    "is_action_optimal",
    "recommend",
]
