"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Literal


PlayerAction = Literal["hit", "stand", "double", "split", "surrender"]


# Game schemas
class DealRequest(BaseModel):
    """Request to place a bet and deal a round."""

    amount: int = Field(..., description="Bet amount in whole chips")


class ActionRequest(BaseModel):
    """Request for player action."""

    action: PlayerAction


class SessionResponse(BaseModel):
    """A freshly issued session token."""

    session_id: str
    balance: int


class CardResponse(BaseModel):
    """Card representation."""

    model_config = ConfigDict(from_attributes=True)

    rank: str
    suit: str
    value: int


class HandResponse(BaseModel):
    """Hand representation."""

    cards: list[CardResponse]
    total: int
    is_soft: bool
    is_blackjack: bool
    is_bust: bool
    bet: int | None = None


class RecommendationResponse(BaseModel):
    """Basic strategy advice for the active hand."""

    action: str
    reason: str


class GameStateResponse(BaseModel):
    """Current round, as seen by the player."""

    phase: str
    player_hands: list[HandResponse]
    active_hand_index: int
    dealer_hand: HandResponse | None
    dealer_up_card: CardResponse | None
    current_bet: int
    total_bet: int
    result: str | None
    winnings: int
    cards_remaining: int
    balance: int
    recommendation: RecommendationResponse | None = None
    last_action_optimal: bool | None = None


# Profile schemas
class BalanceResponse(BaseModel):
    """Chip balance."""

    balance: int
    formatted: str
    max_bet: int
    min_bet: int


class BonusResponse(BaseModel):
    """Daily bonus availability."""

    available: bool
    time_until_ms: int
    time_until: str
    amount: int


class BonusClaimResponse(BaseModel):
    """Result of a bonus claim."""

    claimed: bool
    balance: int


class SettingsResponse(BaseModel):
    """Player preferences."""

    hints_enabled: bool
    sound_enabled: bool


class SettingsUpdateRequest(BaseModel):
    """Partial settings update; omitted fields are left alone."""

    hints_enabled: bool | None = None
    sound_enabled: bool | None = None


# Statistics schemas
class StatsResponse(BaseModel):
    """Lifetime counters plus derived rates."""

    games_played: int
    wins: int
    losses: int
    pushes: int
    blackjacks: int
    strategy_followed: int
    strategy_deviated: int
    win_rate: float | None
    strategy_accuracy: float | None


# Training schemas
class StrategyDrillResponse(BaseModel):
    """A basic strategy question."""

    player_cards: list[CardResponse]
    player_total: int
    is_soft: bool
    is_pair: bool
    dealer_up_card: CardResponse


class StrategyVerifyRequest(BaseModel):
    """The player's answer to the current drill."""

    action: PlayerAction


class StrategyVerifyResponse(BaseModel):
    """Drill grading."""

    correct: bool
    correct_action: str
    reason: str
