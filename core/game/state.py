"""Round phases and the immutable game state record."""

from dataclasses import dataclass, field
from enum import Enum

from core.cards import Card
from core.hand import Hand, Outcome


class Phase(Enum):
    """
    Round state machine phases.

    Flow: BETTING → DEALING → PLAYER_TURN → DEALER_TURN → RESULT → GAME_OVER

    Callers only ever observe PLAYER_TURN or GAME_OVER; the rest are passed
    through inside a single engine call.
    """

    BETTING = "betting"
    DEALING = "dealing"
    PLAYER_TURN = "player-turn"
    DEALER_TURN = "dealer-turn"
    RESULT = "result"
    GAME_OVER = "game-over"

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()


@dataclass(frozen=True)
class GameState:
    """
    Everything about one round.

    Transitions never modify a state; they build a new one, so a caller can
    never see a half-applied action.
    """

    phase: Phase
    player_hands: tuple[Hand, ...]
    active_hand_index: int
    dealer_hand: Hand
    dealer_up_card: Card | None
    current_bet: float  # Original stake
    hand_bets: tuple[float, ...]  # Stake per hand, parallel to player_hands
    total_bet: float
    result: Outcome | None
    winnings: float  # Signed net chip delta for the round
    deck: tuple[Card, ...] = field(repr=False)
    deck_index: int = 0

    @property
    def active_hand(self) -> Hand:
        """Get the hand currently receiving actions."""
        return self.player_hands[self.active_hand_index]

    @property
    def active_bet(self) -> float:
        """Get the stake riding on the active hand."""
        if self.active_hand_index < len(self.hand_bets):
            return self.hand_bets[self.active_hand_index]
        return self.current_bet

    @property
    def is_over(self) -> bool:
        """Check if the round has been settled."""
        return self.phase is Phase.GAME_OVER

    @property
    def cards_remaining(self) -> int:
        """Return the number of undealt cards in the shoe."""
        return max(len(self.deck) - self.deck_index, 0)
