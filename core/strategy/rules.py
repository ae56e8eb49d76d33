"""Blackjack table rules."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GameRules:
    """
    Blackjack table rules configuration.

    ``double_after_split``, ``insurance_available`` and ``surrender_available``
    are carried for display and persistence only: the engine lets any two-card
    hand double, never offers insurance, and always honours surrender.
    """

    # Deck configuration
    num_decks: int = 6

    # Dealer rules
    dealer_stands_on_soft_17: bool = True  # S17 vs H17

    # Double down rules
    double_after_split: bool = True  # DAS

    # Split rules
    max_splits: int = 4  # Maximum number of hands from splitting

    # Blackjack payout (3:2 = 1.5, 6:5 = 1.2)
    blackjack_payout: float = 1.5

    insurance_available: bool = True
    surrender_available: bool = True

    def __post_init__(self) -> None:
        """Validate rule combinations."""
        if self.num_decks < 1:
            raise ValueError("num_decks must be at least 1")
        if self.blackjack_payout < 1.0:
            raise ValueError("blackjack_payout must be at least 1.0")
        if self.max_splits < 1:
            raise ValueError("max_splits must be at least 1")

    @classmethod
    def single_deck(cls) -> "GameRules":
        """Single deck, dealer hits soft 17."""
        return cls(
            num_decks=1,
            dealer_stands_on_soft_17=False,
            double_after_split=False,
            max_splits=2,
        )

    @classmethod
    def six_to_five(cls) -> "GameRules":
        """Six-deck shoe paying 6:5 on naturals."""
        return cls(blackjack_payout=1.2)


DEFAULT_RULES = GameRules()
