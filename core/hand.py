"""Hand evaluation for blackjack."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from core.cards import Card


class Outcome(Enum):
    """Settled result of a hand or a whole round."""

    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    BLACKJACK = "blackjack"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Hand:
    """
    A blackjack hand.

    Every derived field is computed from ``cards`` on construction. Hands are
    never mutated; adding a card produces a new hand.
    """

    cards: tuple[Card, ...] = ()
    total: int = field(init=False)
    soft_total: int = field(init=False)
    is_soft: bool = field(init=False)
    is_blackjack: bool = field(init=False)
    is_bust: bool = field(init=False)
    can_split: bool = field(init=False)
    can_double: bool = field(init=False)

    def __post_init__(self) -> None:
        cards = tuple(self.cards)
        aces = sum(1 for card in cards if card.is_ace)
        hard = sum(card.value for card in cards if not card.is_ace)
        soft_total = hard + aces

        # Aces are valued after all other cards, each taking 11 if it fits.
        # A later Ace never demotes an earlier one, so 10-A-A busts at 22.
        total = hard
        for _ in range(aces):
            total += 11 if total + 11 <= 21 else 1

        is_pair = len(cards) == 2 and cards[0].rank == cards[1].rank

        object.__setattr__(self, "cards", cards)
        object.__setattr__(self, "total", total)
        object.__setattr__(self, "soft_total", soft_total)
        object.__setattr__(
            self, "is_soft", aces > 0 and total != soft_total and total <= 21
        )
        object.__setattr__(self, "is_blackjack", len(cards) == 2 and total == 21)
        object.__setattr__(self, "is_bust", total > 21)
        object.__setattr__(self, "can_split", is_pair)
        object.__setattr__(self, "can_double", len(cards) == 2)

    def add_card(self, card: Card) -> "Hand":
        """Return a new hand with ``card`` appended."""
        return Hand((*self.cards, card))

    @property
    def is_hard(self) -> bool:
        """Check if the hand is hard (not soft)."""
        return not self.is_soft

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the hand."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        value_str = f"({self.total})"
        if self.is_soft:
            value_str = f"(soft {self.total})"
        if self.is_blackjack:
            value_str = "(BLACKJACK)"
        if self.is_bust:
            value_str = "(BUST)"
        return f"{cards_str} {value_str}"

    def __repr__(self) -> str:
        return f"Hand({list(self.cards)!r}, total={self.total})"


def evaluate_hand(cards: Iterable[Card]) -> Hand:
    """Compute a hand's totals and flags from its cards."""
    return Hand(tuple(cards))


def settle_hand(player_hand: Hand, dealer_hand: Hand) -> Outcome:
    """
    Settle one player hand against the dealer's final hand.

    Rules are checked in order and the first match wins: player bust,
    player blackjack, dealer bust, dealer blackjack, then totals.
    """
    if player_hand.is_bust:
        return Outcome.LOSS

    if player_hand.is_blackjack and not dealer_hand.is_blackjack:
        return Outcome.BLACKJACK

    if dealer_hand.is_bust:
        return Outcome.WIN

    if dealer_hand.is_blackjack and not player_hand.is_blackjack:
        return Outcome.LOSS

    if player_hand.total > dealer_hand.total:
        return Outcome.WIN
    if player_hand.total < dealer_hand.total:
        return Outcome.LOSS
    return Outcome.PUSH
