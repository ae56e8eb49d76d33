"""Card and shoe model - immutable card representations."""

from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import NamedTuple, Sequence


class Suit(Enum):
    """Card suits."""

    HEARTS = "hearts"
    DIAMONDS = "diamonds"
    CLUBS = "clubs"
    SPADES = "spades"

    def __str__(self) -> str:
        symbols = {
            Suit.HEARTS: "♥",
            Suit.DIAMONDS: "♦",
            Suit.CLUBS: "♣",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks, valued by their face label."""

    ACE = "A"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"

    def __str__(self) -> str:
        return self.value

    @property
    def blackjack_value(self) -> int:
        """Return the blackjack point value (Ace = 11, face cards = 10)."""
        if self is Rank.ACE:
            return 11
        if self in (Rank.JACK, Rank.QUEEN, Rank.KING):
            return 10
        return int(self.value)

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self is Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.blackjack_value == 10


_SUIT_CODES = {
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}


@dataclass(frozen=True, slots=True)
class Card:
    """Immutable playing card."""

    rank: Rank
    suit: Suit

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    @property
    def value(self) -> int:
        """Return the blackjack point value."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', '10h' or 'Td'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = "10" if s[:-1] == "T" else s[:-1]
        suit_str = s[-1]

        try:
            rank = Rank(rank_str)
        except ValueError:
            raise ValueError(f"Invalid rank: {rank_str}") from None
        if suit_str not in _SUIT_CODES:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls(rank, _SUIT_CODES[suit_str])


class Deal(NamedTuple):
    """A dealt card plus the shoe and cursor to continue dealing from."""

    card: Card
    deck: tuple[Card, ...]
    deck_index: int


def new_deck() -> list[Card]:
    """Return a standard 52-card deck in suit-major order."""
    return [Card(rank, suit) for suit in Suit for rank in Rank]


def shuffle_cards(cards: Sequence[Card], rng: Random | None = None) -> tuple[Card, ...]:
    """
    Return a uniformly shuffled copy of ``cards``.

    ``Random.shuffle`` is a Fisher-Yates shuffle: it walks from the last index
    down to 1, swapping each slot with a uniformly chosen index at or below it.
    """
    shuffled = list(cards)
    (rng or Random()).shuffle(shuffled)
    return tuple(shuffled)


def build_shoe(num_decks: int, rng: Random | None = None) -> tuple[Card, ...]:
    """
    Build a shuffled multi-deck shoe.

    Args:
        num_decks: Number of 52-card decks merged into the shoe
        rng: Random number generator for shuffling

    Returns:
        The shuffled shoe; dealing starts at index 0
    """
    if num_decks < 1:
        raise ValueError("Shoe must have at least 1 deck")
    return shuffle_cards(
        [card for _ in range(num_decks) for card in new_deck()],
        rng,
    )


def deal_card(
    deck: tuple[Card, ...],
    deck_index: int,
    rng: Random | None = None,
) -> Deal:
    """
    Deal the card under the cursor.

    An exhausted shoe is reshuffled from its current contents (not rebuilt
    from fresh decks) and dealing restarts from the front.
    """
    if deck_index >= len(deck):
        reshuffled = shuffle_cards(deck, rng)
        return Deal(reshuffled[0], reshuffled, 1)
    return Deal(deck[deck_index], deck, deck_index + 1)
