"""Core blackjack engine - 100% UI-agnostic."""

from core.cards import Card, Deal, Rank, Suit, build_shoe, deal_card, shuffle_cards
from core.hand import Hand, Outcome, evaluate_hand

__all__ = [
    "Card",
    "Deal",
    "Rank",
    "Suit",
    "build_shoe",
    "deal_card",
    "shuffle_cards",
    "Hand",
    "Outcome",
    "evaluate_hand",
]
