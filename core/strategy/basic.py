"""Basic strategy tables for blackjack."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, NamedTuple

from core.cards import Card, Rank
from core.hand import Hand


class Action(Enum):
    """Possible player actions."""

    HIT = "hit"
    STAND = "stand"
    DOUBLE = "double"
    SPLIT = "split"
    SURRENDER = "surrender"
    INSURANCE = "insurance"  # Modeled but never offered

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StrategyRecommendation:
    """The book play for a hand, with its rationale."""

    action: Action
    reason: str
    is_optimal: bool = True


class Advice(NamedTuple):
    """Table entry: the action and a rationale template."""

    action: Action
    reason: str


# Type aliases for clarity
DealerUpcard = int  # 2-11 (11 = Ace)
TableKey = tuple[int, int]

DEALER_VALUES = range(2, 12)

# Hard table rows: everything at or below 8 reads row 8, 17 and up reads row 17
HARD_FLOOR = 8
HARD_CEILING = 17


def dealer_value(card: Card) -> DealerUpcard:
    """Return the dealer upcard value (Ace = 11, face cards = 10)."""
    return card.value


def _pair_label(rank: Rank) -> str:
    return "Aces" if rank is Rank.ACE else f"{rank}s"


class BasicStrategy:
    """
    Basic strategy lookup tables.

    Pre-computed dictionaries for O(1) lookup. Pairs are keyed by rank, soft
    and hard hands by total, each against the dealer upcard value.
    """

    def __init__(self) -> None:
        self._pair_table = self._build_pair_table()
        self._soft_table = self._build_soft_table()
        self._hard_table = self._build_hard_table()

    def recommend(self, hand: Hand, dealer_up_card: Card) -> StrategyRecommendation:
        """
        Get the basic strategy play.

        Pairs take precedence over soft totals, soft totals over hard totals.

        Args:
            hand: The player's hand
            dealer_up_card: The dealer's exposed card

        Returns:
            The recommended action with its rationale
        """
        dealer = dealer_value(dealer_up_card)

        if hand.can_split:
            rank = hand.cards[0].rank
            advice = self._pair_table[(rank, dealer)]
            reason = advice.reason.format(pair=_pair_label(rank), dealer=dealer)
            return StrategyRecommendation(advice.action, reason)

        if hand.is_soft:
            advice = self._soft_table.get((hand.total, dealer))
            if advice is None:
                return StrategyRecommendation(Action.STAND, "Stand on this soft hand.")
            reason = advice.reason.format(total=hand.total, dealer=dealer)
            return StrategyRecommendation(advice.action, reason)

        row = min(max(hand.total, HARD_FLOOR), HARD_CEILING)
        advice = self._hard_table[(row, dealer)]
        reason = advice.reason.format(total=hand.total, dealer=dealer)
        return StrategyRecommendation(advice.action, reason)

    def _build_pair_table(self) -> Mapping[tuple[Rank, int], Advice]:
        """Build pair splitting strategy table."""
        H = Action.HIT
        S = Action.STAND
        P = Action.SPLIT
        D = Action.DOUBLE

        table: dict[tuple[Rank, int], Advice] = {}

        # Aces and 8s: Always split
        for rank in (Rank.ACE, Rank.EIGHT):
            for dealer in DEALER_VALUES:
                table[(rank, dealer)] = Advice(
                    P,
                    "Always split {pair}. This reduces losses and maximizes "
                    "winning potential.",
                )

        # Ten-value pairs: Never split
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            for dealer in DEALER_VALUES:
                table[(rank, dealer)] = Advice(
                    S, "Never split 10-value pairs. A 20 is a strong hand."
                )

        # Pair of 9s
        for dealer in [2, 3, 4, 5, 6, 8, 9]:
            table[(Rank.NINE, dealer)] = Advice(
                P,
                "Split 9s vs dealer 2-6, 8, or 9. Two 9s have better value "
                "than one 18.",
            )
        for dealer in [7, 10, 11]:
            table[(Rank.NINE, dealer)] = Advice(
                S,
                "Stand with 9s vs dealer 7, 10, or Ace. Your 18 is strong enough.",
            )

        # Pair of 7s
        for dealer in range(2, 8):
            table[(Rank.SEVEN, dealer)] = Advice(
                P, "Split 7s vs dealer 2-7. This improves your chances."
            )
        for dealer in [8, 9, 10, 11]:
            table[(Rank.SEVEN, dealer)] = Advice(
                H, "Hit 7s vs dealer 8-Ace. Your 14 is too weak to split."
            )

        # Pair of 6s
        for dealer in range(2, 7):
            table[(Rank.SIX, dealer)] = Advice(
                P, "Split 6s vs dealer 2-6. This reduces losses."
            )
        for dealer in range(7, 12):
            table[(Rank.SIX, dealer)] = Advice(
                H, "Hit 6s vs dealer 7-Ace. Your 12 is too weak to split."
            )

        # Pair of 5s: Never split, play as hard 10
        for dealer in range(2, 10):
            table[(Rank.FIVE, dealer)] = Advice(
                D, "Double 5s vs dealer 2-9 (treat as 10). This maximizes value."
            )
        for dealer in [10, 11]:
            table[(Rank.FIVE, dealer)] = Advice(
                H,
                "Hit 5s vs dealer 10 or Ace. Your 10 is not strong enough to double.",
            )

        # Pair of 4s
        for dealer in [2, 3, 4, 7, 8, 9, 10, 11]:
            table[(Rank.FOUR, dealer)] = Advice(
                H, "Hit 4s vs dealer 2-4, 7-Ace. Your 8 is too weak to split."
            )
        for dealer in [5, 6]:
            table[(Rank.FOUR, dealer)] = Advice(
                P, "Split 4s vs dealer 5-6. This improves your position."
            )

        # Pairs of 2s and 3s
        for rank in (Rank.TWO, Rank.THREE):
            for dealer in range(2, 8):
                table[(rank, dealer)] = Advice(
                    P, "Split {pair} vs dealer 2-7. This improves your chances."
                )
            for dealer in [8, 9, 10, 11]:
                table[(rank, dealer)] = Advice(
                    H,
                    "Hit {pair} vs dealer 8-Ace. Your low total is too weak to split.",
                )

        return table

    def _build_soft_table(self) -> Mapping[TableKey, Advice]:
        """Build soft totals strategy table."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE

        table: dict[TableKey, Advice] = {}

        # Soft 13-14 (A,2 and A,3)
        for total in (13, 14):
            for dealer in DEALER_VALUES:
                table[(total, dealer)] = Advice(
                    H, "Hit soft {total}. You need to improve your hand."
                )
            for dealer in [5, 6]:
                table[(total, dealer)] = Advice(
                    D, "Double soft {total} vs dealer {dealer}. This maximizes value."
                )

        # Soft 15-16 (A,4 and A,5)
        for total in (15, 16):
            for dealer in DEALER_VALUES:
                table[(total, dealer)] = Advice(
                    H, "Hit soft {total}. You need to improve your hand."
                )
            for dealer in [4, 5, 6]:
                table[(total, dealer)] = Advice(
                    D, "Double soft {total} vs dealer 4-6. This maximizes value."
                )

        # Soft 17 (A,6)
        for dealer in [2, 9, 10, 11]:
            table[(17, dealer)] = Advice(
                H, "Hit soft 17 vs dealer 9-Ace. You need to improve."
            )
        for dealer in [3, 4, 5, 6]:
            table[(17, dealer)] = Advice(
                D, "Double soft 17 vs dealer 3-6. This maximizes value."
            )
        for dealer in [7, 8]:
            table[(17, dealer)] = Advice(
                S, "Stand on soft 17 vs dealer 7-8. Your 17 is adequate."
            )

        # Soft 18 (A,7)
        for dealer in [3, 4, 5, 6]:
            table[(18, dealer)] = Advice(
                D, "Double soft 18 vs dealer 3-6. This maximizes value."
            )
        for dealer in [2, 7, 8]:
            table[(18, dealer)] = Advice(
                S, "Stand on soft 18 vs dealer 2, 7-8. Your 18 is strong."
            )
        for dealer in [9, 10, 11]:
            table[(18, dealer)] = Advice(
                H, "Hit soft 18 vs dealer 9-Ace. You need to improve."
            )

        # Soft 19-20 (A,8 and A,9): Always stand
        for total in (19, 20):
            for dealer in DEALER_VALUES:
                table[(total, dealer)] = Advice(
                    S, "Always stand on soft {total}. This is a strong hand."
                )

        return table

    def _build_hard_table(self) -> Mapping[TableKey, Advice]:
        """Build hard totals strategy table."""
        H = Action.HIT
        S = Action.STAND
        D = Action.DOUBLE

        table: dict[TableKey, Advice] = {}

        # Hard 8 or less: Always hit
        for dealer in DEALER_VALUES:
            table[(HARD_FLOOR, dealer)] = Advice(
                H, "Always hit {total} or less. You need to improve your hand."
            )

        # Hard 9
        for dealer in [2, 7, 8, 9, 10, 11]:
            table[(9, dealer)] = Advice(
                H, "Hit 9 vs dealer 2, 7-Ace. You need to improve."
            )
        for dealer in [3, 4, 5, 6]:
            table[(9, dealer)] = Advice(
                D, "Double 9 vs dealer 3-6. This maximizes value."
            )

        # Hard 10
        for dealer in range(2, 10):
            table[(10, dealer)] = Advice(
                D, "Double 10 vs dealer 2-9. This maximizes value."
            )
        for dealer in [10, 11]:
            table[(10, dealer)] = Advice(
                H,
                "Hit 10 vs dealer 10 or Ace. Your 10 is not strong enough to double.",
            )

        # Hard 11
        for dealer in range(2, 11):
            table[(11, dealer)] = Advice(
                D, "Double 11 vs dealer 2-10. This maximizes value."
            )
        table[(11, 11)] = Advice(
            H, "Hit 11 vs dealer Ace. Your 11 is not strong enough to double."
        )

        # Hard 12
        for dealer in [2, 3, 7, 8, 9, 10, 11]:
            table[(12, dealer)] = Advice(
                H, "Hit 12 vs dealer 2-3, 7-Ace. You need to improve."
            )
        for dealer in [4, 5, 6]:
            table[(12, dealer)] = Advice(
                S, "Stand on 12 vs dealer 4-6. Dealer is likely to bust."
            )

        # Hard 13-16
        for total in range(13, 17):
            for dealer in range(2, 7):
                table[(total, dealer)] = Advice(
                    S, "Stand on {total} vs dealer 2-6. Dealer is likely to bust."
                )
            for dealer in range(7, 12):
                table[(total, dealer)] = Advice(
                    H, "Hit {total} vs dealer 7-Ace. Dealer is likely to beat you."
                )

        # Hard 17+: Always stand
        for dealer in DEALER_VALUES:
            table[(HARD_CEILING, dealer)] = Advice(
                S, "Always stand on {total} or higher. This is a strong hand."
            )

        return table

    @property
    def pair_table(self) -> Mapping[tuple[Rank, int], Advice]:
        """Return the pair splitting strategy table."""
        return self._pair_table

    @property
    def soft_table(self) -> Mapping[TableKey, Advice]:
        """Return the soft totals strategy table."""
        return self._soft_table

    @property
    def hard_table(self) -> Mapping[TableKey, Advice]:
        """Return the hard totals strategy table."""
        return self._hard_table


_default_strategy = BasicStrategy()


def recommend(hand: Hand, dealer_up_card: Card) -> StrategyRecommendation:
    """Recommend the basic strategy play for ``hand`` against the upcard."""
    return _default_strategy.recommend(hand, dealer_up_card)


def is_action_optimal(action: Action, recommendation: StrategyRecommendation) -> bool:
    """Check whether ``action`` is exactly the recommended play; no partial credit."""
    return action is recommendation.action
