"""Session orchestration: glue between the engine, the advisor and a profile."""

import logging
from dataclasses import dataclass
from random import Random

from api.profile import ProfileRepository
from config import config
from core.currency import is_valid_bet
from core.game import GameState, Phase, apply_action, start_round, validate_bet
from core.hand import Outcome
from core.strategy import (
    DEFAULT_RULES,
    Action,
    GameRules,
    StrategyRecommendation,
    is_action_optimal,
    recommend,
)

logger = logging.getLogger(__name__)

# Counter bumped for each round label; a blackjack also counts as a win
_RESULT_COUNTERS: dict[Outcome, tuple[str, ...]] = {
    Outcome.WIN: ("wins",),
    Outcome.LOSS: ("losses",),
    Outcome.PUSH: ("pushes",),
    Outcome.BLACKJACK: ("blackjacks", "wins"),
}


class BetRejected(ValueError):
    """Raised when a bet is outside the table limits or exceeds the balance."""


@dataclass(frozen=True)
class RoundView:
    """What a caller needs after each step of a round."""

    state: GameState | None
    recommendation: StrategyRecommendation | None
    balance: int
    last_action_optimal: bool | None = None


class Table:
    """
    One player's seat at the table.

    The engine stays pure; this class owns every side effect of a round:
    checking the bet against the bankroll, grading decisions against basic
    strategy, and applying ``winnings`` and counters once the round settles.
    """

    def __init__(
        self,
        profile: ProfileRepository,
        rules: GameRules = DEFAULT_RULES,
        rng: Random | None = None,
        min_bet: int | None = None,
        max_bet: int | None = None,
    ) -> None:
        self.profile = profile
        self.rules = rules
        self._rng = rng
        self.min_bet = min_bet if min_bet is not None else config.game.min_bet
        self.max_bet = max_bet if max_bet is not None else config.game.max_bet

    def advise(self, state: GameState | None) -> StrategyRecommendation | None:
        """Recommend a play for the active hand, if the player is to act."""
        if state is None or state.phase is not Phase.PLAYER_TURN:
            return None
        if state.dealer_up_card is None:
            return None
        return recommend(state.active_hand, state.dealer_up_card)

    async def deal(self, bet: int) -> RoundView:
        """
        Start a round.

        Raises:
            InvalidBet: If the bet is not a positive finite number
            BetRejected: If the bet is not whole chips, is outside table
                limits or is over the balance
        """
        validate_bet(bet)
        if bet != int(bet):
            raise BetRejected(f"Bets must be whole chips, got {bet!r}")
        bet = int(bet)

        balance = await self.profile.get_balance()
        if not is_valid_bet(bet, balance, self.min_bet, self.max_bet):
            raise BetRejected(
                f"Bet must be between {self.min_bet} and {self.max_bet} "
                f"and no more than the balance of {balance}"
            )

        start = start_round(bet, self.rules, self._rng)
        logger.info("Round started: bet=%s phase=%s", bet, start.phase.value)
        return await self._view(start)

    async def act(self, state: GameState | None, action: Action | str) -> RoundView:
        """
        Apply a player decision and grade it against basic strategy.

        Outside the player's turn nothing happens and nothing is recorded.
        """
        if state is None or state.phase is not Phase.PLAYER_TURN:
            return RoundView(state, None, await self.profile.get_balance())

        action = Action(action)
        optimal = None
        advice = self.advise(state)
        if advice is not None:
            optimal = is_action_optimal(action, advice)
            stats = await self.profile.get_stats()
            if optimal:
                await self.profile.update_stats(strategy_followed=stats.strategy_followed + 1)
            else:
                await self.profile.update_stats(strategy_deviated=stats.strategy_deviated + 1)

        next_state = apply_action(state, action, self.rules, self._rng)
        return await self._view(next_state, optimal)

    async def _view(self, state: GameState, optimal: bool | None = None) -> RoundView:
        if state.phase is Phase.GAME_OVER:
            balance = await self._settle(state)
        else:
            balance = await self.profile.get_balance()
        return RoundView(state, self.advise(state), balance, optimal)

    async def _settle(self, state: GameState) -> int:
        """Apply the round's net winnings and bump the result counters."""
        balance = await self.profile.update_balance(state.winnings)

        stats = await self.profile.get_stats()
        updates = {"games_played": stats.games_played + 1}
        for counter in _RESULT_COUNTERS.get(state.result, ()):
            updates[counter] = getattr(stats, counter) + 1
        await self.profile.update_stats(**updates)

        logger.info(
            "Round settled: result=%s winnings=%s balance=%s",
            state.result.value if state.result else None,
            state.winnings,
            balance,
        )
        return balance
