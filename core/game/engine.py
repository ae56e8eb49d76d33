"""Blackjack round engine with state machine."""

import math
from dataclasses import replace
from numbers import Real
from random import Random
from typing import Callable

from transitions import Machine

from core.cards import build_shoe, deal_card
from core.hand import Hand, Outcome, evaluate_hand, settle_hand
from core.game.state import GameState, Phase
from core.strategy.basic import Action
from core.strategy.rules import DEFAULT_RULES, GameRules


class InvalidBet(ValueError):
    """Raised when a round is started with a stake that is not a positive number."""


# State machine states
STATES = [p.name.lower() for p in Phase]

# State machine transitions
TRANSITIONS = [
    {"trigger": "deal", "source": "betting", "dest": "dealing"},
    {"trigger": "offer_actions", "source": "dealing", "dest": "player_turn"},
    {"trigger": "player_action", "source": "player_turn", "dest": "player_turn"},
    {"trigger": "player_done", "source": "player_turn", "dest": "dealer_turn"},
    {"trigger": "dealer_done", "source": "dealer_turn", "dest": "result"},
    {"trigger": "settle", "source": ["dealing", "result"], "dest": "game_over"},
    {"trigger": "surrender", "source": "player_turn", "dest": "game_over"},
]


class _PhaseCursor:
    """Model the shared machine moves through one transition at a time."""


_cursor = _PhaseCursor()
_machine = Machine(
    model=_cursor,
    states=STATES,
    transitions=TRANSITIONS,
    initial="betting",
    auto_transitions=False,
    model_attribute="_machine_state",
)


def _advance(phase: Phase, trigger: str) -> Phase:
    """
    Fire ``trigger`` from ``phase`` and return the destination phase.

    Raises:
        MachineError: If ``trigger`` is not allowed from ``phase``
    """
    _machine.set_state(phase.name.lower(), model=_cursor)
    _cursor.trigger(trigger)
    return Phase[_cursor._machine_state.upper()]


def validate_bet(bet: object) -> None:
    """Raise InvalidBet unless ``bet`` is a positive, finite real number."""
    if isinstance(bet, bool) or not isinstance(bet, Real):
        raise InvalidBet(f"Invalid bet amount: {bet!r}. Bet must be a positive number.")
    if not math.isfinite(bet) or bet <= 0:
        raise InvalidBet(f"Invalid bet amount: {bet!r}. Bet must be a positive number.")


def _replace_hand(hands: tuple[Hand, ...], index: int, hand: Hand) -> tuple[Hand, ...]:
    return hands[:index] + (hand,) + hands[index + 1:]


def start_round(
    bet: float,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """
    Shuffle a fresh shoe and deal the opening hands.

    Cards go player, dealer, player, dealer. A natural on either side settles
    the round at once; otherwise the player acts on the first hand.

    Args:
        bet: Stake for the round
        rules: Table rules
        rng: Random number generator for reproducible rounds

    Returns:
        The new round, in PLAYER_TURN or GAME_OVER

    Raises:
        InvalidBet: If the bet is not a positive finite number
    """
    validate_bet(bet)

    deck = build_shoe(rules.num_decks, rng)
    deck_index = 0
    dealt = []
    for _ in range(4):
        card, deck, deck_index = deal_card(deck, deck_index, rng)
        dealt.append(card)

    player_hand = evaluate_hand(dealt[0::2])
    dealer_hand = evaluate_hand(dealt[1::2])

    state = GameState(
        phase=_advance(Phase.BETTING, "deal"),
        player_hands=(player_hand,),
        active_hand_index=0,
        dealer_hand=dealer_hand,
        dealer_up_card=dealt[1],
        current_bet=bet,
        hand_bets=(bet,),
        total_bet=bet,
        result=None,
        winnings=0,
        deck=deck,
        deck_index=deck_index,
    )

    if player_hand.is_blackjack or dealer_hand.is_blackjack:
        # The hole card counts as revealed for settlement
        return calculate_results(state, rules)

    return replace(state, phase=_advance(state.phase, "offer_actions"))


def _finish_hand(
    state: GameState,
    rules: GameRules,
    rng: Random | None,
) -> GameState:
    """Move to the next hand, or let the dealer play after the last one."""
    if state.active_hand_index < len(state.player_hands) - 1:
        return replace(
            state,
            phase=_advance(state.phase, "player_action"),
            active_hand_index=state.active_hand_index + 1,
        )
    return play_dealer(state, rules, rng)


def hit(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """Player hits (takes another card)."""
    if state.phase is not Phase.PLAYER_TURN:
        return state

    card, deck, deck_index = deal_card(state.deck, state.deck_index, rng)
    hand = state.active_hand.add_card(card)
    state = replace(
        state,
        player_hands=_replace_hand(state.player_hands, state.active_hand_index, hand),
        deck=deck,
        deck_index=deck_index,
    )

    if hand.is_bust:
        return _finish_hand(state, rules, rng)
    return state


def stand(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """Player stands (keeps current hand)."""
    if state.phase is not Phase.PLAYER_TURN:
        return state
    return _finish_hand(state, rules, rng)


def double_down(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """
    Player doubles down.

    The hand's stake doubles, it takes exactly one card, and its turn ends
    whether or not that card busts it.
    """
    if state.phase is not Phase.PLAYER_TURN:
        return state

    index = state.active_hand_index
    if not state.active_hand.can_double:
        return state

    stake = state.hand_bets[index]
    hand_bets = state.hand_bets[:index] + (stake * 2,) + state.hand_bets[index + 1:]

    card, deck, deck_index = deal_card(state.deck, state.deck_index, rng)
    hand = state.active_hand.add_card(card)

    state = replace(
        state,
        player_hands=_replace_hand(state.player_hands, index, hand),
        hand_bets=hand_bets,
        total_bet=state.total_bet + stake,
        deck=deck,
        deck_index=deck_index,
    )
    return _finish_hand(state, rules, rng)


def split(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """
    Player splits a pair.

    The pair becomes two hands in place of the original, each dealt one new
    card and each carrying the original hand's stake. The active index keeps
    pointing at the first of them.
    """
    if state.phase is not Phase.PLAYER_TURN:
        return state

    hand = state.active_hand
    if not hand.can_split or len(state.player_hands) >= rules.max_splits:
        return state

    first, second = hand.cards
    card1, deck, deck_index = deal_card(state.deck, state.deck_index, rng)
    card2, deck, deck_index = deal_card(deck, deck_index, rng)

    index = state.active_hand_index
    stake = state.hand_bets[index]
    new_hands = (evaluate_hand([first, card1]), evaluate_hand([second, card2]))

    return replace(
        state,
        phase=_advance(state.phase, "player_action"),
        player_hands=state.player_hands[:index] + new_hands + state.player_hands[index + 1:],
        hand_bets=state.hand_bets[:index] + (stake, stake) + state.hand_bets[index + 1:],
        total_bet=state.total_bet + stake,
        deck=deck,
        deck_index=deck_index,
    )


def surrender(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """
    Player surrenders.

    Half the active hand's stake (rounded down) is forfeited and the round
    ends outright; any other split hands are not consulted.
    """
    if state.phase is not Phase.PLAYER_TURN:
        return state

    return replace(
        state,
        phase=_advance(state.phase, "surrender"),
        result=Outcome.LOSS,
        winnings=-math.floor(state.active_bet / 2),
    )


def _dealer_should_hit(hand: Hand, rules: GameRules) -> bool:
    """Determine if dealer should hit."""
    if hand.total < 17:
        return True
    if hand.total == 17 and hand.is_soft and not rules.dealer_stands_on_soft_17:
        return True
    return False


def play_dealer(
    state: GameState,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """Dealer draws to 17 (or past soft 17 under H17 rules), then settles."""
    phase = _advance(state.phase, "player_done")

    dealer_hand = state.dealer_hand
    deck = state.deck
    deck_index = state.deck_index
    while _dealer_should_hit(dealer_hand, rules):
        card, deck, deck_index = deal_card(deck, deck_index, rng)
        dealer_hand = dealer_hand.add_card(card)

    return calculate_results(
        replace(
            state,
            phase=_advance(phase, "dealer_done"),
            dealer_hand=dealer_hand,
            deck=deck,
            deck_index=deck_index,
        ),
        rules,
    )


def _round_result(outcomes: list[Outcome]) -> Outcome | None:
    """
    Label the round from its per-hand outcomes.

    Mixed wins and losses across split hands label the round a push, whatever
    the net chip movement.
    """
    if Outcome.BLACKJACK in outcomes:
        return Outcome.BLACKJACK

    has_win = Outcome.WIN in outcomes
    has_loss = Outcome.LOSS in outcomes
    if has_win and not has_loss:
        return Outcome.WIN
    if has_loss and not has_win:
        return Outcome.LOSS
    if Outcome.PUSH in outcomes or (has_win and has_loss):
        return Outcome.PUSH
    return None


def calculate_results(state: GameState, rules: GameRules = DEFAULT_RULES) -> GameState:
    """
    Settle every player hand against the dealer and close the round.

    Blackjack pays ``floor(stake * rules.blackjack_payout)``; wins pay even
    money; losses cost the stake; pushes return it.
    """
    outcomes = []
    winnings = 0

    for i, hand in enumerate(state.player_hands):
        stake = state.hand_bets[i] if i < len(state.hand_bets) else state.current_bet
        outcome = settle_hand(hand, state.dealer_hand)
        outcomes.append(outcome)

        if outcome is Outcome.BLACKJACK:
            winnings += math.floor(stake * rules.blackjack_payout)
        elif outcome is Outcome.WIN:
            winnings += stake
        elif outcome is Outcome.LOSS:
            winnings -= stake

    return replace(
        state,
        phase=_advance(state.phase, "settle"),
        result=_round_result(outcomes),
        winnings=winnings,
    )


ActionHandler = Callable[[GameState, GameRules, Random | None], GameState]

_ACTIONS: dict[Action, ActionHandler] = {
    Action.HIT: hit,
    Action.STAND: stand,
    Action.DOUBLE: double_down,
    Action.SPLIT: split,
    Action.SURRENDER: surrender,
}


def apply_action(
    state: GameState,
    action: Action | str,
    rules: GameRules = DEFAULT_RULES,
    rng: Random | None = None,
) -> GameState:
    """
    Execute a player action.

    Never raises: actions that do not apply to the current phase or hand,
    unknown action names and insurance all return ``state`` unchanged.
    """
    try:
        action = Action(action)
    except ValueError:
        return state

    handler = _ACTIONS.get(action)
    if handler is None:
        return state
    return handler(state, rules, rng)
