"""Game API endpoints."""

import logging
from fastapi import APIRouter, HTTPException, Header
from typing import Annotated, Any

from api.profile import ProfileRepository
from api.schemas import (
    ActionRequest,
    CardResponse,
    DealRequest,
    GameStateResponse,
    HandResponse,
    RecommendationResponse,
    SessionResponse,
)
from api.session import create_session, extract_session_id, get_session_store, require_session
from api.table import BetRejected, RoundView, Table
from config import config
from core.cards import Card, Rank, Suit
from core.game import GameState, InvalidBet, Phase
from core.hand import Hand, Outcome, evaluate_hand
from core.strategy import GameRules

logger = logging.getLogger(__name__)

router = APIRouter()

# Session data keys
SESSION_KEY_GAME = "game"

SessionToken = Annotated[str | None, Header(alias="X-Session-ID")]


def table_rules() -> GameRules:
    """Build the table rules from configuration."""
    game = config.game
    return GameRules(
        num_decks=game.num_decks,
        dealer_stands_on_soft_17=game.dealer_stands_on_soft_17,
        double_after_split=game.double_after_split,
        max_splits=game.max_splits,
        blackjack_payout=game.blackjack_payout,
        insurance_available=game.insurance_available,
        surrender_available=game.surrender_available,
    )


def _serialize_card(card: Card) -> dict[str, str]:
    """Serialize a card to a dict."""
    return {"rank": card.rank.value, "suit": card.suit.value}


def _deserialize_card(data: dict[str, str]) -> Card:
    """Deserialize a card from a dict."""
    return Card(Rank(data["rank"]), Suit(data["suit"]))


def _serialize_hand(hand: Hand) -> list[dict[str, str]]:
    return [_serialize_card(c) for c in hand.cards]


def _deserialize_hand(data: list[dict[str, str]]) -> Hand:
    return evaluate_hand(_deserialize_card(c) for c in data)


def serialize_state(state: GameState) -> dict[str, Any]:
    """Serialize a round for session storage."""
    return {
        "phase": state.phase.value,
        "player_hands": [_serialize_hand(h) for h in state.player_hands],
        "active_hand_index": state.active_hand_index,
        "dealer_hand": _serialize_hand(state.dealer_hand),
        "dealer_up_card": (
            _serialize_card(state.dealer_up_card) if state.dealer_up_card else None
        ),
        "current_bet": state.current_bet,
        "hand_bets": list(state.hand_bets),
        "total_bet": state.total_bet,
        "result": state.result.value if state.result else None,
        "winnings": state.winnings,
        "deck": [_serialize_card(c) for c in state.deck],
        "deck_index": state.deck_index,
    }


def deserialize_state(data: dict[str, Any]) -> GameState:
    """Restore a round from session data."""
    up_card = data.get("dealer_up_card")
    result = data.get("result")
    return GameState(
        phase=Phase(data["phase"]),
        player_hands=tuple(_deserialize_hand(h) for h in data["player_hands"]),
        active_hand_index=data["active_hand_index"],
        dealer_hand=_deserialize_hand(data["dealer_hand"]),
        dealer_up_card=_deserialize_card(up_card) if up_card else None,
        current_bet=data["current_bet"],
        hand_bets=tuple(data["hand_bets"]),
        total_bet=data["total_bet"],
        result=Outcome(result) if result else None,
        winnings=data["winnings"],
        deck=tuple(_deserialize_card(c) for c in data["deck"]),
        deck_index=data["deck_index"],
    )


async def _load_game(session_id: str) -> GameState | None:
    """Load the current round from the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    raw = session_data.get(SESSION_KEY_GAME)
    if raw is None:
        return None
    try:
        return deserialize_state(raw)
    except (KeyError, TypeError, ValueError):
        logger.warning("Discarding unreadable round for session %s", session_id[:8])
        return None


async def _save_game(session_id: str, state: GameState | None) -> None:
    """Save (or clear) the current round in the session store."""
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    if state is None:
        session_data.pop(SESSION_KEY_GAME, None)
    else:
        session_data[SESSION_KEY_GAME] = serialize_state(state)
    await store.set(session_id, session_data)


async def _table(session_id: str) -> Table:
    store = await get_session_store()
    return Table(ProfileRepository(store, session_id), rules=table_rules())


def card_response(card: Card) -> CardResponse:
    return CardResponse(rank=card.rank.value, suit=card.suit.value, value=card.value)


def _hand_response(hand: Hand, bet: int | None = None) -> HandResponse:
    """Convert a Hand to HandResponse."""
    return HandResponse(
        cards=[card_response(c) for c in hand.cards],
        total=hand.total,
        is_soft=hand.is_soft,
        is_blackjack=hand.is_blackjack,
        is_bust=hand.is_bust,
        bet=bet,
    )


async def _state_response(view: RoundView, profile: ProfileRepository) -> GameStateResponse:
    """Convert a round view to a response, hiding the hole card mid-round."""
    state = view.state
    if state is None:
        return GameStateResponse(
            phase=Phase.BETTING.value,
            player_hands=[],
            active_hand_index=0,
            dealer_hand=None,
            dealer_up_card=None,
            current_bet=0,
            total_bet=0,
            result=None,
            winnings=0,
            cards_remaining=0,
            balance=view.balance,
        )

    dealer_hand = None
    if state.is_over:
        dealer_hand = _hand_response(state.dealer_hand)

    recommendation = None
    settings = await profile.get_settings()
    if view.recommendation is not None and settings.hints_enabled:
        recommendation = RecommendationResponse(
            action=view.recommendation.action.value,
            reason=view.recommendation.reason,
        )

    return GameStateResponse(
        phase=state.phase.value,
        player_hands=[
            _hand_response(hand, state.hand_bets[i] if i < len(state.hand_bets) else None)
            for i, hand in enumerate(state.player_hands)
        ],
        active_hand_index=state.active_hand_index,
        dealer_hand=dealer_hand,
        dealer_up_card=card_response(state.dealer_up_card) if state.dealer_up_card else None,
        current_bet=state.current_bet,
        total_bet=state.total_bet,
        result=state.result.value if state.result else None,
        winnings=state.winnings,
        cards_remaining=state.cards_remaining,
        balance=view.balance,
        recommendation=recommendation,
        last_action_optimal=view.last_action_optimal,
    )


@router.post("/new")
async def new_game(session_id: SessionToken = None) -> SessionResponse:
    """
    Start playing.

    A valid existing token is reused (dropping any round in progress) so the
    profile survives; anything else gets a fresh session.
    """
    if session_id is None or extract_session_id(session_id) is None:
        session_id = await create_session()
    else:
        await _save_game(session_id, None)

    table = await _table(session_id)
    return SessionResponse(session_id=session_id, balance=await table.profile.get_balance())


@router.get("/state")
async def get_state(session_id: SessionToken = None) -> GameStateResponse:
    """Get current game state."""
    session_id = require_session(session_id)
    table = await _table(session_id)
    state = await _load_game(session_id)
    view = RoundView(state, table.advise(state), await table.profile.get_balance())
    return await _state_response(view, table.profile)


@router.post("/deal")
async def deal(request: DealRequest, session_id: SessionToken = None) -> GameStateResponse:
    """Place a bet and deal cards."""
    session_id = require_session(session_id)
    current = await _load_game(session_id)
    if current is not None and not current.is_over:
        raise HTTPException(status_code=409, detail="A round is already in progress")

    table = await _table(session_id)
    try:
        view = await table.deal(request.amount)
    except (InvalidBet, BetRejected) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    await _save_game(session_id, view.state)
    return await _state_response(view, table.profile)


@router.post("/action")
async def player_action(
    request: ActionRequest,
    session_id: SessionToken = None,
) -> GameStateResponse:
    """Execute a player action."""
    session_id = require_session(session_id)
    state = await _load_game(session_id)
    if state is None or state.is_over:
        raise HTTPException(status_code=409, detail="No round in progress")

    table = await _table(session_id)
    view = await table.act(state, request.action)

    await _save_game(session_id, view.state)
    return await _state_response(view, table.profile)


@router.post("/end")
async def end_round(session_id: SessionToken = None) -> GameStateResponse:
    """Clear a finished round from the table."""
    session_id = require_session(session_id)
    state = await _load_game(session_id)
    if state is not None and not state.is_over:
        raise HTTPException(status_code=409, detail="Round still in progress")

    await _save_game(session_id, None)
    table = await _table(session_id)
    view = RoundView(None, None, await table.profile.get_balance())
    return await _state_response(view, table.profile)
