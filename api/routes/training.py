"""Training drill API endpoints."""

from random import Random
from fastapi import APIRouter, HTTPException, Header
from typing import Annotated

from api.routes.game import card_response
from api.schemas import (
    StrategyDrillResponse,
    StrategyVerifyRequest,
    StrategyVerifyResponse,
)
from api.session import get_session_store, require_session
from core.cards import Card, build_shoe
from core.hand import evaluate_hand
from core.strategy import Action, StrategyRecommendation, is_action_optimal, recommend

router = APIRouter()

# Session data keys
SESSION_KEY_DRILL = "drill"

SessionToken = Annotated[str | None, Header(alias="X-Session-ID")]


def deal_drill(rng: Random | None = None) -> tuple[list[Card], Card]:
    """
    Deal a strategy question: two player cards and a dealer upcard.

    Naturals are redealt, since there is no decision to make on them.
    """
    rng = rng or Random()
    while True:
        shoe = build_shoe(1, rng)
        player_cards = [shoe[0], shoe[1]]
        if not evaluate_hand(player_cards).is_blackjack:
            return player_cards, shoe[2]


@router.post("/strategy/drill")
async def strategy_drill(session_id: SessionToken = None) -> StrategyDrillResponse:
    """Generate a strategy drill."""
    session_id = require_session(session_id)
    player_cards, dealer_up_card = deal_drill()
    hand = evaluate_hand(player_cards)
    advice = recommend(hand, dealer_up_card)

    # Store the answer for verification
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    session_data[SESSION_KEY_DRILL] = {
        "correct_action": advice.action.value,
        "reason": advice.reason,
    }
    await store.set(session_id, session_data)

    return StrategyDrillResponse(
        player_cards=[card_response(c) for c in player_cards],
        player_total=hand.total,
        is_soft=hand.is_soft,
        is_pair=hand.can_split,
        dealer_up_card=card_response(dealer_up_card),
    )


@router.post("/strategy/verify")
async def verify_strategy(
    request: StrategyVerifyRequest,
    session_id: SessionToken = None,
) -> StrategyVerifyResponse:
    """Grade the answer to the current drill; each drill can be answered once."""
    session_id = require_session(session_id)
    store = await get_session_store()
    session_data = await store.get(session_id) or {}
    drill = session_data.pop(SESSION_KEY_DRILL, None)
    if drill is None:
        raise HTTPException(status_code=409, detail="No strategy drill in progress")
    await store.set(session_id, session_data)

    advice = StrategyRecommendation(Action(drill["correct_action"]), drill["reason"])
    return StrategyVerifyResponse(
        correct=is_action_optimal(Action(request.action), advice),
        correct_action=advice.action.value,
        reason=advice.reason,
    )
