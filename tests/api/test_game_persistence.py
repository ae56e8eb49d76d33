"""Tests for round persistence (serialization/deserialization)."""

import pytest
import pytest_asyncio
from dataclasses import replace
from httpx import AsyncClient, ASGITransport

from api.main import app
from api.routes.game import (
    SESSION_KEY_GAME,
    _deserialize_card,
    _serialize_card,
    deserialize_state,
    serialize_state,
)
from conftest import cards, hand
from core.cards import Card, Rank, Suit
from core.game import GameState, Phase, apply_action
from core.hand import Outcome


def split_round() -> GameState:
    """A mid-round state with split hands, uneven stakes and a part-used shoe."""
    dealer = hand("6D", "10C")
    return GameState(
        phase=Phase.PLAYER_TURN,
        player_hands=(hand("8S", "3H", "AC"), hand("8H", "KD")),
        active_hand_index=1,
        dealer_hand=dealer,
        dealer_up_card=dealer.cards[0],
        current_bet=50,
        hand_bets=(100, 50),
        total_bet=150,
        result=None,
        winnings=0,
        deck=tuple(cards("8S", "6D", "8H", "10C", "3H", "KD", "AC", "9S", "2C")),
        deck_index=7,
    )


class TestCardSerialization:
    """Tests for card serialization."""

    def test_serialize_card_structure(self):
        assert _serialize_card(Card(Rank.TEN, Suit.HEARTS)) == {"rank": "10", "suit": "hearts"}

    def test_deserialize_card(self):
        assert _deserialize_card({"rank": "Q", "suit": "spades"}) == Card(Rank.QUEEN, Suit.SPADES)

    def test_deserialize_rejects_unknown_rank(self):
        with pytest.raises(ValueError):
            _deserialize_card({"rank": "1", "suit": "spades"})


class TestStateSerialization:
    """Tests for whole-round serialization."""

    def test_round_trip_mid_round(self):
        state = split_round()
        restored = deserialize_state(serialize_state(state))
        assert restored == state
        assert restored.active_hand.total == 18
        assert restored.player_hands[0].total == 12
        assert restored.cards_remaining == 2

    def test_round_trip_finished_round(self):
        state = apply_action(split_round(), "stand")
        assert state.phase is Phase.GAME_OVER
        restored = deserialize_state(serialize_state(state))
        assert restored.result is state.result
        assert restored.winnings == state.winnings
        assert restored.dealer_hand == state.dealer_hand

    def test_serialized_form_is_plain_data(self):
        data = serialize_state(split_round())
        assert data["phase"] == "player-turn"
        assert data["hand_bets"] == [100, 50]
        assert data["result"] is None
        assert data["player_hands"][1] == [
            {"rank": "8", "suit": "hearts"},
            {"rank": "K", "suit": "diamonds"},
        ]

    def test_missing_field_raises(self):
        data = serialize_state(split_round())
        del data["deck"]
        with pytest.raises(KeyError):
            deserialize_state(data)


@pytest_asyncio.fixture
async def client(store):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def session(client):
    response = await client.post("/api/game/new")
    return {"X-Session-ID": response.json()["session_id"]}


async def put_round(store, headers, state):
    session_id = headers["X-Session-ID"]
    session_data = await store.get(session_id)
    session_data[SESSION_KEY_GAME] = serialize_state(state)
    await store.set(session_id, session_data)


class TestStoredRounds:
    """Rounds survive between requests through the session store."""

    @pytest.mark.asyncio
    async def test_resume_and_settle_stored_round(self, client, store, session):
        await put_round(store, session, split_round())

        data = (await client.get("/api/game/state", headers=session)).json()
        assert data["phase"] == "player-turn"
        assert data["active_hand_index"] == 1
        assert data["dealer_hand"] is None
        assert [h["bet"] for h in data["player_hands"]] == [100, 50]

        data = (
            await client.post("/api/game/action", json={"action": "stand"}, headers=session)
        ).json()
        # Dealer 16 draws the 9: 25, both hands win
        assert data["phase"] == "game-over"
        assert data["result"] == Outcome.WIN.value
        assert data["winnings"] == 150
        assert data["balance"] == 10150
        assert data["dealer_hand"]["is_bust"] is True

        stored = await store.get(session["X-Session-ID"])
        assert deserialize_state(stored[SESSION_KEY_GAME]).phase is Phase.GAME_OVER

    @pytest.mark.asyncio
    async def test_finished_round_rejects_actions(self, client, store, session):
        state = apply_action(split_round(), "stand")
        await put_round(store, session, state)
        response = await client.post("/api/game/action", json={"action": "hit"}, headers=session)
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unreadable_round_is_discarded(self, client, store, session, caplog):
        session_id = session["X-Session-ID"]
        session_data = await store.get(session_id)
        session_data[SESSION_KEY_GAME] = {"phase": "shuffling"}
        await store.set(session_id, session_data)

        data = (await client.get("/api/game/state", headers=session)).json()
        assert data["phase"] == "betting"
        assert "unreadable round" in caplog.text

        response = await client.post("/api/game/deal", json={"amount": 100}, headers=session)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_new_game_drops_round_but_keeps_profile(self, client, store, session):
        await put_round(store, session, split_round())
        await client.post("/api/profile/bonus/claim", headers=session)

        data = (await client.post("/api/game/new", headers=session)).json()
        assert data["balance"] == 11000
        stored = await store.get(session["X-Session-ID"])
        assert SESSION_KEY_GAME not in stored

    @pytest.mark.asyncio
    async def test_hint_reflects_active_split_hand(self, client, store, session):
        state = replace(split_round(), active_hand_index=0)
        await put_round(store, session, state)
        data = (await client.get("/api/game/state", headers=session)).json()
        # 12 vs dealer 6 stands
        assert data["recommendation"]["action"] == "stand"
