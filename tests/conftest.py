"""Pytest fixtures for blackjack coach tests."""

import os

# Tests never need a live Redis
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
import pytest_asyncio
from random import Random

from hypothesis import strategies as st

from api.profile import ProfileRepository
from api.session import InMemorySessionStore, create_session, set_session_store
from core.cards import Card, Rank, Suit
from core.hand import Hand, evaluate_hand
from core.strategy import BasicStrategy, GameRules


def cards(*specs: str) -> list[Card]:
    """Build cards from short strings like 'AS', '10h', 'K♥'."""
    return [Card.from_string(s) for s in specs]


def hand(*specs: str) -> Hand:
    """Build a hand from short card strings."""
    return evaluate_hand(cards(*specs))


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def empty_hand():
    """An empty player hand."""
    return Hand()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return hand("AS", "KH")


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return hand("AS", "6H")


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return hand("10S", "6H")


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return hand("8S", "8H")


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return hand("10S", "6H", "KC")


@pytest.fixture
def rules():
    """Default table rules."""
    return GameRules()


@pytest.fixture
def hit_soft_17_rules():
    """Single deck rules where the dealer hits soft 17."""
    return GameRules.single_deck()


@pytest.fixture
def basic_strategy():
    """Basic strategy tables."""
    return BasicStrategy()


@pytest.fixture
def store():
    """A fresh in-memory session store, installed as the global store."""
    store = InMemorySessionStore()
    set_session_store(store)
    yield store
    set_session_store(None)


@pytest_asyncio.fixture
async def profile(store):
    """A profile in an empty session."""
    return ProfileRepository(store, await create_session())


# Hypothesis strategies for property-based testing
@st.composite
def card_strategy(draw):
    """Generate a random card."""
    rank = draw(st.sampled_from(list(Rank)))
    suit = draw(st.sampled_from(list(Suit)))
    return Card(rank, suit)


@st.composite
def hand_strategy(draw, min_cards=2, max_cards=5):
    """Generate a random hand."""
    return evaluate_hand(
        draw(st.lists(card_strategy(), min_size=min_cards, max_size=max_cards))
    )
