"""Tests for card and shoe model."""

import pytest
from collections import Counter
from random import Random

from hypothesis import given, strategies as st

from core.cards import (
    Card,
    Deal,
    Rank,
    Suit,
    build_shoe,
    deal_card,
    new_deck,
    shuffle_cards,
)


class TestCard:
    """Tests for Card class."""

    def test_card_creation(self):
        """Test basic card creation."""
        card = Card(Rank.ACE, Suit.SPADES)
        assert card.rank == Rank.ACE
        assert card.suit == Suit.SPADES

    def test_card_values(self):
        """Test card point values."""
        assert Card(Rank.ACE, Suit.SPADES).value == 11
        assert Card(Rank.TWO, Suit.HEARTS).value == 2
        assert Card(Rank.NINE, Suit.CLUBS).value == 9
        assert Card(Rank.TEN, Suit.DIAMONDS).value == 10
        assert Card(Rank.JACK, Suit.SPADES).value == 10
        assert Card(Rank.QUEEN, Suit.HEARTS).value == 10
        assert Card(Rank.KING, Suit.CLUBS).value == 10

    def test_card_is_ace(self):
        """Test ace detection."""
        assert Card(Rank.ACE, Suit.SPADES).is_ace
        assert not Card(Rank.KING, Suit.SPADES).is_ace

    def test_card_is_ten_value(self):
        """Test ten-value card detection."""
        for rank in (Rank.TEN, Rank.JACK, Rank.QUEEN, Rank.KING):
            assert Card(rank, Suit.HEARTS).is_ten_value
        assert not Card(Rank.NINE, Suit.HEARTS).is_ten_value
        assert not Card(Rank.ACE, Suit.HEARTS).is_ten_value

    def test_card_string(self):
        """Test card string representation."""
        assert str(Card(Rank.ACE, Suit.SPADES)) == "A♠"
        assert str(Card(Rank.TEN, Suit.HEARTS)) == "10♥"

    def test_card_is_immutable(self):
        """Test that cards cannot be modified."""
        card = Card(Rank.ACE, Suit.SPADES)
        with pytest.raises(AttributeError):
            card.rank = Rank.KING

    def test_enum_values(self):
        """Test the string values used for storage."""
        assert [s.value for s in Suit] == ["hearts", "diamonds", "clubs", "spades"]
        assert Rank.ACE.value == "A"
        assert Rank.TEN.value == "10"
        assert Rank("K") is Rank.KING

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("AS", Card(Rank.ACE, Suit.SPADES)),
            ("10h", Card(Rank.TEN, Suit.HEARTS)),
            ("Td", Card(Rank.TEN, Suit.DIAMONDS)),
            ("K♥", Card(Rank.KING, Suit.HEARTS)),
            ("2♣", Card(Rank.TWO, Suit.CLUBS)),
            (" qc ", Card(Rank.QUEEN, Suit.CLUBS)),
        ],
    )
    def test_from_string(self, text, expected):
        """Test parsing card strings."""
        assert Card.from_string(text) == expected

    @pytest.mark.parametrize("text", ["", "A", "1S", "11H", "AX", "ZZ"])
    def test_from_string_invalid(self, text):
        """Test that malformed card strings raise ValueError."""
        with pytest.raises(ValueError):
            Card.from_string(text)


class TestDeck:
    """Tests for deck construction and shuffling."""

    def test_new_deck_has_52_unique_cards(self):
        """Test a fresh deck holds every card once."""
        deck = new_deck()
        assert len(deck) == 52
        assert len(set(deck)) == 52

    def test_new_deck_is_suit_major(self):
        """Test deck order: all hearts first, spades last."""
        deck = new_deck()
        assert deck[0] == Card(Rank.ACE, Suit.HEARTS)
        assert deck[12] == Card(Rank.KING, Suit.HEARTS)
        assert deck[13] == Card(Rank.ACE, Suit.DIAMONDS)
        assert deck[-1] == Card(Rank.KING, Suit.SPADES)

    def test_shuffle_does_not_mutate_input(self, rng):
        """Test shuffling returns a new sequence."""
        deck = new_deck()
        original = list(deck)
        shuffled = shuffle_cards(deck, rng)
        assert deck == original
        assert isinstance(shuffled, tuple)

    def test_shuffle_is_reproducible(self):
        """Test the same seed gives the same order."""
        first = shuffle_cards(new_deck(), Random(7))
        second = shuffle_cards(new_deck(), Random(7))
        assert first == second
        assert first != tuple(new_deck())

    @given(seed=st.integers(min_value=0, max_value=2**32))
    def test_shuffle_preserves_multiset(self, seed):
        """Test that shuffling is a permutation."""
        cards = new_deck() * 2
        shuffled = shuffle_cards(cards, Random(seed))
        assert Counter(shuffled) == Counter(cards)


class TestShoe:
    """Tests for shoe building and dealing."""

    @pytest.mark.parametrize("num_decks", [1, 2, 6, 8])
    def test_shoe_size(self, num_decks, rng):
        """Test shoe size for each deck count."""
        shoe = build_shoe(num_decks, rng)
        assert len(shoe) == 52 * num_decks
        assert Counter(shoe) == Counter(new_deck() * num_decks)

    def test_shoe_rejects_zero_decks(self, rng):
        """Test that an empty shoe cannot be built."""
        with pytest.raises(ValueError):
            build_shoe(0, rng)

    def test_deal_advances_cursor(self, rng):
        """Test dealing returns the card under the cursor."""
        shoe = build_shoe(1, rng)
        deal = deal_card(shoe, 0, rng)
        assert isinstance(deal, Deal)
        assert deal.card == shoe[0]
        assert deal.deck is shoe
        assert deal.deck_index == 1

        card, deck, index = deal_card(deal.deck, deal.deck_index, rng)
        assert card == shoe[1]
        assert index == 2

    def test_exhausted_shoe_is_reshuffled(self):
        """Test dealing past the end reshuffles the same cards."""
        shoe = build_shoe(1, Random(1))
        deal = deal_card(shoe, len(shoe), Random(2))

        assert deal.deck_index == 1
        assert deal.card == deal.deck[0]
        assert len(deal.deck) == 52
        assert Counter(deal.deck) == Counter(shoe)
        assert deal.deck != shoe

    def test_reshuffle_keeps_depleted_contents(self):
        """Test that a short shoe is reshuffled as-is, not rebuilt."""
        short = tuple(Card(Rank.FIVE, s) for s in Suit)
        card, deck, index = deal_card(short, 4, Random(3))
        assert len(deck) == 4
        assert card.rank == Rank.FIVE
        assert index == 1
