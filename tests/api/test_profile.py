"""Tests for the player profile repository."""

import pytest

from api.profile import (
    SESSION_KEY_PROFILE,
    GameStats,
    ProfileRepository,
    Settings,
    StoredProfile,
)
from config import config

DAY_MS = 24 * 60 * 60 * 1000


class FakeClock:
    """A clock the test moves by hand, in seconds."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def clocked_profile(store, clock):
    return ProfileRepository(store, "session-1", clock=clock)


class TestDefaults:
    """A brand new or damaged profile reads as defaults."""

    @pytest.mark.asyncio
    async def test_empty_session_defaults(self, profile):
        assert await profile.get_balance() == config.game.starting_balance
        assert await profile.get_stats() == GameStats()
        assert await profile.get_settings() == Settings()

    @pytest.mark.asyncio
    async def test_missing_session_defaults(self, store):
        profile = ProfileRepository(store, "never-created")
        assert await profile.get_balance() == 10000

    @pytest.mark.asyncio
    async def test_null_balance_defaults(self, store):
        await store.set("s", {SESSION_KEY_PROFILE: {"currency": {"balance": None}}})
        assert await ProfileRepository(store, "s").get_balance() == 10000

    @pytest.mark.asyncio
    async def test_corrupt_profile_defaults_and_logs(self, store, caplog):
        await store.set("s", {SESSION_KEY_PROFILE: {"currency": {"balance": "lots"}}})
        profile = ProfileRepository(store, "s")
        assert await profile.get_balance() == 10000
        assert "unreadable profile" in caplog.text

    @pytest.mark.asyncio
    async def test_partial_profile_fills_in(self, store):
        await store.set("s", {SESSION_KEY_PROFILE: {"stats": {"wins": 4}}})
        profile = ProfileRepository(store, "s")
        stats = await profile.get_stats()
        assert stats.wins == 4
        assert stats.losses == 0
        assert await profile.get_balance() == 10000


class TestBalance:
    """Tests for balance updates."""

    @pytest.mark.asyncio
    async def test_update_balance(self, profile):
        assert await profile.update_balance(150) == 10150
        assert await profile.update_balance(-1150) == 9000
        assert await profile.get_balance() == 9000

    @pytest.mark.asyncio
    async def test_balance_never_negative(self, profile):
        assert await profile.update_balance(-50000) == 0

    @pytest.mark.asyncio
    async def test_fractional_delta_rejected(self, profile):
        with pytest.raises(ValueError):
            await profile.update_balance(-10.5)
        assert await profile.get_balance() == 10000
        # Whole-valued floats are fine
        assert await profile.update_balance(5.0) == 10005

    @pytest.mark.asyncio
    async def test_save_keeps_other_session_keys(self, store, profile):
        session_data = await store.get(profile._session_id)
        session_data["game"] = {"phase": "player-turn"}
        await store.set(profile._session_id, session_data)

        await profile.update_balance(10)
        assert (await store.get(profile._session_id))["game"] == {"phase": "player-turn"}

    @pytest.mark.asyncio
    async def test_profile_round_trip(self, profile):
        stored = StoredProfile()
        stored.currency.balance = 42
        stored.settings.hints_enabled = False
        await profile.save(stored)
        assert await profile.load() == stored


class TestStatsAndSettings:
    """Tests for stats and settings merges."""

    @pytest.mark.asyncio
    async def test_update_stats_merges(self, profile):
        await profile.update_stats(wins=2, games_played=3)
        stats = await profile.update_stats(losses=1)
        assert (stats.wins, stats.losses, stats.games_played) == (2, 1, 3)

    @pytest.mark.asyncio
    async def test_reset_stats(self, profile):
        await profile.update_stats(wins=2, strategy_followed=5)
        assert await profile.reset_stats() == GameStats()
        assert await profile.get_stats() == GameStats()

    @pytest.mark.asyncio
    async def test_update_settings(self, profile):
        settings = await profile.update_settings(hints_enabled=False)
        assert settings == Settings(hints_enabled=False, sound_enabled=False)
        settings = await profile.update_settings(sound_enabled=True)
        assert settings == Settings(hints_enabled=False, sound_enabled=True)


class TestDailyBonus:
    """Tests for the daily bonus cooldown."""

    @pytest.mark.asyncio
    async def test_first_bonus_is_available(self, clocked_profile):
        assert await clocked_profile.is_daily_bonus_available()
        assert await clocked_profile.get_time_until_next_bonus() == 0

    @pytest.mark.asyncio
    async def test_claim_credits_and_starts_cooldown(self, clocked_profile, clock):
        assert await clocked_profile.claim_daily_bonus() is True
        assert await clocked_profile.get_balance() == 11000
        assert await clocked_profile.get_time_until_next_bonus() == DAY_MS

        clock.advance_ms(DAY_MS - 60_000)
        assert not await clocked_profile.is_daily_bonus_available()
        assert await clocked_profile.claim_daily_bonus() is False
        assert await clocked_profile.get_balance() == 11000
        assert await clocked_profile.get_time_until_next_bonus() == 60_000

        clock.advance_ms(60_000)
        assert await clocked_profile.is_daily_bonus_available()
        assert await clocked_profile.claim_daily_bonus() is True
        assert await clocked_profile.get_balance() == 12000

    @pytest.mark.asyncio
    async def test_custom_bonus_amount(self, store, clock):
        profile = ProfileRepository(
            store, "s", clock=clock, bonus_amount=250, bonus_cooldown_ms=1000
        )
        await profile.claim_daily_bonus()
        clock.advance_ms(1000)
        await profile.claim_daily_bonus()
        assert await profile.get_balance() == 10500
