"""Player profile storage: balance, statistics, settings and the daily bonus."""

import logging
import time
from typing import Any, Callable

from pydantic import BaseModel, Field, ValidationError, field_validator

from api.session import SessionStore
from config import config

logger = logging.getLogger(__name__)

# Session data key
SESSION_KEY_PROFILE = "profile"

Clock = Callable[[], float]


class CurrencyState(BaseModel):
    """Chip balance and the last bonus claim (Unix ms)."""

    balance: int = config.game.starting_balance
    last_daily_bonus: int | None = None

    @field_validator("balance", mode="before")
    @classmethod
    def _default_missing_balance(cls, value: Any) -> Any:
        return config.game.starting_balance if value is None else value


class GameStats(BaseModel):
    """Lifetime counters."""

    games_played: int = 0
    wins: int = 0
    losses: int = 0
    pushes: int = 0
    blackjacks: int = 0
    strategy_followed: int = 0
    strategy_deviated: int = 0


class Settings(BaseModel):
    """Player preferences."""

    hints_enabled: bool = True
    sound_enabled: bool = False


class StoredProfile(BaseModel):
    """Everything persisted for one player."""

    currency: CurrencyState = Field(default_factory=CurrencyState)
    stats: GameStats = Field(default_factory=GameStats)
    settings: Settings = Field(default_factory=Settings)


class ProfileRepository:
    """
    Read and write a player's profile inside their session.

    Unreadable profiles fall back to defaults, so callers can always read a
    balance.
    """

    def __init__(
        self,
        store: SessionStore,
        session_id: str,
        clock: Clock = time.time,
        bonus_amount: int | None = None,
        bonus_cooldown_ms: int | None = None,
    ) -> None:
        self._store = store
        self._session_id = session_id
        self._clock = clock
        self._bonus_amount = bonus_amount if bonus_amount is not None else config.game.daily_bonus_amount
        self._bonus_cooldown_ms = (
            bonus_cooldown_ms
            if bonus_cooldown_ms is not None
            else config.game.daily_bonus_cooldown_ms
        )

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    async def load(self) -> StoredProfile:
        """Load the stored profile, or defaults if absent or unreadable."""
        session_data = await self._store.get(self._session_id) or {}
        raw = session_data.get(SESSION_KEY_PROFILE)
        if raw is None:
            return StoredProfile()
        try:
            return StoredProfile.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "Discarding unreadable profile for session %s: %s",
                self._session_id[:8],
                exc.error_count(),
            )
            return StoredProfile()

    async def save(self, profile: StoredProfile) -> None:
        """Persist the profile, keeping the rest of the session intact."""
        session_data = await self._store.get(self._session_id) or {}
        session_data[SESSION_KEY_PROFILE] = profile.model_dump()
        await self._store.set(self._session_id, session_data)

    async def get_balance(self) -> int:
        """Get current balance."""
        return (await self.load()).currency.balance

    async def update_balance(self, delta: int) -> int:
        """
        Apply a signed chip delta; the balance never drops below zero.

        Raises:
            ValueError: If ``delta`` is not a whole number of chips
        """
        if delta != int(delta):
            raise ValueError(f"Balance changes must be whole chips, got {delta!r}")
        profile = await self.load()
        profile.currency.balance = max(0, profile.currency.balance + int(delta))
        await self.save(profile)
        return profile.currency.balance

    async def get_stats(self) -> GameStats:
        """Get game statistics."""
        return (await self.load()).stats

    async def update_stats(self, **updates: int) -> GameStats:
        """Merge counter updates field by field."""
        profile = await self.load()
        profile.stats = profile.stats.model_copy(update=updates)
        await self.save(profile)
        return profile.stats

    async def reset_stats(self) -> GameStats:
        """Zero every counter."""
        profile = await self.load()
        profile.stats = GameStats()
        await self.save(profile)
        return profile.stats

    async def get_settings(self) -> Settings:
        """Get settings."""
        return (await self.load()).settings

    async def update_settings(self, **updates: bool) -> Settings:
        """Merge settings updates field by field."""
        profile = await self.load()
        profile.settings = profile.settings.model_copy(update=updates)
        await self.save(profile)
        return profile.settings

    async def get_time_until_next_bonus(self) -> int:
        """Milliseconds until the daily bonus can be claimed (0 if available)."""
        last = (await self.load()).currency.last_daily_bonus
        if last is None:
            return 0
        return max(0, self._bonus_cooldown_ms - (self._now_ms() - last))

    async def is_daily_bonus_available(self) -> bool:
        """Check if daily bonus is available."""
        return await self.get_time_until_next_bonus() == 0

    async def claim_daily_bonus(self) -> bool:
        """Credit the daily bonus if the cooldown has passed."""
        if not await self.is_daily_bonus_available():
            return False

        profile = await self.load()
        profile.currency.balance += self._bonus_amount
        profile.currency.last_daily_bonus = self._now_ms()
        await self.save(profile)
        logger.info("Daily bonus of %d claimed", self._bonus_amount)
        return True
