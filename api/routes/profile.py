"""Profile API endpoints: balance, daily bonus and settings."""

from fastapi import APIRouter, Header
from typing import Annotated

from api.profile import ProfileRepository
from api.schemas import (
    BalanceResponse,
    BonusClaimResponse,
    BonusResponse,
    SettingsResponse,
    SettingsUpdateRequest,
)
from api.session import get_session_store, require_session
from config import config
from core.currency import format_chips, format_time_until, get_max_bet, get_min_bet

router = APIRouter()

SessionToken = Annotated[str | None, Header(alias="X-Session-ID")]


async def _profile(session_id: str | None) -> ProfileRepository:
    session_id = require_session(session_id)
    return ProfileRepository(await get_session_store(), session_id)


@router.get("/balance")
async def get_balance(session_id: SessionToken = None) -> BalanceResponse:
    """Get the chip balance and the bet range it allows."""
    profile = await _profile(session_id)
    balance = await profile.get_balance()
    return BalanceResponse(
        balance=balance,
        formatted=format_chips(balance),
        max_bet=get_max_bet(balance, config.game.max_bet),
        min_bet=get_min_bet(balance, config.game.min_bet),
    )


@router.get("/bonus")
async def get_bonus(session_id: SessionToken = None) -> BonusResponse:
    """Check daily bonus availability."""
    profile = await _profile(session_id)
    remaining = await profile.get_time_until_next_bonus()
    return BonusResponse(
        available=remaining == 0,
        time_until_ms=remaining,
        time_until=format_time_until(remaining),
        amount=config.game.daily_bonus_amount,
    )


@router.post("/bonus/claim")
async def claim_bonus(session_id: SessionToken = None) -> BonusClaimResponse:
    """Claim the daily bonus; a claim during the cooldown is refused."""
    profile = await _profile(session_id)
    claimed = await profile.claim_daily_bonus()
    return BonusClaimResponse(claimed=claimed, balance=await profile.get_balance())


@router.get("/settings")
async def get_settings(session_id: SessionToken = None) -> SettingsResponse:
    """Get player settings."""
    profile = await _profile(session_id)
    settings = await profile.get_settings()
    return SettingsResponse(**settings.model_dump())


@router.patch("/settings")
async def update_settings(
    request: SettingsUpdateRequest,
    session_id: SessionToken = None,
) -> SettingsResponse:
    """Update player settings."""
    profile = await _profile(session_id)
    settings = await profile.update_settings(**request.model_dump(exclude_none=True))
    return SettingsResponse(**settings.model_dump())
