"""Statistics API endpoints."""

from fastapi import APIRouter, Header
from typing import Annotated

from api.profile import GameStats, ProfileRepository
from api.schemas import StatsResponse
from api.session import get_session_store, require_session

router = APIRouter()

SessionToken = Annotated[str | None, Header(alias="X-Session-ID")]


def _stats_response(stats: GameStats) -> StatsResponse:
    """Add derived rates to the raw counters."""
    win_rate = None
    if stats.games_played > 0:
        win_rate = stats.wins / stats.games_played

    strategy_accuracy = None
    decisions = stats.strategy_followed + stats.strategy_deviated
    if decisions > 0:
        strategy_accuracy = stats.strategy_followed / decisions

    return StatsResponse(
        **stats.model_dump(),
        win_rate=win_rate,
        strategy_accuracy=strategy_accuracy,
    )


@router.get("")
async def get_stats(session_id: SessionToken = None) -> StatsResponse:
    """Get lifetime statistics."""
    session_id = require_session(session_id)
    profile = ProfileRepository(await get_session_store(), session_id)
    return _stats_response(await profile.get_stats())


@router.delete("")
async def reset_stats(session_id: SessionToken = None) -> StatsResponse:
    """Reset all statistics to zero."""
    session_id = require_session(session_id)
    profile = ProfileRepository(await get_session_store(), session_id)
    return _stats_response(await profile.reset_stats())
