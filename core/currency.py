"""
Chip limits and formatting helpers.

Table limits are passed in by the caller; the configured values live in
``config.game``.
"""

_HOUR_MS = 60 * 60 * 1000
_MINUTE_MS = 60 * 1000


def is_valid_bet(
    bet: float,
    balance: float,
    min_bet: int,
    max_bet: int,
) -> bool:
    """Check the bet is within table limits and covered by the balance."""
    return min_bet <= bet <= max_bet and bet <= balance


def get_max_bet(balance: int, max_bet: int) -> int:
    """Get the largest bet the balance allows at this table."""
    return min(max_bet, balance)


def get_min_bet(balance: int, min_bet: int) -> int:
    """Get the table minimum, or the whole balance when it is below that."""
    return min(min_bet, balance)


def format_currency(amount: float) -> str:
    """Format a chip amount with thousands separators and no decimals."""
    return f"{round(amount):,}"


def format_chips(amount: float) -> str:
    """Format currency with chips label."""
    return f"{format_currency(amount)} chips"


def format_time_until(ms: int) -> str:
    """Format the wait before the next bonus, e.g. '3h 12m' or '45m'."""
    if ms <= 0:
        return "Available now"

    hours = ms // _HOUR_MS
    minutes = (ms % _HOUR_MS) // _MINUTE_MS

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"
