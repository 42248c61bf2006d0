"""Session segmentation — bucket bars by local trading date.

Dates are resolved through the IANA timezone database (``zoneinfo``) so
daylight-saving transitions move the local 09:30 open correctly.
"""

import logging
from datetime import date, datetime, time
from functools import lru_cache
from typing import Sequence
from zoneinfo import ZoneInfo

from openrange.strategy.levels import compute_levels
from openrange.strategy.models import (
    DEFAULT_LEVEL_MULTIPLIERS,
    Bar,
    InsufficientData,
    InvalidRange,
    Levels,
)

logger = logging.getLogger("openrange.sessions")

SESSION_OPEN = time(9, 30)


@lru_cache(maxsize=32)
def get_zone(tz: str) -> ZoneInfo:
    """Return the ``ZoneInfo`` for an IANA name.

    Raises ``ValueError`` for an unknown zone.
    """
    try:
        return ZoneInfo(tz)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown timezone '{tz}'") from exc


def local_time(epoch: int, tz: str) -> datetime:
    return datetime.fromtimestamp(epoch, tz=get_zone(tz))


def session_key(epoch: int, tz: str) -> date:
    """Local calendar date of *epoch* under *tz*."""
    return local_time(epoch, tz).date()


def group_sessions(bars: Sequence[Bar], tz: str) -> dict[date, list[Bar]]:
    """Partition *bars* into midnight-to-midnight local sessions.

    Returns an insertion-ordered dict (chronological for time-ordered input).
    """
    sessions: dict[date, list[Bar]] = {}
    for bar in bars:
        sessions.setdefault(session_key(bar.time, tz), []).append(bar)
    return sessions


def find_opening_bar(
    session_bars: Sequence[Bar],
    tz: str,
    open_time: time = SESSION_OPEN,
) -> Bar:
    """Return the bar stamped exactly at *open_time* local, else the first bar.

    Raises ``InsufficientData`` if *session_bars* is empty.
    """
    if not session_bars:
        raise InsufficientData("Session has no bars")
    for bar in session_bars:
        t = local_time(bar.time, tz)
        if t.hour == open_time.hour and t.minute == open_time.minute:
            return bar
    return session_bars[0]


def latest_session(bars: Sequence[Bar], tz: str) -> tuple[date, list[Bar]]:
    """Return ``(date, bars)`` of the most recent session.

    Raises ``InsufficientData`` if *bars* is empty.
    """
    sessions = group_sessions(bars, tz)
    if not sessions:
        raise InsufficientData("No bars supplied")
    day = max(sessions)
    return day, sessions[day]


def session_levels(
    bars: Sequence[Bar],
    tz: str,
    multipliers: Sequence[float] = DEFAULT_LEVEL_MULTIPLIERS,
    open_time: time = SESSION_OPEN,
) -> dict[date, Levels]:
    """Compute levels for every session in *bars*.

    Sessions whose opening bar has no range are skipped.
    """
    result: dict[date, Levels] = {}
    for day, day_bars in group_sessions(bars, tz).items():
        opening = find_opening_bar(day_bars, tz, open_time)
        try:
            result[day] = compute_levels(opening.high, opening.low, multipliers)
        except InvalidRange:
            logger.warning(
                "Skipping session %s: opening bar at %d has no range (%.5f)",
                day.isoformat(), opening.time, opening.high,
            )
    return result
