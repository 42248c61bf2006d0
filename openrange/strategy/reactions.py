"""Reaction analysis — how price has behaved at each derived level.

Every level gets its own ``LevelScanner``, a small state machine fed one bar
at a time:

    AWAY ──near bar──► TOUCHING ──close through level──► RESOLVED_BREAK
                          │
                          ├──close back on approach side──► RESOLVED_BOUNCE
                          │
                          └──lookahead exhausted──► UNRESOLVED

The outcome is decided by the bars after the touch. The touching bar only
decides it when its range spans the whole band and it closes on the far
side (a gap or engulfing bar), which is an immediate break.

A resolved (or unresolved) touch stays "in contact" until a bar sits
strictly on one side of the tolerance band again; only then does the
scanner return to ``AWAY`` and become able to count a new touch.  Bars are
scanned session by session.  A touch still pending at the end of a session
becomes unresolved, but the side price was last on carries over, so the
next session's first bar can touch.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from openrange.strategy.models import (
    DEFAULT_LOOKAHEAD_BARS,
    DEFAULT_TOLERANCE_PCT,
    Bar,
    LevelStat,
    Levels,
    PatternStats,
)
from openrange.strategy.sessions import group_sessions

logger = logging.getLogger("openrange.reactions")


class Position(str, Enum):
    """Where a bar sits relative to a level's tolerance band."""

    ABOVE = "above"
    BELOW = "below"
    NEAR = "near"


class ScanState(str, Enum):
    AWAY = "away"
    TOUCHING = "touching"
    RESOLVED_BOUNCE = "resolved-bounce"
    RESOLVED_BREAK = "resolved-break"
    UNRESOLVED = "unresolved"


@dataclass
class TouchEvent:
    """One touch of a level and how it played out."""

    time: int
    approach: Position  # side price came from: ABOVE or BELOW
    outcome: ScanState = ScanState.TOUCHING


def tolerance_band(price: float, tolerance_pct: float) -> float:
    return price * tolerance_pct


def bar_position(bar: Bar, price: float, band: float) -> Position:
    """Classify *bar* as strictly above, strictly below, or near *price*.

    A bar is near when its high-low range intersects
    ``[price - band, price + band]``.
    """
    if bar.low > price + band:
        return Position.ABOVE
    if bar.high < price - band:
        return Position.BELOW
    return Position.NEAR


def is_near(bar: Bar, price: float, tolerance_pct: float = DEFAULT_TOLERANCE_PCT) -> bool:
    return bar_position(bar, price, tolerance_band(price, tolerance_pct)) is Position.NEAR


class LevelScanner:
    """Per-level touch / bounce / break state machine.

    Args:
        key: Level label, e.g. ``"A1"``.
        price: Level price.
        tolerance_pct: Band half-width as a fraction of *price*.
        lookahead_bars: Bars after the touch bar allowed to resolve it.
    """

    def __init__(
        self,
        key: str,
        price: float,
        tolerance_pct: float = DEFAULT_TOLERANCE_PCT,
        lookahead_bars: int = DEFAULT_LOOKAHEAD_BARS,
    ) -> None:
        self.key = key
        self.price = price
        self.band = tolerance_band(price, tolerance_pct)
        self.lookahead_bars = lookahead_bars
        self.state = ScanState.AWAY
        self.events: list[TouchEvent] = []
        self._side: Optional[Position] = None
        self._window = 0

    # ── Counts ───────────────────────────────────────────────────────────

    @property
    def touches(self) -> int:
        return len(self.events)

    @property
    def bounces(self) -> int:
        return sum(1 for e in self.events if e.outcome is ScanState.RESOLVED_BOUNCE)

    @property
    def breaks(self) -> int:
        return sum(1 for e in self.events if e.outcome is ScanState.RESOLVED_BREAK)

    def to_stat(self) -> LevelStat:
        return LevelStat(
            key=self.key,
            touches=self.touches,
            bounces=self.bounces,
            breaks=self.breaks,
        )

    # ── Transitions ──────────────────────────────────────────────────────

    def feed(self, bar: Bar) -> ScanState:
        """Advance the machine by one bar and return the new state."""
        pos = bar_position(bar, self.price, self.band)

        if self.state is ScanState.AWAY:
            if pos is Position.NEAR:
                # A touch needs an observed approach side
                if self._side is not None:
                    self._start_touch(bar)
            else:
                self._side = pos
            return self.state

        if self.state is ScanState.TOUCHING:
            self._window += 1
            self._classify(bar)

        if pos is not Position.NEAR and self.state is not ScanState.TOUCHING:
            self.state = ScanState.AWAY
            self._side = pos
        return self.state

    def finish(self) -> None:
        """Close the current session: pending touches become unresolved."""
        if self.state is ScanState.TOUCHING:
            self._resolve(ScanState.UNRESOLVED)
        self.state = ScanState.AWAY
        self._window = 0

    def _start_touch(self, bar: Bar) -> None:
        self.events.append(TouchEvent(time=bar.time, approach=self._side))
        self.state = ScanState.TOUCHING
        self._window = 0
        if self._engulfs(bar):
            self._resolve(ScanState.RESOLVED_BREAK)

    def _engulfs(self, bar: Bar) -> bool:
        upper = self.price + self.band
        lower = self.price - self.band
        if bar.low >= lower or bar.high <= upper:
            return False
        if self.events[-1].approach is Position.BELOW:
            return bar.close > upper
        return bar.close < lower

    def _classify(self, bar: Bar) -> None:
        approach = self.events[-1].approach
        upper = self.price + self.band
        lower = self.price - self.band

        if approach is Position.BELOW:
            broke, held = bar.close > upper, bar.close < lower
        else:
            broke, held = bar.close < lower, bar.close > upper

        if broke:
            self._resolve(ScanState.RESOLVED_BREAK)
        elif held:
            self._resolve(ScanState.RESOLVED_BOUNCE)
        elif self._window >= self.lookahead_bars:
            self._resolve(ScanState.UNRESOLVED)

    def _resolve(self, outcome: ScanState) -> None:
        self.events[-1].outcome = outcome
        self.state = outcome


def analyze_reactions(
    bars: Sequence[Bar],
    tz: str,
    levels: Levels,
    tolerance_pct: float = DEFAULT_TOLERANCE_PCT,
    lookahead_bars: int = DEFAULT_LOOKAHEAD_BARS,
) -> PatternStats:
    """Count touches, bounces and breaks at every level across all sessions.

    Args:
        bars: Chronological bars, possibly spanning several sessions.
        tz: IANA timezone used to split sessions.
        levels: Levels to evaluate (usually the latest session's).
        tolerance_pct: Band half-width as a fraction of each level price.
        lookahead_bars: Bars after a touch allowed to resolve it.

    Returns:
        ``PatternStats`` with all eight levels (zero rows when untouched
        or when *bars* is empty).
    """
    if tolerance_pct < 0:
        raise ValueError(f"tolerance_pct must be >= 0, got {tolerance_pct}")
    if lookahead_bars < 1:
        raise ValueError(f"lookahead_bars must be >= 1, got {lookahead_bars}")

    if not bars:
        return PatternStats.empty()

    scanners = [
        LevelScanner(key, price, tolerance_pct, lookahead_bars)
        for key, price, _ in levels.items()
    ]

    for day_bars in group_sessions(bars, tz).values():
        for bar in day_bars:
            for scanner in scanners:
                scanner.feed(bar)
        for scanner in scanners:
            scanner.finish()

    stats = PatternStats({s.key: s.to_stat() for s in scanners})
    for row in stats.rows:
        if row.touches:
            logger.debug(
                "Level %s: %d touches, %d bounces, %d breaks",
                row.key, row.touches, row.bounces, row.breaks,
            )
    return stats
