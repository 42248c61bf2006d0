"""Analysis pipeline — bars in, levels / reaction stats / signals out.

Composes the three stages for the latest session in the bar window:

    1. Bucket bars into local sessions; pick the latest one.
    2. Opening bar (09:30 local, else the session's first bar) → levels.
    3. Reaction stats for those levels over every bar supplied.
    4. Signals from the trailing bars.

Absence of data and degenerate opening bars are expected states (e.g.
before the open) and yield an empty result rather than an error.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Optional, Sequence

from openrange.config import AnalysisConfig
from openrange.strategy.levels import compute_levels
from openrange.strategy.models import (
    Bar,
    InsufficientData,
    InvalidRange,
    Levels,
    PatternStats,
    Signal,
)
from openrange.strategy.reactions import analyze_reactions
from openrange.strategy.sessions import find_opening_bar, latest_session, session_levels
from openrange.strategy.signals import generate_signals

logger = logging.getLogger("openrange")


@dataclass(frozen=True)
class AnalysisResult:
    """Everything the presentation layer needs for one analysis pass."""

    timezone: str
    session_date: Optional[date] = None
    opening_bar: Optional[Bar] = None
    levels: Optional[Levels] = None
    stats: PatternStats = field(default_factory=PatternStats.empty)
    signals: list[Signal] = field(default_factory=list)
    session_levels: dict[date, Levels] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "timezone": self.timezone,
            "session_date": self.session_date.isoformat() if self.session_date else None,
            "opening_bar": asdict(self.opening_bar) if self.opening_bar else None,
            "levels": self.levels.as_dict() if self.levels else None,
            "stats": [
                {
                    "key": r.key,
                    "touches": r.touches,
                    "bounces": r.bounces,
                    "breaks": r.breaks,
                    "bounce_rate": round(r.bounce_rate, 4),
                }
                for r in self.stats.rows
            ],
            "signals": [asdict(s) for s in self.signals],
            "session_levels": {
                d.isoformat(): lv.as_dict() for d, lv in self.session_levels.items()
            },
        }


def run_analysis(
    bars: Sequence[Bar],
    tz: str,
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    """Run levels → reactions → signals for the latest session in *bars*."""
    config = config or AnalysisConfig()

    try:
        day, day_bars = latest_session(bars, tz)
        opening = find_opening_bar(day_bars, tz, config.session_open)
    except InsufficientData as exc:
        logger.info("Nothing to analyse: %s", exc)
        return AnalysisResult(timezone=tz)

    history = session_levels(bars, tz, config.multipliers, config.session_open)

    try:
        levels = compute_levels(opening.high, opening.low, config.multipliers)
    except InvalidRange as exc:
        logger.warning("Session %s skipped: %s", day.isoformat(), exc)
        return AnalysisResult(
            timezone=tz,
            session_date=day,
            opening_bar=opening,
            session_levels=history,
        )

    stats = analyze_reactions(
        bars, tz, levels,
        tolerance_pct=config.tolerance_pct,
        lookahead_bars=config.lookahead_bars,
    )
    signals = generate_signals(
        bars, levels, stats,
        tz=tz,
        tolerance_pct=config.tolerance_pct,
        confidence_threshold=config.confidence_threshold,
        rr_ratio=config.rr_ratio,
        stop_range_fraction=config.stop_range_fraction,
        window_bars=config.window_bars,
        min_touches=config.min_touches,
    )

    logger.info(
        "Session %s: range %.5f, %d touches, %d signal(s)",
        day.isoformat(), levels.range,
        sum(r.touches for r in stats.rows), len(signals),
    )
    return AnalysisResult(
        timezone=tz,
        session_date=day,
        opening_bar=opening,
        levels=levels,
        stats=stats,
        signals=signals,
        session_levels=history,
    )
