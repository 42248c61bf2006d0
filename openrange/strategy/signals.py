"""Signal generation — pure functions, no I/O.

Given recent bars, the session levels and their reaction history, emits a
signal when price comes within tolerance of a level that has held often
enough:

* Near a **resistance** level (A1..A4) → **sell** at the level.
* Near a **support** level (B1..B4) → **buy** at the level.

A level with an open signal is not signaled again until a later bar hits
that signal's stop or target, or a new session starts.
"""

import logging
from datetime import date
from typing import Optional, Sequence

from openrange.risk.sl_tp import calculate_level_risk, is_resolved
from openrange.strategy.models import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_MIN_TOUCHES,
    DEFAULT_RR_RATIO,
    DEFAULT_SIGNAL_WINDOW_BARS,
    DEFAULT_STOP_RANGE_FRACTION,
    DEFAULT_TOLERANCE_PCT,
    Bar,
    LevelSide,
    LevelStat,
    Levels,
    PatternStats,
    Signal,
)
from openrange.strategy.reactions import is_near, tolerance_band
from openrange.strategy.sessions import session_key

logger = logging.getLogger("openrange.signals")


def _is_eligible(stat: LevelStat, confidence_threshold: float, min_touches: int) -> bool:
    return stat.touches >= min_touches and stat.bounce_rate >= confidence_threshold


def _on_approach_side(bar: Bar, price: float, band: float, side: LevelSide) -> bool:
    """Price must still be under resistance / over support to fade it."""
    if side is LevelSide.RESISTANCE:
        return bar.close <= price + band
    return bar.close >= price - band


def _build_signal(
    bar: Bar,
    key: str,
    price: float,
    side: LevelSide,
    stat: LevelStat,
    stop_distance: float,
    rr_ratio: float,
) -> Optional[Signal]:
    direction = "sell" if side is LevelSide.RESISTANCE else "buy"
    risk = calculate_level_risk(price, direction, stop_distance, rr_ratio)
    if risk.tp <= 0 or risk.sl <= 0:
        logger.debug("Level %s: SL %.5f / TP %.5f not a valid price, skipping", key, risk.sl, risk.tp)
        return None

    label = "Resistance" if side is LevelSide.RESISTANCE else "Support"
    return Signal(
        type=direction,
        time=bar.time,
        reason=(
            f"{label} {key} {price:.5f}: "
            f"{stat.bounce_rate * 100:.0f}% bounce rate "
            f"({stat.bounces}/{stat.touches} touches)"
        ),
        entry=round(price, 5),
        stop_loss=risk.sl,
        take_profit=risk.tp,
        level=key,
    )


def generate_signals(
    bars: Sequence[Bar],
    levels: Levels,
    stats: PatternStats,
    tz: str,
    tolerance_pct: float = DEFAULT_TOLERANCE_PCT,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    rr_ratio: float = DEFAULT_RR_RATIO,
    stop_range_fraction: float = DEFAULT_STOP_RANGE_FRACTION,
    window_bars: int = DEFAULT_SIGNAL_WINDOW_BARS,
    min_touches: int = DEFAULT_MIN_TOUCHES,
) -> list[Signal]:
    """Scan the most recent bars for level-fade entries.

    Args:
        bars: Chronological bars; only the last *window_bars* are scanned.
        levels: The active session's levels.
        stats: Reaction history for *levels*.
        tz: IANA timezone used to detect session changes.
        tolerance_pct: Proximity band as a fraction of the level price.
        confidence_threshold: Minimum bounce rate for a level to qualify.
        rr_ratio: Take-profit distance as a multiple of the stop distance.
        stop_range_fraction: Stop distance as a fraction of the opening range.
        window_bars: Number of trailing bars to evaluate.
        min_touches: Minimum recorded touches for a level to qualify.

    Returns:
        Signals in chronological order (empty when nothing qualifies).
    """
    if window_bars < 1:
        raise ValueError(f"window_bars must be >= 1, got {window_bars}")
    if stop_range_fraction <= 0:
        raise ValueError(f"stop_range_fraction must be positive, got {stop_range_fraction}")
    if not bars:
        return []

    eligible = [
        (key, price, side)
        for key, price, side in levels.items()
        if _is_eligible(stats[key], confidence_threshold, min_touches)
    ]
    if not eligible:
        logger.debug("No level meets %.0f%% bounce confidence", confidence_threshold * 100)
        return []

    stop_distance = stop_range_fraction * levels.range
    signals: list[Signal] = []
    open_signals: dict[str, Signal] = {}
    current_session: Optional[date] = None

    for bar in bars[-window_bars:]:
        day = session_key(bar.time, tz)
        if day != current_session:
            open_signals.clear()
            current_session = day

        for key in [k for k, s in open_signals.items() if is_resolved(s, bar)]:
            del open_signals[key]

        for key, price, side in eligible:
            if key in open_signals:
                continue
            if not is_near(bar, price, tolerance_pct):
                continue
            band = tolerance_band(price, tolerance_pct)
            if not _on_approach_side(bar, price, band, side):
                continue
            signal = _build_signal(bar, key, price, side, stats[key], stop_distance, rr_ratio)
            if signal is None:
                continue
            signals.append(signal)
            open_signals[key] = signal
            logger.debug("Signal %s at %s (%d)", signal.type, key, bar.time)

    return signals
