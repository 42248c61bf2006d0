"""Stop-loss and take-profit calculation — pure math, no I/O.

Level-anchored approach:
    Entry is the level price.
    SL sits a fixed distance beyond the level (a fraction of the opening
    range), TP sits ``rr_ratio`` × that distance on the other side.
"""

from dataclasses import dataclass

from openrange.strategy.models import Bar, Signal


@dataclass
class RiskLevels:
    """Computed stop-loss and take-profit for a trade."""
    sl: float
    tp: float


def calculate_level_risk(
    entry_price: float,
    direction: str,
    stop_distance: float,
    rr_ratio: float = 2.0,
) -> RiskLevels:
    """Calculate SL and TP around a level entry.

    - **Buy**:  SL = entry − stop_distance,  TP = entry + rr × stop_distance
    - **Sell**: SL = entry + stop_distance,  TP = entry − rr × stop_distance

    Args:
        entry_price: Trade entry price (the level).
        direction: ``"buy"`` or ``"sell"``.
        stop_distance: Price distance from entry to SL.
        rr_ratio: Risk-reward ratio (default 2.0 = 1:2 R:R).

    Returns:
        ``RiskLevels`` rounded to 5 decimal places.

    Raises:
        ValueError: On an unknown *direction* or a non-positive
            *stop_distance* / *rr_ratio*.
    """
    if stop_distance <= 0:
        raise ValueError(f"stop_distance must be positive, got {stop_distance}")
    if rr_ratio <= 0:
        raise ValueError(f"rr_ratio must be positive, got {rr_ratio}")

    if direction == "buy":
        sl = entry_price - stop_distance
        tp = entry_price + rr_ratio * stop_distance
    elif direction == "sell":
        sl = entry_price + stop_distance
        tp = entry_price - rr_ratio * stop_distance
    else:
        raise ValueError(f"direction must be 'buy' or 'sell', got '{direction}'")

    return RiskLevels(sl=round(sl, 5), tp=round(tp, 5))


def is_resolved(signal: Signal, bar: Bar) -> bool:
    """Return True if *bar* reaches the signal's stop or target."""
    if signal.type == "buy":
        return bar.low <= signal.stop_loss or bar.high >= signal.take_profit
    return bar.high >= signal.stop_loss or bar.low <= signal.take_profit
