"""Opening-range level engine — pure functions, no I/O.

Projects four resistance levels above the opening bar's high and four
support levels below its low, each offset by a multiple of the opening
range ``R = high - low``:

    A_i = high + m_i × R
    B_i = low  - m_i × R

The same ascending multiplier table is used on both sides so the levels are
symmetric around the opening bar.
"""

from typing import Sequence

from openrange.strategy.models import DEFAULT_LEVEL_MULTIPLIERS, InvalidRange, Levels


def validate_multipliers(multipliers: Sequence[float]) -> tuple[float, ...]:
    """Return *multipliers* as a tuple, or raise ``ValueError``.

    The table must hold exactly four positive, strictly increasing values.
    """
    table = tuple(float(m) for m in multipliers)
    if len(table) != 4:
        raise ValueError(f"Need exactly 4 level multipliers, got {len(table)}")
    if table[0] <= 0:
        raise ValueError(f"Level multipliers must be positive, got {table}")
    if any(b <= a for a, b in zip(table, table[1:])):
        raise ValueError(f"Level multipliers must be strictly increasing, got {table}")
    return table


def compute_levels(
    high: float,
    low: float,
    multipliers: Sequence[float] = DEFAULT_LEVEL_MULTIPLIERS,
) -> Levels:
    """Derive the A1..A4 / B1..B4 levels from an opening bar.

    Args:
        high: Opening bar high (A).
        low: Opening bar low (B).
        multipliers: Ascending multiplier table applied to the range.

    Returns:
        ``Levels`` with ascending resistance and descending support.

    Raises:
        InvalidRange: If ``high - low <= 0``.
        ValueError: If the multiplier table is malformed.
    """
    table = validate_multipliers(multipliers)
    rng = high - low
    if rng <= 0:
        raise InvalidRange(
            f"Opening range must be positive, got high={high} low={low}"
        )

    return Levels(
        opening_high=high,
        opening_low=low,
        resistance=tuple(high + m * rng for m in table),
        support=tuple(low - m * rng for m in table),
    )
