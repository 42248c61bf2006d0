"""Strategy data models — typed representations for levels, stats and signals."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator


LEVEL_KEYS: tuple[str, ...] = ("A1", "A2", "A3", "A4", "B1", "B2", "B3", "B4")


class InvalidRange(ValueError):
    """Opening bar has a non-positive high-minus-low range."""


class InsufficientData(ValueError):
    """No bars to analyse, or no opening bar could be located."""


class LevelSide(str, Enum):
    RESISTANCE = "resistance"
    SUPPORT = "support"


@dataclass(frozen=True)
class Bar:
    """A single intraday price bar.

    ``time`` is a Unix epoch in seconds (UTC instant).
    """

    time: int
    open: float
    high: float
    low: float
    close: float
    volume: int = 0


@dataclass(frozen=True)
class Levels:
    """Eight price levels derived from one opening bar.

    ``resistance`` holds A1..A4 (ascending, above the opening high) and
    ``support`` holds B1..B4 (descending, below the opening low).
    """

    opening_high: float
    opening_low: float
    resistance: tuple[float, ...]
    support: tuple[float, ...]

    @property
    def range(self) -> float:
        return self.opening_high - self.opening_low

    def items(self) -> Iterator[tuple[str, float, LevelSide]]:
        """Yield ``(key, price, side)`` in A1..A4, B1..B4 order."""
        for i, price in enumerate(self.resistance, start=1):
            yield f"A{i}", price, LevelSide.RESISTANCE
        for i, price in enumerate(self.support, start=1):
            yield f"B{i}", price, LevelSide.SUPPORT

    def as_dict(self) -> dict[str, float]:
        return {key: price for key, price, _ in self.items()}


@dataclass(frozen=True)
class LevelStat:
    """Touch / bounce / break counts for one level."""

    key: str
    touches: int = 0
    bounces: int = 0
    breaks: int = 0

    @property
    def unresolved(self) -> int:
        return self.touches - self.bounces - self.breaks

    @property
    def bounce_rate(self) -> float:
        return self.bounces / max(1, self.touches)


class PatternStats:
    """Read-only mapping of level key → ``LevelStat``.

    Always holds exactly the eight keys in ``LEVEL_KEYS``; keys missing from
    *stats* are zero-filled.
    """

    def __init__(self, stats: dict[str, LevelStat] | None = None) -> None:
        stats = stats or {}
        unknown = set(stats) - set(LEVEL_KEYS)
        if unknown:
            raise ValueError(f"Unknown level key(s): {', '.join(sorted(unknown))}")
        self._stats = {key: stats.get(key, LevelStat(key)) for key in LEVEL_KEYS}

    @classmethod
    def empty(cls) -> "PatternStats":
        return cls()

    @property
    def rows(self) -> list[LevelStat]:
        return list(self._stats.values())

    def __getitem__(self, key: str) -> LevelStat:
        return self._stats[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._stats)

    def __len__(self) -> int:
        return len(self._stats)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PatternStats):
            return NotImplemented
        return self._stats == other._stats

    def __repr__(self) -> str:
        return f"PatternStats({self.rows!r})"


@dataclass(frozen=True)
class Signal:
    """A trade decision emitted when price approaches a reliable level."""

    type: str  # "buy" or "sell"
    time: int
    reason: str
    entry: float
    stop_loss: float
    take_profit: float
    level: str


# ── Policy defaults ──────────────────────────────────────────────────────
# Shared by the level engine, reaction analyzer and signal generator.
# ``openrange.config.AnalysisConfig`` uses these as its defaults.

DEFAULT_LEVEL_MULTIPLIERS: tuple[float, ...] = (1.0, 2.0, 3.0, 4.0)
DEFAULT_TOLERANCE_PCT = 0.0005  # 5 bps of the level price
DEFAULT_LOOKAHEAD_BARS = 6
DEFAULT_CONFIDENCE_THRESHOLD = 0.6
DEFAULT_RR_RATIO = 2.0
DEFAULT_STOP_RANGE_FRACTION = 0.5
DEFAULT_SIGNAL_WINDOW_BARS = 78  # one regular US session of 5-minute bars
DEFAULT_MIN_TOUCHES = 1
