"""OpenRange — application configuration.

Loads .env variables into typed config objects.
Every variable has a default; malformed values fail fast on startup.
"""

import os
from dataclasses import asdict, dataclass
from datetime import time

from dotenv import load_dotenv

from openrange.strategy.levels import validate_multipliers
from openrange.strategy.models import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    DEFAULT_LEVEL_MULTIPLIERS,
    DEFAULT_LOOKAHEAD_BARS,
    DEFAULT_MIN_TOUCHES,
    DEFAULT_RR_RATIO,
    DEFAULT_SIGNAL_WINDOW_BARS,
    DEFAULT_STOP_RANGE_FRACTION,
    DEFAULT_TOLERANCE_PCT,
)
from openrange.strategy.sessions import SESSION_OPEN, get_zone


@dataclass(frozen=True)
class AnalysisConfig:
    """Tunable policy constants for the level / reaction / signal pipeline."""

    multipliers: tuple[float, ...] = DEFAULT_LEVEL_MULTIPLIERS
    tolerance_pct: float = DEFAULT_TOLERANCE_PCT
    lookahead_bars: int = DEFAULT_LOOKAHEAD_BARS
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    rr_ratio: float = DEFAULT_RR_RATIO
    stop_range_fraction: float = DEFAULT_STOP_RANGE_FRACTION
    window_bars: int = DEFAULT_SIGNAL_WINDOW_BARS
    min_touches: int = DEFAULT_MIN_TOUCHES
    session_open: time = SESSION_OPEN

    def __post_init__(self) -> None:
        object.__setattr__(self, "multipliers", validate_multipliers(self.multipliers))
        if self.tolerance_pct < 0:
            raise ValueError(f"tolerance_pct must be >= 0, got {self.tolerance_pct}")
        if self.lookahead_bars < 1:
            raise ValueError(f"lookahead_bars must be >= 1, got {self.lookahead_bars}")
        if not 0 <= self.confidence_threshold <= 1:
            raise ValueError(
                f"confidence_threshold must be within [0, 1], got {self.confidence_threshold}"
            )
        if self.rr_ratio <= 0:
            raise ValueError(f"rr_ratio must be positive, got {self.rr_ratio}")
        if self.stop_range_fraction <= 0:
            raise ValueError(
                f"stop_range_fraction must be positive, got {self.stop_range_fraction}"
            )
        if self.window_bars < 1:
            raise ValueError(f"window_bars must be >= 1, got {self.window_bars}")
        if self.min_touches < 1:
            raise ValueError(f"min_touches must be >= 1, got {self.min_touches}")

    def to_dict(self) -> dict:
        data = asdict(self)
        data["multipliers"] = list(self.multipliers)
        data["session_open"] = self.session_open.strftime("%H:%M")
        return data


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    timezone: str
    log_level: str
    api_port: int
    analysis: AnalysisConfig


def _env(name: str, default: str, cast):
    raw = os.environ.get(name, default)
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r} ({exc})") from exc


def _parse_multipliers(raw: str) -> tuple[float, ...]:
    return validate_multipliers(float(p) for p in raw.split(",") if p.strip())


def _parse_time(raw: str) -> time:
    return time.fromisoformat(raw.strip())


def _parse_timezone(raw: str) -> str:
    get_zone(raw)
    return raw


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` with a message naming the offending variable when
    a value cannot be parsed or is out of range.
    """
    load_dotenv(dotenv_path=env_path)

    fields = dict(
        multipliers=_env("LEVEL_MULTIPLIERS", "1,2,3,4", _parse_multipliers),
        tolerance_pct=_env("TOUCH_TOLERANCE_PCT", str(DEFAULT_TOLERANCE_PCT), float),
        lookahead_bars=_env("LOOKAHEAD_BARS", str(DEFAULT_LOOKAHEAD_BARS), int),
        confidence_threshold=_env(
            "BOUNCE_CONFIDENCE", str(DEFAULT_CONFIDENCE_THRESHOLD), float,
        ),
        rr_ratio=_env("RR_RATIO", str(DEFAULT_RR_RATIO), float),
        stop_range_fraction=_env(
            "STOP_RANGE_FRACTION", str(DEFAULT_STOP_RANGE_FRACTION), float,
        ),
        window_bars=_env("SIGNAL_WINDOW_BARS", str(DEFAULT_SIGNAL_WINDOW_BARS), int),
        min_touches=_env("MIN_TOUCHES", str(DEFAULT_MIN_TOUCHES), int),
        session_open=_env("SESSION_OPEN", "09:30", _parse_time),
    )
    analysis = AnalysisConfig(**fields)

    return Config(
        timezone=_env("OPENRANGE_TIMEZONE", "America/New_York", _parse_timezone),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
        api_port=_env("API_PORT", "8080", int),
        analysis=analysis,
    )
