"""Bar loading and cleaning.

Turns CSV files or JSON-style records into a clean, strictly
time-increasing ``Bar`` sequence:

1. Coerce ``time`` to epoch seconds (accepts epoch numbers or ISO strings).
2. Drop rows with missing or non-positive prices, or where
   ``low <= open, close <= high`` does not hold.
3. Sort by time and keep the last row for duplicated timestamps.
"""

import logging
from pathlib import Path
from typing import Iterable

import pandas as pd

from openrange.strategy.models import Bar

logger = logging.getLogger("openrange.data")

REQUIRED_COLUMNS = ["time", "open", "high", "low", "close"]


def _to_epoch_seconds(series: pd.Series) -> pd.Series:
    if pd.api.types.is_numeric_dtype(series):
        return pd.to_numeric(series, errors="coerce")
    parsed = pd.to_datetime(series, utc=True, errors="coerce")
    return (parsed - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(seconds=1)


def clean_frame(df: pd.DataFrame) -> pd.DataFrame:
    """Normalise a raw bar frame (see module docstring).

    Raises ``ValueError`` if a required column is missing.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing bar column(s): {', '.join(missing)}")

    df = df.copy()
    if "volume" not in df.columns:
        df["volume"] = 0

    df["time"] = _to_epoch_seconds(df["time"])
    for col in ["open", "high", "low", "close", "volume"]:
        df[col] = pd.to_numeric(df[col], errors="coerce")
    df["volume"] = df["volume"].fillna(0)

    before = len(df)
    df = df.dropna(subset=REQUIRED_COLUMNS)
    valid = (
        (df["low"] > 0)
        & (df["low"] <= df[["open", "close"]].min(axis=1))
        & (df["high"] >= df[["open", "close"]].max(axis=1))
    )
    df = df[valid]
    dropped = before - len(df)
    if dropped:
        logger.warning("Dropped %d malformed bar row(s)", dropped)

    df = df.sort_values("time", kind="stable")
    df = df.drop_duplicates(subset="time", keep="last")
    return df.reset_index(drop=True)


def bars_from_frame(df: pd.DataFrame) -> list[Bar]:
    df = clean_frame(df)
    return [
        Bar(
            time=int(row.time),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=int(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


def bars_from_records(records: Iterable[dict]) -> list[Bar]:
    """Build bars from dicts with ``time/open/high/low/close[/volume]`` keys."""
    records = list(records)
    if not records:
        return []
    return bars_from_frame(pd.DataFrame.from_records(records))


def load_bars_csv(path: str | Path) -> list[Bar]:
    """Read a CSV of bars into a clean ``Bar`` list."""
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    bars = bars_from_frame(df)
    logger.info("Loaded %d bar(s) from %s", len(bars), path)
    return bars


def normalize_bars(bars: Iterable[Bar]) -> list[Bar]:
    """Clean an existing ``Bar`` sequence the same way as the loaders."""
    rows = [
        {
            "time": b.time,
            "open": b.open,
            "high": b.high,
            "low": b.low,
            "close": b.close,
            "volume": b.volume,
        }
        for b in bars
    ]
    return bars_from_records(rows)
