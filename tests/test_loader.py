"""Tests for bar loading and cleaning."""

import pandas as pd
import pytest

from openrange.data.loader import (
    bars_from_frame,
    bars_from_records,
    load_bars_csv,
    normalize_bars,
)
from openrange.strategy.models import Bar


class TestCleaning:
    def test_sorts_and_dedupes_keeping_last(self):
        bars = bars_from_records([
            {"time": 600, "open": 10, "high": 11, "low": 9, "close": 10},
            {"time": 300, "open": 10, "high": 11, "low": 9, "close": 10.5},
            {"time": 600, "open": 10, "high": 12, "low": 9, "close": 11},
        ])
        assert [b.time for b in bars] == [300, 600]
        assert bars[1].close == 11.0
        assert bars[1].high == 12.0

    def test_drops_malformed_rows(self):
        bars = bars_from_records([
            {"time": 0, "open": 10, "high": 11, "low": 9, "close": 10},
            {"time": 300, "open": 10, "high": 9, "low": 11, "close": 10},     # high < low
            {"time": 600, "open": None, "high": 11, "low": 9, "close": 10},   # missing open
            {"time": 900, "open": 10, "high": 11, "low": 9, "close": 12},     # close > high
            {"time": 1200, "open": 0, "high": 0, "low": 0, "close": 0},       # zero price
        ])
        assert [b.time for b in bars] == [0]

    def test_volume_defaults_to_zero(self):
        bars = bars_from_records([{"time": 0, "open": 10, "high": 11, "low": 9, "close": 10}])
        assert bars == [Bar(0, 10.0, 11.0, 9.0, 10.0, 0)]

    def test_missing_column_raises(self):
        with pytest.raises(ValueError, match="close"):
            bars_from_frame(pd.DataFrame({"time": [0], "open": [1], "high": [1], "low": [1]}))

    def test_empty_records(self):
        assert bars_from_records([]) == []

    def test_normalize_bars(self):
        bars = [Bar(600, 10, 11, 9, 10), Bar(300, 10, 11, 9, 10)]
        assert [b.time for b in normalize_bars(bars)] == [300, 600]


class TestLoadCsv:
    def test_iso_timestamps(self, tmp_path):
        path = tmp_path / "bars.csv"
        path.write_text(
            "Time,Open,High,Low,Close,Volume\n"
            "2025-03-03T14:35:00Z,100,101,99,100.5,1200\n"
            "2025-03-03T14:30:00Z,100,105,95,100,3400\n"
        )
        bars = load_bars_csv(path)
        assert [b.time for b in bars] == [1741012200, 1741012500]
        assert bars[0].high == 105.0
        assert bars[0].volume == 3400

    def test_epoch_timestamps(self, tmp_path):
        path = tmp_path / "bars.csv"
        path.write_text("time,open,high,low,close\n1741012200,100,105,95,100\n")
        assert load_bars_csv(path) == [Bar(1741012200, 100.0, 105.0, 95.0, 100.0)]
