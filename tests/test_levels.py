"""Deterministic tests for the opening-range level engine."""

import pytest

from openrange.strategy.levels import compute_levels, validate_multipliers
from openrange.strategy.models import InvalidRange, LevelSide


class TestComputeLevels:
    def test_symmetric_range_scenario(self):
        """high=105, low=95, table [1,2,3,4] → A=115..145, B=85..55."""
        levels = compute_levels(105.0, 95.0, multipliers=[1, 2, 3, 4])
        assert levels.resistance == pytest.approx((115.0, 125.0, 135.0, 145.0))
        assert levels.support == pytest.approx((85.0, 75.0, 65.0, 55.0))
        assert levels.range == pytest.approx(10.0)

    def test_default_table_matches_scenario(self):
        levels = compute_levels(105.0, 95.0)
        assert levels.as_dict() == pytest.approx({
            "A1": 115.0, "A2": 125.0, "A3": 135.0, "A4": 145.0,
            "B1": 85.0, "B2": 75.0, "B3": 65.0, "B4": 55.0,
        })

    def test_custom_multiplier_table(self):
        levels = compute_levels(101.0, 100.0, multipliers=(0.618, 1.0, 1.618, 2.618))
        assert levels.resistance[0] == pytest.approx(101.618)
        assert levels.support[3] == pytest.approx(97.382)

    @pytest.mark.parametrize("high,low", [
        (105.0, 95.0),
        (1.0852, 1.0841),
        (4512.25, 4509.5),
        (0.5, 0.01),
    ])
    def test_level_ordering(self, high, low):
        levels = compute_levels(high, low)
        a1, a2, a3, a4 = levels.resistance
        b1, b2, b3, b4 = levels.support
        assert high <= a1 <= a2 <= a3 <= a4
        assert low >= b1 >= b2 >= b3 >= b4
        assert b1 <= a1

    def test_level_purity(self):
        assert compute_levels(105.0, 95.0) == compute_levels(105.0, 95.0)

    def test_items_order_and_sides(self):
        items = list(compute_levels(105.0, 95.0).items())
        assert [k for k, _, _ in items] == ["A1", "A2", "A3", "A4", "B1", "B2", "B3", "B4"]
        assert all(side is LevelSide.RESISTANCE for _, _, side in items[:4])
        assert all(side is LevelSide.SUPPORT for _, _, side in items[4:])


class TestInvalidRange:
    def test_flat_bar_raises(self):
        with pytest.raises(InvalidRange):
            compute_levels(100.0, 100.0)

    def test_inverted_bar_raises(self):
        with pytest.raises(InvalidRange, match="positive"):
            compute_levels(99.0, 100.0)

    def test_invalid_range_is_value_error(self):
        with pytest.raises(ValueError):
            compute_levels(100.0, 100.0)


class TestMultiplierValidation:
    def test_accepts_ascending_table(self):
        assert validate_multipliers([1, 2, 3, 4]) == (1.0, 2.0, 3.0, 4.0)

    def test_rejects_wrong_length(self):
        with pytest.raises(ValueError, match="exactly 4"):
            validate_multipliers([1, 2, 3])

    def test_rejects_non_increasing(self):
        with pytest.raises(ValueError, match="strictly increasing"):
            validate_multipliers([1, 2, 2, 4])

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError, match="positive"):
            validate_multipliers([0, 1, 2, 3])
