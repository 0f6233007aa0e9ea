"""
Unit Tests for the Leveling Curve
=================================

Test Coverage
-------------
- Threshold values and monotonicity
- Exact level <-> experience round trip
- Progress percentage flooring and clamping
- Level cap bounds
"""

import math

import pytest

from bloodcraft.modules.leveling.curve import (
    experience_difference,
    experience_for_level,
    level_for_experience,
    progress_percent,
)
from bloodcraft.modules.leveling.settings import DEFAULT_SETTINGS, LevelingSettings


# ============================================================================
# THRESHOLDS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestExperienceForLevel:
    def test_known_thresholds(self):
        assert experience_for_level(0) == 0.0
        assert experience_for_level(1) == 100.0
        assert experience_for_level(2) == pytest.approx(210.0)
        assert experience_for_level(3) == pytest.approx(331.0)

    def test_non_positive_levels_cost_nothing(self):
        assert experience_for_level(-5) == 0.0

    def test_strictly_increasing(self):
        thresholds = [experience_for_level(level) for level in range(0, 101)]
        assert all(a < b for a, b in zip(thresholds, thresholds[1:]))

    def test_custom_settings(self):
        flat = LevelingSettings(max_level=5, base_exp_per_level=50.0, growth_factor=1.0)
        assert experience_for_level(4, flat) == 200.0


# ============================================================================
# INVERSE
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestLevelForExperience:
    def test_round_trip_is_exact_for_every_level(self):
        for level in range(0, DEFAULT_SETTINGS.max_level + 1):
            assert level_for_experience(experience_for_level(level)) == level

    def test_round_trip_with_custom_curve(self):
        steep = LevelingSettings(max_level=40, base_exp_per_level=37.5, growth_factor=1.37)
        for level in range(0, steep.max_level + 1):
            assert level_for_experience(experience_for_level(level, steep), steep) == level

    def test_just_below_threshold_stays_on_previous_level(self):
        assert level_for_experience(99.99) == 0
        assert level_for_experience(209.99) == 1

    @pytest.mark.parametrize("experience", [0.0, -10.0, float("nan")])
    def test_non_positive_experience_is_level_zero(self, experience):
        assert level_for_experience(experience) == 0

    @pytest.mark.parametrize("experience", [1e300, float("inf")])
    def test_bounded_by_max_level(self, experience):
        assert level_for_experience(experience) == DEFAULT_SETTINGS.max_level

    def test_respects_lower_max_level(self):
        capped = LevelingSettings(max_level=3)
        assert level_for_experience(1_000_000.0, capped) == 3


# ============================================================================
# PROGRESS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProgressPercent:
    def test_zero_at_threshold(self):
        for level in (0, 1, 10, 50):
            assert progress_percent(experience_for_level(level)) == 0

    def test_ninety_nine_just_below_next_level(self):
        for level in (1, 10, 50, 99):
            assert progress_percent(experience_for_level(level + 1) - 0.5) == 99

    def test_partial_progress_is_floored(self):
        # (160 - 100) / 110 of the way to level 2
        assert progress_percent(160.0) == 54

    def test_full_at_max_level(self):
        assert progress_percent(experience_for_level(DEFAULT_SETTINGS.max_level)) == 100

    def test_within_bounds(self):
        for experience in (0.0, 1.0, 5_000.0, 1e12):
            assert 0 <= progress_percent(experience) <= 100

    def test_nan_reports_zero(self):
        assert progress_percent(math.nan) == 0

    def test_degenerate_curve_reports_full(self):
        assert progress_percent(150.0, LevelingSettings(growth_factor=0.0)) == 100
        assert progress_percent(150.0, LevelingSettings(base_exp_per_level=0.0)) == 100


@pytest.mark.unit
@pytest.mark.domain
class TestExperienceDifference:
    def test_symmetric(self):
        assert experience_difference(1, 3) == pytest.approx(231.0)
        assert experience_difference(3, 1) == pytest.approx(231.0)

    @pytest.mark.parametrize("from_level,to_level", [(-1, 3), (0, 101), (101, 5), (1.5, 3)])
    def test_out_of_range_is_zero(self, from_level, to_level):
        assert experience_difference(from_level, to_level) == 0.0
