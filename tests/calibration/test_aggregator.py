import numpy as np
import pytest

from calibration.aggregator import (
    CalibrationError,
    CalibrationResult,
    InsufficientCalibrationData,
    reduce_calibration,
    trim_outliers,
)


# ---------------------------------------------------------
# Worked examples
# ---------------------------------------------------------
def test_outer_tails_trimmed_away():
    raw = [100.0] * 5 + [200.0] * 40 + [900.0] * 5
    result = reduce_calibration(raw, minimum_samples=30)

    assert result.min_pitch == pytest.approx(200.0)
    assert result.max_pitch == pytest.approx(200.0)
    assert result.sample_count == 40
    assert result.quality == pytest.approx(0.8)


def test_even_spacing_buffered_range():
    raw = list(range(120, 301, 20))
    assert len(raw) == 10

    result = reduce_calibration(raw, minimum_samples=10)
    assert result.sample_count == 8
    assert result.min_pitch == pytest.approx(119.0)
    assert result.max_pitch == pytest.approx(301.0)
    assert result.quality == pytest.approx(0.8)


# ---------------------------------------------------------
# Invariants
# ---------------------------------------------------------
def test_order_does_not_matter(rng):
    raw = list(rng.uniform(90.0, 350.0, size=137))
    expected = reduce_calibration(raw, minimum_samples=50)

    for _ in range(5):
        shuffled = list(rng.permutation(raw))
        assert reduce_calibration(shuffled, minimum_samples=50) == expected


def test_floor_and_ceiling_clamp():
    raw = [55.0] * 5 + [60.0] * 20 + [780.0] * 20 + [790.0] * 5
    result = reduce_calibration(raw, minimum_samples=10)
    assert result.min_pitch == 50.0
    assert result.max_pitch == 800.0


def test_quality_stays_within_unit_interval(rng):
    raw = rng.uniform(100.0, 300.0, size=500)
    result = reduce_calibration(raw, minimum_samples=50)
    assert 0.0 <= result.quality <= 1.0
    assert result.quality == pytest.approx(400 / 500)


def test_accepts_numpy_input():
    raw = np.full(60, 180.0)
    result = reduce_calibration(raw, minimum_samples=50)
    assert isinstance(result, CalibrationResult)
    assert result.sample_count == 48


# ---------------------------------------------------------
# Insufficient data
# ---------------------------------------------------------
def test_too_few_samples_raises():
    with pytest.raises(InsufficientCalibrationData) as exc:
        reduce_calibration([150.0] * 49, minimum_samples=50)

    assert exc.value.reason == "insufficient_samples"
    assert exc.value.sample_count == 49
    assert exc.value.required == 50
    assert isinstance(exc.value, CalibrationError)


def test_none_buffer_is_insufficient():
    with pytest.raises(InsufficientCalibrationData):
        reduce_calibration(None, minimum_samples=1)


def test_empty_buffer_with_zero_minimum_reports_outliers():
    with pytest.raises(InsufficientCalibrationData) as exc:
        reduce_calibration([], minimum_samples=0)
    assert exc.value.reason == "too_many_outliers"


# ---------------------------------------------------------
# trim_outliers
# ---------------------------------------------------------
def test_trim_sorts_and_cuts_both_tails():
    out = trim_outliers([5, 1, 9, 3, 7, 2, 8, 4, 6, 10])
    assert list(out) == [2, 3, 4, 5, 6, 7, 8, 9]


def test_trim_keeps_small_sets():
    # round(4 * 0.1) == 0
    assert list(trim_outliers([3, 1, 2, 4])) == [1, 2, 3, 4]


def test_trim_rounds_half_to_even():
    # 25 * 0.1 == 2.5 -> 2
    assert trim_outliers(range(25)).size == 21
