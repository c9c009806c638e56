"""Tests for the forecast projection engine."""

import pytest
from datetime import date

from app.core.errors import BusinessRuleError
from app.domain.planning.enums import ForecastMethod, PeriodUnit
from app.domain.planning.forecasting import (
    METHOD_PROFILES,
    SEASONAL_PATTERN,
    base_point,
    estimate_accuracy,
    generate_projections,
    least_squares,
    period_label,
)

START = date(2024, 11, 15)


class TestLinear:

    def test_trend_from_first_and_last(self):
        points = generate_projections([100, 120, 140], ForecastMethod.LINEAR, 2, start=START)
        assert [p.projected for p in points] == pytest.approx([160, 180])
        assert points[0].lower_bound == pytest.approx(144)
        assert points[0].upper_bound == pytest.approx(176)
        assert points[1].lower_bound == pytest.approx(162)
        assert points[1].upper_bound == pytest.approx(198)

    def test_confidence_decays_from_zero_offset(self):
        points = generate_projections([100, 120, 140], ForecastMethod.LINEAR, 2, start=START)
        assert [p.confidence for p in points] == [90, 88]

    def test_single_value_is_flat(self):
        points = generate_projections([50], ForecastMethod.LINEAR, 3, start=START)
        assert [p.projected for p in points] == [50, 50, 50]

    def test_clamped_at_zero(self):
        points = generate_projections([100, 50], ForecastMethod.LINEAR, 4, start=START)
        assert [p.projected for p in points] == [0, 0, 0, 0]


class TestExponential:

    def test_compound_growth(self):
        points = generate_projections([100, 121], ForecastMethod.EXPONENTIAL, 2, start=START)
        assert [p.projected for p in points] == pytest.approx([146.41, 177.1561])
        assert points[0].lower_bound == pytest.approx(146.41 * 0.85)
        assert [p.confidence for p in points] == [85, 82]

    def test_single_value_uses_default_growth(self):
        points = generate_projections([200], ForecastMethod.EXPONENTIAL, 1, start=START)
        assert points[0].projected == pytest.approx(210)

    def test_zero_first_value_is_refused(self):
        with pytest.raises(BusinessRuleError):
            generate_projections([0, 10], ForecastMethod.EXPONENTIAL, 1, start=START)


class TestSeasonal:

    def test_pattern_applied_to_mean(self):
        points = generate_projections([90, 110], ForecastMethod.SEASONAL, 13, start=START)
        expected = [100 * SEASONAL_PATTERN[i % 12] * 1.05 for i in range(13)]
        assert [p.projected for p in points] == pytest.approx(expected)
        assert points[0].upper_bound == pytest.approx(expected[0] * 1.2)


class TestRegression:

    def test_least_squares(self):
        slope, intercept = least_squares([10, 20, 30])
        assert slope == pytest.approx(10)
        assert intercept == pytest.approx(10)

    def test_projects_past_the_series(self):
        points = generate_projections([10, 20, 30], ForecastMethod.REGRESSION, 2, start=START)
        assert [p.projected for p in points] == pytest.approx([40, 50])
        assert [p.confidence for p in points] == [88, 86]

    def test_single_point_has_no_slope(self):
        points = generate_projections([42], ForecastMethod.REGRESSION, 2, start=START)
        assert [p.projected for p in points] == pytest.approx([42, 42])


@pytest.mark.parametrize("method", list(ForecastMethod))
def test_confidence_non_increasing_and_floored(method):
    series = [100, 110, 120, 130]
    points = generate_projections(series, method, 60, start=START)
    confidences = [p.confidence for p in points]
    assert all(a >= b for a, b in zip(confidences, confidences[1:]))
    assert min(confidences) == METHOD_PROFILES[method].floor


def test_empty_series_is_refused():
    with pytest.raises(BusinessRuleError):
        generate_projections([], ForecastMethod.LINEAR, 1, start=START)


class TestPeriodLabels:

    def test_monthly_crosses_year(self):
        assert period_label(START, 1, PeriodUnit.MONTHLY) == "2024-12"
        assert period_label(START, 2, PeriodUnit.MONTHLY) == "2025-01"

    def test_quarterly(self):
        assert period_label(START, 1, PeriodUnit.QUARTERLY) == "Q1/2025"
        assert period_label(START, 4, PeriodUnit.QUARTERLY) == "Q4/2025"

    def test_yearly(self):
        assert period_label(START, 3, PeriodUnit.YEARLY) == "2027"

    def test_projection_periods_start_after_today(self):
        points = generate_projections([1, 2], ForecastMethod.LINEAR, 2, PeriodUnit.MONTHLY, START)
        assert [p.period for p in points] == ["2024-12", "2025-01"]


def test_base_points_and_accuracy():
    base = [base_point("2024-01", 100), base_point("2024-02", 200)]
    assert base[0].lower_bound == pytest.approx(95)
    assert base[0].upper_bound == pytest.approx(105)
    assert base[0].confidence == 95
    assert estimate_accuracy(base) == 95
    assert estimate_accuracy([]) == 0
