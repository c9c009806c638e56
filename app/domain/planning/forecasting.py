"""
Forecast projection engine.

Pure functions: a historical series plus a method produce ``horizon``
future points with bounds and a confidence score that decays with the
distance from the last actual, floored per method.
"""

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta

from app.core.errors import BusinessRuleError
from app.models.planning import ForecastDataPoint
from app.domain.planning.enums import ForecastMethod, PeriodUnit

# Month-of-year multipliers used by the seasonal method
SEASONAL_PATTERN = (1.0, 0.95, 1.1, 1.05, 1.0, 0.9, 0.85, 0.9, 1.05, 1.15, 1.1, 1.2)
SEASONAL_GROWTH = 0.05
DEFAULT_EXPONENTIAL_GROWTH = 0.05

BASE_BOUND_MARGIN = 0.05
BASE_CONFIDENCE = 95.0
MAX_ACCURACY = 95.0


@dataclass(frozen=True)
class MethodProfile:
    """Bounds band and confidence decay of a method."""
    lower: float
    upper: float
    start_confidence: float
    decay: float
    floor: float

    def confidence(self, offset: int) -> float:
        return max(self.floor, self.start_confidence - self.decay * offset)


METHOD_PROFILES: Dict[ForecastMethod, MethodProfile] = {
    ForecastMethod.LINEAR: MethodProfile(0.9, 1.1, 90, 2, 60),
    ForecastMethod.EXPONENTIAL: MethodProfile(0.85, 1.15, 85, 3, 50),
    ForecastMethod.SEASONAL: MethodProfile(0.8, 1.2, 80, 2, 60),
    ForecastMethod.REGRESSION: MethodProfile(0.88, 1.12, 88, 2, 65),
}


def linear_values(series: Sequence[float], horizon: int) -> List[float]:
    n = len(series)
    trend = (series[-1] - series[0]) / (n - 1) if n > 1 else 0.0
    return [max(0.0, series[-1] + trend * (i + 1)) for i in range(horizon)]


def exponential_values(series: Sequence[float], horizon: int) -> List[float]:
    n = len(series)
    if n > 1:
        if series[0] == 0:
            raise BusinessRuleError(
                "Projeção exponencial exige valor inicial diferente de zero"
            )
        growth = (series[-1] / series[0]) ** (1 / (n - 1)) - 1
    else:
        growth = DEFAULT_EXPONENTIAL_GROWTH
    return [series[-1] * (1 + growth) ** (i + 1) for i in range(horizon)]


def seasonal_values(series: Sequence[float], horizon: int) -> List[float]:
    base = sum(series) / len(series)
    return [
        base * SEASONAL_PATTERN[i % 12] * (1 + SEASONAL_GROWTH)
        for i in range(horizon)
    ]


def least_squares(series: Sequence[float]):
    """Slope and intercept of value over zero-based index."""
    n = len(series)
    sum_x = sum(range(n))
    sum_y = sum(series)
    sum_xy = sum(i * y for i, y in enumerate(series))
    sum_xx = sum(i * i for i in range(n))
    denominator = n * sum_xx - sum_x * sum_x
    if denominator == 0:
        # A single point has no slope
        return 0.0, sum_y / n
    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def regression_values(series: Sequence[float], horizon: int) -> List[float]:
    slope, intercept = least_squares(series)
    n = len(series)
    return [max(0.0, slope * (n + i) + intercept) for i in range(horizon)]


VALUE_GENERATORS: Dict[ForecastMethod, Callable[[Sequence[float], int], List[float]]] = {
    ForecastMethod.LINEAR: linear_values,
    ForecastMethod.EXPONENTIAL: exponential_values,
    ForecastMethod.SEASONAL: seasonal_values,
    ForecastMethod.REGRESSION: regression_values,
}


def period_label(start: date, offset: int, unit: PeriodUnit) -> str:
    """
    Label of the period ``offset`` units after ``start``.

    Monthly → ``YYYY-MM``, quarterly → ``Qn/YYYY``, yearly → ``YYYY``.
    """
    unit = PeriodUnit(unit)
    if unit == PeriodUnit.MONTHLY:
        return (start + relativedelta(months=offset)).strftime("%Y-%m")
    if unit == PeriodUnit.QUARTERLY:
        moved = start + relativedelta(months=3 * offset)
        return f"Q{(moved.month - 1) // 3 + 1}/{moved.year}"
    return str((start + relativedelta(years=offset)).year)


def series_values(base_data: Sequence[ForecastDataPoint]) -> List[float]:
    """Actual values, falling back to the projected value where no actual exists."""
    return [
        float(p.actual) if p.actual is not None else float(p.projected)
        for p in base_data
    ]


def generate_projections(
    series: Sequence[float],
    method: ForecastMethod,
    horizon: int,
    period_unit: PeriodUnit = PeriodUnit.MONTHLY,
    start: Optional[date] = None,
) -> List[ForecastDataPoint]:
    """
    Project ``horizon`` future points from a historical series.

    Args:
        series: Historical values, oldest first
        method: Projection method
        horizon: Number of future periods
        period_unit: Calendar step used for the period labels
        start: Date the labels count from (today when omitted)

    Returns:
        One ForecastDataPoint per future period

    Raises:
        BusinessRuleError: If the series is empty, or the exponential
            method is given a series starting at zero
    """
    if not series:
        raise BusinessRuleError("Pelo menos um dado base válido é obrigatório")
    method = ForecastMethod(method)
    start = start or date.today()
    profile = METHOD_PROFILES[method]
    values = VALUE_GENERATORS[method]([float(v) for v in series], horizon)

    return [
        ForecastDataPoint(
            period=period_label(start, i + 1, period_unit),
            projected=value,
            lower_bound=value * profile.lower,
            upper_bound=value * profile.upper,
            confidence=profile.confidence(i),
        )
        for i, value in enumerate(values)
    ]


def base_point(period: str, actual: float) -> ForecastDataPoint:
    """Historical point stored with a ±5% band at full confidence."""
    return ForecastDataPoint(
        period=period,
        actual=actual,
        projected=actual,
        lower_bound=actual * (1 - BASE_BOUND_MARGIN),
        upper_bound=actual * (1 + BASE_BOUND_MARGIN),
        confidence=BASE_CONFIDENCE,
    )


def average_confidence(points: Sequence[ForecastDataPoint]) -> float:
    if not points:
        return 0.0
    return sum(p.confidence for p in points) / len(points)


def estimate_accuracy(base_data: Sequence[ForecastDataPoint]) -> float:
    if not base_data:
        return 0.0
    return min(MAX_ACCURACY, average_confidence(base_data))
