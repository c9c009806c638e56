"""Planned-vs-actual variance analysis."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Union

from app.domain.planning.enums import VarianceStatus

Number = Union[int, float, Decimal]

DEFAULT_THRESHOLD_PCT = 5.0


@dataclass(frozen=True)
class VarianceResult:
    planned: Decimal
    actual: Decimal
    variance: Decimal
    variance_percentage: float
    status: VarianceStatus


def calculate_variance(
    planned: Number,
    actual: Number,
    threshold_pct: float = DEFAULT_THRESHOLD_PCT,
) -> VarianceResult:
    """
    Compare an actual amount against its plan.

    Overspending beyond the threshold is unfavorable, underspending beyond
    it favorable; anything within ±threshold is neutral. A zero plan yields
    a 0% variance.
    """
    planned = Decimal(str(planned))
    actual = Decimal(str(actual))
    variance = actual - planned
    pct = float(variance / planned * 100) if planned != 0 else 0.0

    status = VarianceStatus.NEUTRAL
    if abs(pct) > threshold_pct:
        status = VarianceStatus.UNFAVORABLE if pct > 0 else VarianceStatus.FAVORABLE

    return VarianceResult(
        planned=planned,
        actual=actual,
        variance=variance,
        variance_percentage=pct,
        status=status,
    )
