"""Future-value projections - lump sum plus a recurring contribution.

Lump sum (compounded annually):
    L_y = P × (1 + r)^y

Recurring contribution C per sub-period, m sub-periods a year, i = r / m:
    A_y = C × ((1 + i)^(y·m) − 1) / i          (end-of-period)
    A_y = C × ((1 + i)^(y·m) − 1) / i × (1 + i) (start-of-period, annuity-due)
    A_y = C × y × m                             (i = 0)

value_y = round2(L_y + A_y) for y = 1 … horizon.

Intermediate math stays in full float precision; only reported values are
rounded.  The year index is the only time input - calendar years are labels.
"""

from __future__ import annotations

import math
from typing import List, Optional

from fincalc.config import settings
from fincalc.errors import InvalidArgument
from fincalc.models.domain import (
    ContributionTiming,
    ProjectionPoint,
    ProjectionRequest,
    ProjectionResult,
    RiskTolerance,
    SipResult,
)
from fincalc.utils.helpers import (
    calendar_year_label,
    percent_to_fraction,
    periodic_rate,
    require_non_negative,
    require_number,
    require_positive,
    require_whole_number,
    round_currency,
)


def _check_inputs(
    initial_amount: float,
    recurring_contribution: float,
    annual_rate_percent: float,
    horizon_years: int,
    periods_per_year: int,
) -> None:
    require_non_negative("initial_amount", initial_amount)
    require_non_negative("recurring_contribution", recurring_contribution)
    require_whole_number("horizon_years", horizon_years, minimum=0)
    require_whole_number("periods_per_year", periods_per_year, minimum=1)
    # Below -100 % the growth factor turns negative and the series is meaningless.
    if require_number("annual_rate_percent", annual_rate_percent) <= -100:
        raise InvalidArgument(
            f"annual_rate_percent must be greater than -100, got {annual_rate_percent}"
        )


def _out_of_range(request: ProjectionRequest, year: int) -> InvalidArgument:
    return InvalidArgument(
        f"Projection at {request.annual_rate_percent}% a year leaves the representable "
        f"range in year {year}"
    )


def _timing(value: ContributionTiming | str) -> ContributionTiming:
    try:
        return ContributionTiming(value)
    except ValueError:
        raise InvalidArgument(
            f"Unknown contribution timing '{value}'. "
            f"Expected one of: {', '.join(t.value for t in ContributionTiming)}."
        ) from None


def build_request(
    initial_amount: float,
    recurring_contribution: float,
    annual_rate_percent: float,
    horizon_years: int,
    periods_per_year: int = 12,
    contribution_timing: ContributionTiming | str = ContributionTiming.START_OF_PERIOD,
) -> ProjectionRequest:
    """Validate raw inputs and freeze them into a ``ProjectionRequest``."""
    _check_inputs(
        initial_amount,
        recurring_contribution,
        annual_rate_percent,
        horizon_years,
        periods_per_year,
    )
    return ProjectionRequest(
        initial_amount=initial_amount,
        recurring_contribution=recurring_contribution,
        annual_rate_percent=annual_rate_percent,
        horizon_years=horizon_years,
        periods_per_year=periods_per_year,
        contribution_timing=_timing(contribution_timing),
    )


def annuity_factor(rate: float, periods: int, timing: ContributionTiming) -> float:
    """Future value of 1 paid every period for *periods* periods at *rate*."""
    if rate == 0:
        return float(periods)
    # expm1/log1p keeps (1 + i)^n - 1 accurate when i is close to 0.
    growth_minus_one = math.expm1(periods * math.log1p(rate))
    if growth_minus_one == 0:
        return float(periods)
    factor = growth_minus_one / rate
    if timing is ContributionTiming.START_OF_PERIOD:
        factor *= 1 + rate
    return factor


# ── Public API ────────────────────────────────────────────────────────────

def project(request: ProjectionRequest) -> ProjectionResult:
    """Year-by-year value of *request* for years 1 … ``horizon_years``.

    Raises ``InvalidArgument`` for negative amounts, a negative horizon, a
    non-positive ``periods_per_year``, or a rate that overflows a float.
    """
    _check_inputs(
        request.initial_amount,
        request.recurring_contribution,
        request.annual_rate_percent,
        request.horizon_years,
        request.periods_per_year,
    )

    annual_rate = percent_to_fraction(request.annual_rate_percent)
    rate = periodic_rate(request.annual_rate_percent, request.periods_per_year)

    points: List[ProjectionPoint] = []
    for year in range(1, request.horizon_years + 1):
        periods_elapsed = year * request.periods_per_year
        try:
            lump_sum_value = request.initial_amount * (1 + annual_rate) ** year
            contribution_value = request.recurring_contribution * annuity_factor(
                rate, periods_elapsed, request.contribution_timing
            )
        except OverflowError:
            raise _out_of_range(request, year) from None
        value = lump_sum_value + contribution_value
        if not math.isfinite(value):
            raise _out_of_range(request, year)
        points.append(ProjectionPoint(period_index=year, value=round_currency(value)))

    total_contributed = (
        request.recurring_contribution * request.horizon_years * request.periods_per_year
    )
    final_value = points[-1].value if points else request.initial_amount

    return ProjectionResult(
        points=points,
        initial_amount=round_currency(request.initial_amount),
        total_contributed=round_currency(total_contributed),
        total_growth=round_currency(final_value - total_contributed - request.initial_amount),
    )


def calculate_sip(
    monthly_investment: float,
    years: int,
    annual_rate_percent: float,
) -> SipResult:
    """Systematic Investment Plan maturity: monthly deposits, annuity-due.

    10,000 a month for 10 years at 12 % matures at ≈ 23,23,390.76.
    """
    require_positive("monthly_investment", monthly_investment)
    require_whole_number("years", years, minimum=1)
    require_non_negative("annual_rate_percent", annual_rate_percent)

    result = project(
        build_request(
            initial_amount=0.0,
            recurring_contribution=monthly_investment,
            annual_rate_percent=annual_rate_percent,
            horizon_years=years,
        )
    )
    return SipResult(
        total_invested=result.total_contributed,
        expected_returns=result.total_growth,
        maturity_value=result.final_value,
    )


def rate_for_risk(risk_tolerance: RiskTolerance | str) -> float:
    """Configured annual growth rate (percent) for a risk tolerance."""
    try:
        key = RiskTolerance(risk_tolerance).value
    except ValueError:
        raise InvalidArgument(
            f"Unknown risk tolerance '{risk_tolerance}'. "
            f"Expected one of: {', '.join(t.value for t in RiskTolerance)}."
        ) from None
    return settings.risk_rates[key]


def plan_goal(
    initial_investment: float,
    monthly_contribution: float,
    years: int,
    risk_tolerance: RiskTolerance | str,
    start_year: int,
    annual_rate_percent: Optional[float] = None,
) -> ProjectionResult:
    """Goal-planner projection labelled with calendar years.

    The growth rate comes from *risk_tolerance* unless *annual_rate_percent*
    is given.  Year N of the plan is labelled ``start_year + N``.
    """
    require_whole_number("years", years, minimum=1)
    rate = rate_for_risk(risk_tolerance) if annual_rate_percent is None else annual_rate_percent

    result = project(
        build_request(
            initial_amount=initial_investment,
            recurring_contribution=monthly_contribution,
            annual_rate_percent=rate,
            horizon_years=years,
        )
    )
    labelled = [
        point.model_copy(
            update={"calendar_year": calendar_year_label(point.period_index, start_year)}
        )
        for point in result.points
    ]
    return result.model_copy(update={"points": labelled})
