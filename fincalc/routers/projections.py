"""Routers for projection endpoints:
    POST  /api/v1/projections:project
    POST  /api/v1/projections:sip
    POST  /api/v1/projections:plan
"""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException

from fincalc.models.domain import ProjectionResult
from fincalc.models.schemas import (
    PlanRequest,
    PlanResponse,
    ProjectionPointOut,
    ProjectRequest,
    ProjectResponse,
    SipRequest,
    SipResponse,
)
from fincalc.services.history_service import (
    HistoryStore,
    get_history_store,
    record_calculation,
)
from fincalc.services.projection_service import (
    build_request,
    calculate_sip,
    plan_goal,
    project,
    rate_for_risk,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["Projections"],
)


def _points(result: ProjectionResult) -> list[ProjectionPointOut]:
    return [
        ProjectionPointOut(year=p.period_index, value=p.value, calendarYear=p.calendar_year)
        for p in result.points
    ]


# ── 1. Generic projection ────────────────────────────────────────────────

@router.post(
    "/projections:project",
    response_model=ProjectResponse,
    summary="Year-by-year future value of a lump sum plus recurring contributions",
)
async def projections_project(
    body: ProjectRequest,
    store: HistoryStore = Depends(get_history_store),
) -> ProjectResponse:
    """Compound the initial amount annually and the recurring contribution
    per sub-period; one value per year, rounded to 2 dp.
    """
    try:
        result = project(
            build_request(
                initial_amount=body.initialAmount,
                recurring_contribution=body.recurringContribution,
                annual_rate_percent=body.annualRatePercent,
                horizon_years=body.horizonYears,
                periods_per_year=body.periodsPerYear,
                contribution_timing=body.contributionTiming,
            )
        )
    except ValueError as exc:
        logger.warning("Rejected projection request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = ProjectResponse(
        projection=_points(result),
        finalValue=result.final_value,
        totalContributed=result.total_contributed,
        totalGrowth=result.total_growth,
    )
    await record_calculation(
        store,
        "/projections:project",
        "projection",
        body.model_dump(mode="json"),
        {"finalValue": response.finalValue, "totalGrowth": response.totalGrowth},
    )
    return response


# ── 2. SIP calculator ────────────────────────────────────────────────────

@router.post(
    "/projections:sip",
    response_model=SipResponse,
    summary="Systematic Investment Plan maturity value",
)
async def projections_sip(
    body: SipRequest,
    store: HistoryStore = Depends(get_history_store),
) -> SipResponse:
    """Monthly deposits at the start of each month, compounded monthly."""
    try:
        result = calculate_sip(body.monthlyInvestment, body.timePeriod, body.returnRate)
    except ValueError as exc:
        logger.warning("Rejected SIP request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = SipResponse(
        totalInvested=result.total_invested,
        expectedReturns=result.expected_returns,
        maturityValue=result.maturity_value,
    )
    await record_calculation(
        store, "/projections:sip", "sip", body.model_dump(mode="json"), response.model_dump()
    )
    return response


# ── 3. Goal planner ──────────────────────────────────────────────────────

@router.post(
    "/projections:plan",
    response_model=PlanResponse,
    summary="Goal-planner projection labelled with calendar years",
)
async def projections_plan(
    body: PlanRequest,
    store: HistoryStore = Depends(get_history_store),
) -> PlanResponse:
    """Project savings toward a goal at the growth rate configured for the
    chosen risk tolerance.  Year N is labelled ``startYear + N``.
    """
    start_year = body.startYear if body.startYear is not None else date.today().year
    try:
        rate = rate_for_risk(body.riskTolerance)
        result = plan_goal(
            initial_investment=body.initialInvestment,
            monthly_contribution=body.monthlyContribution,
            years=body.timeframe,
            risk_tolerance=body.riskTolerance,
            start_year=start_year,
        )
    except ValueError as exc:
        logger.warning("Rejected plan request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = PlanResponse(
        goal=body.goal,
        riskTolerance=body.riskTolerance,
        annualRatePercent=rate,
        projection=_points(result),
        finalValue=result.final_value,
        totalContributed=result.total_contributed,
        totalGrowth=result.total_growth,
    )
    await record_calculation(
        store,
        "/projections:plan",
        "plan",
        body.model_dump(mode="json"),
        {"finalValue": response.finalValue, "annualRatePercent": rate},
    )
    return response
