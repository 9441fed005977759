"""Routers for tax endpoints:
    POST  /api/v1/tax:compute
    POST  /api/v1/tax:deduction
    GET   /api/v1/tax/schedules
"""

from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from fincalc.config import settings
from fincalc.models.schemas import (
    DeductionRequest,
    DeductionResponse,
    ScheduleOut,
    SchedulesResponse,
    SlabOut,
    TaxRequest,
    TaxResponse,
)
from fincalc.services.history_service import (
    HistoryStore,
    get_history_store,
    record_calculation,
)
from fincalc.services.tax_service import (
    TaxSchedule,
    compute_deduction_impact,
    compute_tax,
    compute_tax_with_cess,
    get_schedule,
    list_schedules,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["Tax"],
)


def _bound(value: float) -> Optional[float]:
    return None if math.isinf(value) else value


def _schedule_slabs(schedule: TaxSchedule) -> List[SlabOut]:
    return [
        SlabOut(lowerBound=lower, upperBound=_bound(upper), rate=rate)
        for lower, upper, rate in schedule.slabs()
    ]


def _breakdown_slabs(rows: Iterable) -> List[SlabOut]:
    return [
        SlabOut(
            lowerBound=row.lower_bound,
            upperBound=_bound(row.upper_bound),
            rate=row.rate,
            taxableAmount=row.taxable_amount,
            tax=row.tax,
        )
        for row in rows
    ]


# ── 1. Slab tax ──────────────────────────────────────────────────────────

@router.post(
    "/tax:compute",
    response_model=TaxResponse,
    summary="Income tax under a progressive slab schedule",
)
async def tax_compute(
    body: TaxRequest,
    store: HistoryStore = Depends(get_history_store),
) -> TaxResponse:
    """Slab tax before and after cess, with a per-slab breakdown.

    Income at or below the rebate threshold pays nothing; the breakdown is
    still returned so the dashboard can show where the income falls.
    """
    rebate = settings.REBATE_THRESHOLD if body.rebateThreshold is None else body.rebateThreshold
    try:
        schedule = get_schedule(body.schedule)
        tax = compute_tax(body.annualIncome, schedule, rebate)
        tax_with_cess = compute_tax_with_cess(body.annualIncome, schedule, rebate, body.cessRate)
    except ValueError as exc:
        logger.warning("Rejected tax request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = TaxResponse(
        schedule=schedule.name,
        tax=tax,
        taxWithCess=tax_with_cess,
        rebateApplied=body.annualIncome <= rebate,
        slabs=_breakdown_slabs(schedule.slab_breakdown(body.annualIncome)),
    )
    await record_calculation(
        store,
        "/tax:compute",
        "tax",
        body.model_dump(mode="json"),
        {"tax": tax, "taxWithCess": tax_with_cess},
    )
    return response


# ── 2. Deduction impact ──────────────────────────────────────────────────

@router.post(
    "/tax:deduction",
    response_model=DeductionResponse,
    summary="Tax saved by a Section 80C style deduction",
)
async def tax_deduction(
    body: DeductionRequest,
    store: HistoryStore = Depends(get_history_store),
) -> DeductionResponse:
    """Compare tax (with cess) on gross income and on income less the
    deductible investment, capped at the deduction limit.
    """
    try:
        result = compute_deduction_impact(
            gross_income=body.annualIncome,
            investment=body.existingInvestments,
            deduction_limit=body.deductionLimit,
            schedule=body.schedule,
            rebate_threshold=body.rebateThreshold,
            cess_rate=body.cessRate,
        )
    except ValueError as exc:
        logger.warning("Rejected deduction request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = DeductionResponse(
        taxWithoutDeduction=result.tax_before_deduction,
        taxWithDeduction=result.tax_after_deduction,
        taxSaved=result.tax_saved,
        availableLimit=result.available_deduction_headroom,
    )
    await record_calculation(
        store, "/tax:deduction", "deduction", body.model_dump(mode="json"), response.model_dump()
    )
    return response


# ── 3. Schedules ─────────────────────────────────────────────────────────

@router.get(
    "/tax/schedules",
    response_model=SchedulesResponse,
    summary="Registered tax schedules",
)
async def tax_schedules() -> SchedulesResponse:
    return SchedulesResponse(
        default=settings.DEFAULT_SCHEDULE,
        schedules=[
            ScheduleOut(name=s.name, slabs=_schedule_slabs(s)) for s in list_schedules()
        ],
    )
