"""Router for the loan endpoint:
    POST  /api/v1/loans:emi
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from fincalc.models.schemas import EmiRequest, EmiResponse
from fincalc.services.history_service import (
    HistoryStore,
    get_history_store,
    record_calculation,
)
from fincalc.services.loan_service import amortize_loan
from fincalc.utils.helpers import round_currency

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1",
    tags=["Loans"],
)


@router.post(
    "/loans:emi",
    response_model=EmiResponse,
    summary="Equated Monthly Installment and loan totals",
)
async def loans_emi(
    body: EmiRequest,
    store: HistoryStore = Depends(get_history_store),
) -> EmiResponse:
    """Return the monthly installment, total interest and total payment,
    each rounded to 2 dp for display.
    """
    try:
        result = amortize_loan(body.loanAmount, body.interestRate, body.tenure)
    except ValueError as exc:
        logger.warning("Rejected EMI request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    response = EmiResponse(
        monthlyEmi=round_currency(result.monthly_payment),
        totalInterest=round_currency(result.total_interest),
        totalPayment=round_currency(result.total_payment),
    )
    await record_calculation(
        store, "/loans:emi", "emi", body.model_dump(mode="json"), response.model_dump()
    )
    return response
