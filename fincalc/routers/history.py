"""Calculation history endpoint:
    GET  /api/v1/history
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from fincalc.models.schemas import HistoryEntry, HistoryResponse
from fincalc.services.history_service import HistoryStore, get_history_store

router = APIRouter(
    prefix="/api/v1",
    tags=["History"],
)


@router.get(
    "/history",
    response_model=HistoryResponse,
    summary="Most recent calculations, newest first",
)
async def history(
    limit: int = Query(50, ge=1, le=500),
    store: HistoryStore = Depends(get_history_store),
) -> HistoryResponse:
    return HistoryResponse(
        entries=[
            HistoryEntry(
                kind=r.kind,
                inputs=r.inputs,
                outputs=r.outputs,
                recordedAt=r.recorded_at,
            )
            for r in store.list(limit)
        ]
    )
