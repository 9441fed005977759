"""FastAPI application entry point.

Starts the Financial Projection & Tax API on port 5480.

Usage:
    uvicorn fincalc.main:app --host 0.0.0.0 --port 5480 --reload
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from fincalc.config import settings
from fincalc.database import close_db, get_session, init_db, is_db_available
from fincalc.models.db_models import PerformanceLog
from fincalc.routers import history, loans, performance, projections, tax
from fincalc.routers.performance import get_memory_mb, record_response_time

# ── Logging ──────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan (startup + shutdown) ────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Financial Projection & Tax API on port %s …", settings.APP_PORT)
    await init_db()
    yield
    await close_db()
    logger.info("Application shutdown complete.")


# ── Application factory ──────────────────────────────────────────────────

app = FastAPI(
    title="Financial Projection & Tax API",
    description=(
        "Deterministic calculators behind the personal-finance dashboard: "
        "future-value projections (goal planner, SIP), loan EMI totals, and "
        "progressive income tax with rebate, cess and Section 80C deduction impact."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request-level timing & performance logging middleware ─────────────────

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Response-Time-Ms"] = f"{elapsed_ms:.2f}"

    # Record for the /performance endpoint
    record_response_time(elapsed_ms)

    try:
        async with get_session() as session:
            if session is not None:
                session.add(
                    PerformanceLog(
                        endpoint=str(request.url.path),
                        method=request.method,
                        response_time_ms=round(elapsed_ms, 2),
                        memory_mb=round(get_memory_mb(), 2),
                        threads=threading.active_count(),
                    )
                )
    except SQLAlchemyError as exc:
        logger.debug("Performance log not persisted: %s", exc)

    return response


# ── Global exception handler ─────────────────────────────────────────────

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error. Please check the logs."},
    )


# ── Register routers ─────────────────────────────────────────────────────
app.include_router(projections.router)
app.include_router(loans.router)
app.include_router(tax.router)
app.include_router(history.router)
app.include_router(performance.router)


# ── Health check ──────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "port": settings.APP_PORT,
        "database": "up" if is_db_available() else "down",
    }


# ── Dev entry point ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "fincalc.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=True,
    )
