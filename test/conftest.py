# Test type: Configuration
# Validation to be executed: Shared fixtures for all test modules
# Command: pytest test/ -v (this file is auto-loaded by pytest)

"""Shared pytest fixtures for the Financial Projection & Tax API test suite."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from fincalc.main import app
from fincalc.services.history_service import InMemoryHistoryStore, get_history_store
from fincalc.services.tax_service import TaxBracket, TaxSchedule


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def history_store():
    """A fresh history store injected in place of the process-wide one."""
    store = InMemoryHistoryStore(max_entries=50)
    app.dependency_overrides[get_history_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_history_store, None)


@pytest.fixture
async def client(history_store):
    """Async HTTP client bound to the FastAPI app (no real server needed)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


# ── Sample data fixtures ─────────────────────────────────────────────────

@pytest.fixture
def flat_schedule():
    """10 % on every rupee, for checking schedule plumbing without slabs."""
    return TaxSchedule(name="Flat 10", brackets=(TaxBracket(float("inf"), 0.10),))


@pytest.fixture
def sip_body():
    """Default values of the dashboard's SIP calculator form."""
    return {"monthlyInvestment": 10000, "timePeriod": 10, "returnRate": 12}


@pytest.fixture
def emi_body():
    """Default values of the dashboard's EMI calculator form."""
    return {"loanAmount": 1_000_000, "interestRate": 8.5, "tenure": 120}
