# Test type: End-to-End (E2E) API
# Validation to be executed: Full HTTP round-trip for every API endpoint
# Command: pytest test/test_e2e_api.py -v

"""End-to-end tests that exercise every API endpoint via HTTP using the ASGI
transport (no real server process required).  These tests verify request/
response contracts, status codes, and payload shapes.
"""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.anyio


BASE = "/api/v1"


# ══════════════════════════════════════════════════════════════════════════
# 1.  Health Check
# ══════════════════════════════════════════════════════════════════════════


async def test_health_check(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"
    assert resp.json()["database"] == "down"


async def test_response_time_header(client):
    resp = await client.get("/health")
    assert "X-Response-Time-Ms" in resp.headers


# ══════════════════════════════════════════════════════════════════════════
# 2.  POST /projections:project
# ══════════════════════════════════════════════════════════════════════════


async def test_project_zero_rate(client):
    """0 % growth: 1000 + 100 × 12 × year."""
    resp = await client.post(
        f"{BASE}/projections:project",
        json={
            "initialAmount": 1000,
            "recurringContribution": 100,
            "annualRatePercent": 0,
            "horizonYears": 3,
        },
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [p["value"] for p in data["projection"]] == [2200.0, 3400.0, 4600.0]
    assert [p["year"] for p in data["projection"]] == [1, 2, 3]
    assert data["finalValue"] == 4600.0
    assert data["totalContributed"] == 3600.0
    assert data["totalGrowth"] == 0.0


async def test_project_end_of_period_annual(client):
    resp = await client.post(
        f"{BASE}/projections:project",
        json={
            "initialAmount": 1000,
            "recurringContribution": 100,
            "annualRatePercent": 10,
            "horizonYears": 2,
            "periodsPerYear": 1,
            "contributionTiming": "end-of-period",
        },
    )
    assert resp.status_code == 200
    assert [p["value"] for p in resp.json()["projection"]] == [1200.0, 1420.0]


async def test_project_zero_horizon(client):
    resp = await client.post(
        f"{BASE}/projections:project",
        json={"initialAmount": 500, "annualRatePercent": 8, "horizonYears": 0},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["projection"] == []
    assert data["finalValue"] == 500.0


@pytest.mark.parametrize(
    "override",
    [
        {"initialAmount": -1},
        {"recurringContribution": -10},
        {"horizonYears": -1},
        {"periodsPerYear": 0},
        {"contributionTiming": "sometimes"},
    ],
)
async def test_project_invalid_returns_422(client, override):
    body = {"initialAmount": 1000, "recurringContribution": 100, "annualRatePercent": 8, "horizonYears": 5}
    body.update(override)
    resp = await client.post(f"{BASE}/projections:project", json=body)
    assert resp.status_code == 422


async def test_project_rate_above_cap_returns_422(client):
    resp = await client.post(
        f"{BASE}/projections:project",
        json={
            "initialAmount": 0,
            "recurringContribution": 100,
            "annualRatePercent": 10_000,
            "horizonYears": 100,
        },
    )
    assert resp.status_code == 422


async def test_project_near_zero_rate(client):
    resp = await client.post(
        f"{BASE}/projections:project",
        json={"initialAmount": 0, "recurringContribution": 1000, "annualRatePercent": 1e-15, "horizonYears": 1},
    )
    assert resp.status_code == 200
    assert resp.json()["finalValue"] == pytest.approx(12_000)


# ══════════════════════════════════════════════════════════════════════════
# 3.  POST /projections:sip
# ══════════════════════════════════════════════════════════════════════════


async def test_sip_default(client, sip_body):
    resp = await client.post(f"{BASE}/projections:sip", json=sip_body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["totalInvested"] == 1_200_000.0
    assert data["maturityValue"] == pytest.approx(2_323_390.76, abs=1.0)
    assert data["expectedReturns"] == pytest.approx(data["maturityValue"] - 1_200_000, abs=0.01)


async def test_sip_below_minimum_returns_422(client, sip_body):
    sip_body["monthlyInvestment"] = 0
    resp = await client.post(f"{BASE}/projections:sip", json=sip_body)
    assert resp.status_code == 422


# ══════════════════════════════════════════════════════════════════════════
# 4.  POST /projections:plan
# ══════════════════════════════════════════════════════════════════════════


PLAN_BODY = {
    "goal": "Save for a house down payment",
    "timeframe": 3,
    "initialInvestment": 10000,
    "monthlyContribution": 500,
    "riskTolerance": "medium",
    "startYear": 2024,
}


async def test_plan_labels_calendar_years(client):
    resp = await client.post(f"{BASE}/projections:plan", json=PLAN_BODY)
    assert resp.status_code == 200
    data = resp.json()
    assert data["annualRatePercent"] == 8.0
    assert data["riskTolerance"] == "medium"
    assert [p["calendarYear"] for p in data["projection"]] == [2025, 2026, 2027]
    values = [p["value"] for p in data["projection"]]
    assert values == sorted(values)


async def test_plan_defaults_start_year(client):
    body = {k: v for k, v in PLAN_BODY.items() if k != "startYear"}
    resp = await client.post(f"{BASE}/projections:plan", json=body)
    assert resp.status_code == 200
    first = resp.json()["projection"][0]
    assert first["calendarYear"] is not None


async def test_plan_unknown_risk_returns_422(client):
    resp = await client.post(f"{BASE}/projections:plan", json={**PLAN_BODY, "riskTolerance": "yolo"})
    assert resp.status_code == 422


async def test_plan_short_goal_returns_422(client):
    resp = await client.post(f"{BASE}/projections:plan", json={**PLAN_BODY, "goal": "car"})
    assert resp.status_code == 422


# ══════════════════════════════════════════════════════════════════════════
# 5.  POST /loans:emi
# ══════════════════════════════════════════════════════════════════════════


async def test_emi_default(client, emi_body):
    resp = await client.post(f"{BASE}/loans:emi", json=emi_body)
    assert resp.status_code == 200
    data = resp.json()
    assert data["monthlyEmi"] == pytest.approx(12_399, abs=1.0)
    assert data["totalPayment"] == pytest.approx(data["monthlyEmi"] * 120, abs=1.0)
    assert data["totalInterest"] == pytest.approx(data["totalPayment"] - 1_000_000, abs=0.01)


async def test_emi_zero_rate(client):
    resp = await client.post(f"{BASE}/loans:emi", json={"loanAmount": 120_000, "interestRate": 0, "tenure": 12})
    assert resp.status_code == 200
    data = resp.json()
    assert data["monthlyEmi"] == 10_000.0
    assert data["totalInterest"] == 0.0
    assert data["totalPayment"] == 120_000.0


@pytest.mark.parametrize(
    "override", [{"loanAmount": 0}, {"interestRate": -1}, {"tenure": 0}, {"tenure": 1.5}]
)
async def test_emi_invalid_returns_422(client, emi_body, override):
    resp = await client.post(f"{BASE}/loans:emi", json={**emi_body, **override})
    assert resp.status_code == 422


async def test_emi_near_zero_rate(client):
    resp = await client.post(f"{BASE}/loans:emi", json={"loanAmount": 100_000, "interestRate": 1e-15, "tenure": 12})
    assert resp.status_code == 200
    data = resp.json()
    assert data["monthlyEmi"] == pytest.approx(8_333.33, abs=0.01)
    assert data["totalPayment"] == pytest.approx(100_000, abs=0.01)


@pytest.mark.parametrize("path, body", [
    ("/loans:emi", {"loanAmount": 100_000, "interestRate": 500, "tenure": 12}),
    ("/projections:sip", {"monthlyInvestment": 1000, "timePeriod": 5, "returnRate": 500}),
])
async def test_rate_above_cap_returns_422(client, path, body):
    resp = await client.post(f"{BASE}{path}", json=body)
    assert resp.status_code == 422


# ══════════════════════════════════════════════════════════════════════════
# 6.  Tax endpoints
# ══════════════════════════════════════════════════════════════════════════


async def test_tax_compute_10L(client):
    resp = await client.post(f"{BASE}/tax:compute", json={"annualIncome": 1_000_000})
    assert resp.status_code == 200
    data = resp.json()
    assert data["schedule"] == "New Regime FY2023-24"
    assert data["tax"] == 60_000.0
    assert data["taxWithCess"] == 62_400.0
    assert data["rebateApplied"] is False
    assert len(data["slabs"]) == 6
    assert data["slabs"][3]["taxableAmount"] == 100_000.0
    assert data["slabs"][3]["tax"] == 15_000.0
    assert data["slabs"][-1]["upperBound"] is None


async def test_tax_compute_rebate(client):
    resp = await client.post(f"{BASE}/tax:compute", json={"annualIncome": 700_000})
    assert resp.status_code == 200
    data = resp.json()
    assert data["tax"] == 0.0
    assert data["taxWithCess"] == 0.0
    assert data["rebateApplied"] is True


async def test_tax_compute_unknown_schedule(client):
    resp = await client.post(
        f"{BASE}/tax:compute", json={"annualIncome": 1_000_000, "schedule": "Imaginary"}
    )
    assert resp.status_code == 422
    assert "Unknown tax schedule" in resp.json()["detail"]


async def test_tax_compute_negative_income(client):
    resp = await client.post(f"{BASE}/tax:compute", json={"annualIncome": -1})
    assert resp.status_code == 422


async def test_tax_deduction_worked_example(client):
    resp = await client.post(
        f"{BASE}/tax:deduction",
        json={"annualIncome": 1_000_000, "existingInvestments": 50_000},
    )
    assert resp.status_code == 200
    assert resp.json() == {
        "taxWithoutDeduction": 62_400.0,
        "taxWithDeduction": 54_600.0,
        "taxSaved": 7_800.0,
        "availableLimit": 100_000.0,
    }


async def test_tax_schedules(client):
    resp = await client.get(f"{BASE}/tax/schedules")
    assert resp.status_code == 200
    data = resp.json()
    assert data["default"] == "New Regime FY2023-24"
    names = [s["name"] for s in data["schedules"]]
    assert "New Regime FY2023-24" in names


# ══════════════════════════════════════════════════════════════════════════
# 7.  GET /history
# ══════════════════════════════════════════════════════════════════════════


async def test_history_records_calculations(client, history_store, sip_body, emi_body):
    await client.post(f"{BASE}/projections:sip", json=sip_body)
    await client.post(f"{BASE}/loans:emi", json=emi_body)

    resp = await client.get(f"{BASE}/history")
    assert resp.status_code == 200
    entries = resp.json()["entries"]
    assert [e["kind"] for e in entries] == ["emi", "sip"]
    assert entries[1]["inputs"]["monthlyInvestment"] == 10000


async def test_history_skips_rejected_requests(client, history_store):
    await client.post(f"{BASE}/loans:emi", json={"loanAmount": 0, "interestRate": 5, "tenure": 12})
    assert history_store.list() == []


async def test_history_limit(client, sip_body):
    for _ in range(3):
        await client.post(f"{BASE}/projections:sip", json=sip_body)
    resp = await client.get(f"{BASE}/history", params={"limit": 2})
    assert len(resp.json()["entries"]) == 2


# ══════════════════════════════════════════════════════════════════════════
# 8.  GET /performance
# ══════════════════════════════════════════════════════════════════════════


async def test_performance_report(client):
    await client.get("/health")
    resp = await client.get(f"{BASE}/performance")
    assert resp.status_code == 200
    data = resp.json()
    assert data["memory"].endswith(" MB")
    assert data["threads"] >= 1
    assert len(data["time"]) == len("00:00:00.000")
