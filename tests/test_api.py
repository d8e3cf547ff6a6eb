"""Integration tests for the FastAPI app.

Strategy:
- In-memory SQLite per test, swapped in through the DB dependency.
- The real app from main.py; the lifespan is not run by ASGITransport.
- The orchestrator is built around a scripted fake LLM, so no network calls.
"""

from __future__ import annotations

import aiosqlite
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from kennel.ai.orchestrator import ReportOrchestrator
from kennel.api.dependencies import aggregator_dependency, db_dependency, orchestrator_dependency
from kennel.errors import MalformedResponseError
from kennel.services.aggregator import BusinessDataAggregator
from main import app

pytestmark = pytest.mark.asyncio


async def _seed(db: aiosqlite.Connection) -> None:
    await db.executemany(
        "INSERT INTO dogs (id, name, breed, gender, birth_date, status) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (1, "Bella", "Golden Retriever", "female", "2023-05-01", "owned"),
            (2, "Max", "Golden Retriever", "male", "2021-02-10", "owned"),
        ],
    )
    await db.execute("INSERT INTO purchases (dog_id, amount, purchase_date) VALUES (2, 2500, '2021-06-01')")
    await db.execute("INSERT INTO expenses (dog_id, amount, category, expense_date) VALUES (1, 80, 'Dog food', '2025-11-02')")
    await db.execute(
        "INSERT INTO health_records (dog_id, record_type, treatment_type, record_date, cost) "
        "VALUES (1, 'vaccination', 'Rabies', '2025-09-01', 60)"
    )
    await db.commit()


@pytest.fixture
def llm(fake_llm):
    return fake_llm()


@pytest_asyncio.fixture
async def client(db: aiosqlite.Connection, llm, recorded_sleep):
    """HTTP test client over the in-memory DB and the fake LLM."""
    await _seed(db)

    async def override_db():
        yield db

    app.dependency_overrides[db_dependency] = override_db
    app.dependency_overrides[orchestrator_dependency] = lambda: ReportOrchestrator(llm, sleep=recorded_sleep)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------

async def test_health(client: AsyncClient, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    resp = await client.get("/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert data["llm_configured"] is False


async def test_health_with_api_key(client: AsyncClient, monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
    resp = await client.get("/health")
    assert resp.json()["llm_configured"] is True


# ---------------------------------------------------------------------------
# /analysis/snapshot
# ---------------------------------------------------------------------------

async def test_snapshot(client: AsyncClient):
    resp = await client.get("/analysis/snapshot")
    assert resp.status_code == 200
    data = resp.json()
    assert data["summary"]["total_dogs"] == 2
    assert data["summary"]["total_purchase_costs"] == 2500
    assert data["summary"]["total_expenses"] == 80
    assert set(data["performance"]) == {"sales_conversion_rate", "average_time_to_sale_days", "popular_breeds"}
    assert [d["name"] for d in data["dogs"]] == ["Bella", "Max"]
    assert {"fetch_animals", "derive"} <= set(data["timings"])


async def test_snapshot_repository_down(client: AsyncClient, fake_repository, recorded_sleep):
    repo = fake_repository().fail("animals")
    app.dependency_overrides[aggregator_dependency] = lambda: BusinessDataAggregator(repo, sleep=recorded_sleep)
    resp = await client.get("/analysis/snapshot")
    assert resp.status_code == 500
    assert "Data collection failed" in resp.json()["detail"]
    assert repo.calls == ["animals"] * 3


# ---------------------------------------------------------------------------
# /analysis/report
# ---------------------------------------------------------------------------

async def test_report_all_roles(client: AsyncClient, llm):
    resp = await client.post("/analysis/report", json={})
    assert resp.status_code == 200
    data = resp.json()
    assert data["role"] == "all"
    assert set(data["expert_analyses"]) == {"financial", "breeding", "health"}
    assert data["combined_analysis"].startswith("# 📊 Combined expert report")
    assert data["failed_roles"] == []
    assert data["summary"]["total_dogs"] == 2
    assert data["report_id"] == 1
    assert '"total_expenses": 80.0' in llm.prompts["financial"]


async def test_report_single_role(client: AsyncClient, llm):
    resp = await client.post("/analysis/report", json={"role": "health"})
    assert resp.status_code == 200
    data = resp.json()
    assert list(data["expert_analyses"]) == ["health"]
    assert data["combined_analysis"] is None
    assert llm.calls == {"health": 1}


async def test_report_invalid_role(client: AsyncClient):
    resp = await client.post("/analysis/report", json={"role": "marketing"})
    assert resp.status_code == 422


async def test_report_partial_failure(client: AsyncClient, llm):
    llm.scripts["breeding"] = [MalformedResponseError("empty")]
    resp = await client.post("/analysis/report", json={"role": "all"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["failed_roles"] == ["breeding"]
    assert data["combined_analysis"] is not None


async def test_report_llm_unavailable(client: AsyncClient, llm):
    error = MalformedResponseError("empty")
    llm.scripts.update({"financial": [error], "breeding": [error], "health": [error]})
    resp = await client.post("/analysis/report", json={"role": "all"})
    assert resp.status_code == 503
    assert "temporarily unavailable" in resp.json()["detail"]

    history = await client.get("/analysis/history")
    assert history.json() == []


async def test_report_repository_down(client: AsyncClient, fake_repository, recorded_sleep, llm):
    repo = fake_repository().fail("animals")
    app.dependency_overrides[aggregator_dependency] = lambda: BusinessDataAggregator(repo, sleep=recorded_sleep)
    resp = await client.post("/analysis/report", json={"role": "financial"})
    assert resp.status_code == 500
    assert llm.calls == {}


# ---------------------------------------------------------------------------
# /analysis/history
# ---------------------------------------------------------------------------

async def test_history_roundtrip(client: AsyncClient):
    await client.post("/analysis/report", json={"role": "financial"})
    await client.post("/analysis/report", json={"role": "all"})

    resp = await client.get("/analysis/history")
    assert resp.status_code == 200
    reports = resp.json()
    assert len(reports) == 2
    assert reports[0]["role"] == "all"
    assert reports[0]["roles_present"] == ["breeding", "financial", "health"]

    detail = await client.get(f"/analysis/history/{reports[1]['id']}")
    assert detail.status_code == 200
    assert list(detail.json()["expert_analyses"]) == ["financial"]


async def test_history_limit(client: AsyncClient):
    for _ in range(3):
        await client.post("/analysis/report", json={"role": "health"})
    resp = await client.get("/analysis/history?limit=2")
    assert len(resp.json()) == 2


async def test_history_report_not_found(client: AsyncClient):
    resp = await client.get("/analysis/history/9999")
    assert resp.status_code == 404


async def test_delete_report(client: AsyncClient):
    created = await client.post("/analysis/report", json={"role": "health"})
    report_id = created.json()["report_id"]

    resp = await client.delete(f"/analysis/history/{report_id}")
    assert resp.status_code == 204
    resp = await client.delete(f"/analysis/history/{report_id}")
    assert resp.status_code == 404
