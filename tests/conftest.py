"""Shared test fixtures: in-memory SQLite, fake repository, fake LLM and sample records."""

import asyncio
from datetime import date, timedelta

import aiosqlite
import pytest
import pytest_asyncio

from kennel.models.records import Animal, Expense, HealthEvent, LitterEvent, Purchase, Sale
from kennel.services.database import _ALL_TABLES

TODAY = date(2026, 3, 1)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest_asyncio.fixture
async def db():
    """In-memory SQLite connection with every table created."""
    async with aiosqlite.connect(":memory:") as conn:
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA foreign_keys = ON")
        for ddl in _ALL_TABLES:
            await conn.execute(ddl)
        await conn.commit()
        yield conn


# ─── Fake repository ─────────────────────────────────────────────────────────

class FakeRepository:
    """In-memory EntityRepository that records the order of reads."""

    def __init__(self, animals=(), purchases=(), sales=(), expenses=(), health_events=(), litters=()):
        self.sets = {
            "animals": list(animals),
            "purchases": list(purchases),
            "sales": list(sales),
            "expenses": list(expenses),
            "health_events": list(health_events),
            "litters": list(litters),
        }
        self.calls: list[str] = []
        self.failures: dict[str, int] = {}  # kind -> remaining failures

    def fail(self, kind: str, times: int = 10**6) -> "FakeRepository":
        self.failures[kind] = times
        return self

    async def _read(self, kind: str):
        self.calls.append(kind)
        if self.failures.get(kind, 0) > 0:
            self.failures[kind] -= 1
            raise ConnectionError(f"{kind} table unreachable")
        return list(self.sets[kind])

    async def fetch_animals(self):
        return await self._read("animals")

    async def fetch_purchases(self):
        return await self._read("purchases")

    async def fetch_sales(self):
        return await self._read("sales")

    async def fetch_expenses(self):
        return await self._read("expenses")

    async def fetch_health_events(self):
        return await self._read("health_events")

    async def fetch_litters(self):
        return await self._read("litters")


@pytest.fixture
def fake_repository():
    return FakeRepository


# ─── Fake LLM client ─────────────────────────────────────────────────────────

_PERSONA_MARKERS = {
    "financial": "financial advisor",
    "breeding": "reproduction specialist",
    "health": "veterinarian",
}


def role_of(system_msg: str) -> str:
    for role, marker in _PERSONA_MARKERS.items():
        if marker in system_msg:
            return role
    raise AssertionError(f"Unknown persona: {system_msg[:60]}")


class FakeLLMClient:
    """Scripted narratives per role; exceptions in a script are raised in turn.

    The last scripted outcome repeats once the script is exhausted.
    """

    def __init__(self, scripts: dict | None = None, delay: float = 0.0):
        self.scripts = {r: list(v) for r, v in (scripts or {}).items()}
        self.delay = delay
        self.calls: dict[str, int] = {}
        self.prompts: dict[str, str] = {}

    async def complete(self, system: str, prompt: str) -> str:
        role = role_of(system)
        self.calls[role] = self.calls.get(role, 0) + 1
        self.prompts[role] = prompt
        if self.delay:
            await asyncio.sleep(self.delay)
        script = self.scripts.get(role) or [[f"{role} line {i}" for i in range(1, 16)]]
        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, list):
            return "\n".join(outcome)
        return outcome


@pytest.fixture
def fake_llm():
    return FakeLLMClient


@pytest.fixture
def recorded_sleep():
    """An asyncio.sleep stand-in that records requested delays without waiting."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep


# ─── Sample business data ─────────────────────────────────────────────────────

@pytest.fixture
def kennel_records(today):
    """A small kennel: a pregnant female, a stud, a puppy and a sold dog."""
    animals = [
        Animal(id="1", name="Bella", breed="Golden Retriever", gender="female",
               birth_date=today - timedelta(days=730), status="owned", weight=28.5),
        Animal(id="2", name="Max", breed="Golden Retriever", gender="male",
               birth_date=today - timedelta(days=1460), status="owned"),
        Animal(id="3", name="Pip", breed="Corgi", gender="male",
               birth_date=today - timedelta(days=90), status="for_sale"),
        Animal(id="4", name="Luna", breed="Poodle", gender="female",
               birth_date=today - timedelta(days=1000), status="sold", created_at=today - timedelta(days=200)),
    ]
    purchases = [
        Purchase(dog_id="4", amount=1000, purchase_date=today - timedelta(days=400)),
        Purchase(dog_id="4", amount=9999, purchase_date=today - timedelta(days=300)),
        Purchase(dog_id="2", amount=2500, purchase_date=today - timedelta(days=1000)),
    ]
    sales = [
        Sale(dog_id="4", amount=1500, sale_date=today - timedelta(days=20)),
        Sale(dog_id="9", amount=1800, sale_date=today - timedelta(days=40), litter_id="10"),
    ]
    expenses = [
        Expense(dog_id="4", amount=150, category="Dog food", expense_date=today - timedelta(days=60)),
        Expense(dog_id="4", amount=50, category="Vet visit", expense_date=today - timedelta(days=30)),
        Expense(dog_id="1", amount=300, category="Stud fee", expense_date=today - timedelta(days=10)),
        Expense(dog_id=None, amount=200, category="whelping supplies", expense_date=today - timedelta(days=100),
                litter_id="10"),
    ]
    health_events = [
        HealthEvent(dog_id="1", record_type="vaccination", treatment_type="Rabies",
                    record_date=today - timedelta(days=30), veterinarian="Dr. Chen", cost=80),
        HealthEvent(dog_id="1", record_type="vaccination", treatment_type="DHPP",
                    record_date=today - timedelta(days=40), cost=60),
        HealthEvent(dog_id="1", record_type="checkup", description="Pregnancy scan",
                    record_date=today - timedelta(days=5)),
        HealthEvent(dog_id="2", record_type="treatment", description="Skin dermatitis",
                    record_date=today - timedelta(days=15), cost=120),
        HealthEvent(dog_id="2", record_type="vaccination", treatment_type="Rabies",
                    record_date=today - timedelta(days=350)),
    ]
    litters = [
        LitterEvent(id="10", mother_id="1", father_id="2",
                    mating_date=today - timedelta(days=400), birth_date=today - timedelta(days=337),
                    puppies_count=5),
        LitterEvent(id="11", mother_id="1", father_id="2",
                    mating_date=today - timedelta(days=10)),
    ]
    return dict(
        animals=animals, purchases=purchases, sales=sales, expenses=expenses,
        health_events=health_events, litters=litters,
    )
