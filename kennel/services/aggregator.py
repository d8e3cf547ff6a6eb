"""Business data aggregation: raw record sets → per-dog detail and analysis blocks."""

import asyncio
import logging
from collections import Counter, defaultdict
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TypeVar

from kennel.errors import RepositoryReadFailure
from kennel.metrics import breeding, financial, health
from kennel.metrics.temporal import age_in_months, expected_birth, next_vaccination_due
from kennel.models.analysis import (
    AggregateResult,
    AggregateSummary,
    BreedingAnalysis,
    FinancialAnalysis,
    HealthAnalysis,
    HealthProfile,
    Overview,
    PerformanceAnalysis,
)
from kennel.models.detail import (
    BreedingRecord,
    DogDetail,
    FinancialRecord,
    VaccinationRecord,
)
from kennel.models.records import Animal, Expense, HealthEvent, LitterEvent, Purchase, Sale

from .repository import EntityRepository
from .timing import Timings

logger = logging.getLogger(__name__)

T = TypeVar("T")

FETCH_ATTEMPTS = 3
FETCH_BASE_DELAY = 1.0  # seconds, multiplied by the attempt number

Sleep = Callable[[float], Awaitable[None]]


async def fetch_with_retry(
    fetch: Callable[[], Awaitable[T]],
    label: str,
    *,
    attempts: int = FETCH_ATTEMPTS,
    base_delay: float = FETCH_BASE_DELAY,
    sleep: Sleep = asyncio.sleep,
) -> T:
    """Run one repository read with linear backoff (1s, 2s, ...) between attempts."""
    for attempt in range(1, attempts + 1):
        try:
            return await fetch()
        except Exception as exc:
            if attempt == attempts:
                logger.error("Fetching %s failed after %d attempts: %s", label, attempts, exc)
                raise RepositoryReadFailure(label, attempts, exc) from exc
            delay = attempt * base_delay
            logger.warning(
                "Fetching %s failed (attempt %d/%d): %s — retrying in %.1fs",
                label, attempt, attempts, exc, delay,
            )
            await sleep(delay)
    raise AssertionError("unreachable")


@dataclass
class Snapshot:
    """The six record sets read in one aggregation run."""
    animals: list[Animal] = field(default_factory=list)
    purchases: list[Purchase] = field(default_factory=list)
    sales: list[Sale] = field(default_factory=list)
    expenses: list[Expense] = field(default_factory=list)
    health_events: list[HealthEvent] = field(default_factory=list)
    litters: list[LitterEvent] = field(default_factory=list)


def _group_by_dog(rows, key: str = "dog_id") -> dict[str, list]:
    grouped: dict[str, list] = defaultdict(list)
    for row in rows:
        dog_id = getattr(row, key)
        if dog_id is not None:
            grouped[dog_id].append(row)
    return grouped


@dataclass
class _DogRows:
    """Raw rows referencing one animal, in repository order."""
    purchases: list[Purchase]
    sales: list[Sale]
    expenses: list[Expense]
    health_events: list[HealthEvent]
    litters: list[LitterEvent]


def _breeding_records(
    animal: Animal, litters: list[LitterEvent], animals_by_id: dict[str, Animal]
) -> list[BreedingRecord]:
    records: list[BreedingRecord] = []
    for litter in litters:
        partner_id = litter.father_id if litter.mother_id == animal.id else litter.mother_id
        partner = animals_by_id.get(partner_id)
        common = dict(
            partner_id=partner_id,
            partner_name=partner.name if partner else None,
            litter_id=litter.id,
        )
        records.append(BreedingRecord(
            kind="mating",
            date=litter.mating_date,
            puppies_count=litter.puppies_count,
            birth_date=litter.birth_date,
            **common,
        ))
        if litter.birth_date is not None:
            records.append(BreedingRecord(
                kind="birth",
                date=litter.birth_date,
                puppies_count=litter.puppies_count,
                birth_date=litter.birth_date,
                **common,
            ))
        elif litter.mother_id == animal.id:
            records.append(BreedingRecord(
                kind="pregnancy",
                date=litter.expected_birth_date or expected_birth(litter.mating_date),
                **common,
            ))
    return records


def build_dog_detail(
    animal: Animal, rows: _DogRows, animals_by_id: dict[str, Animal], today: date
) -> DogDetail:
    vaccinations = [
        VaccinationRecord(
            vaccine_type=e.label,
            date=e.record_date,
            next_due=next_vaccination_due(e.label, e.record_date),
            veterinarian=e.veterinarian,
            cost=e.cost,
        )
        for e in rows.health_events
        if e.record_type == "vaccination"
    ]
    checkups = [e.record_date for e in rows.health_events if e.record_type == "checkup"]
    finance = (
        [FinancialRecord(kind="purchase", date=p.purchase_date, amount=p.amount, category="purchase")
         for p in rows.purchases]
        + [FinancialRecord(kind="sale", date=s.sale_date, amount=s.amount, category="sale")
           for s in rows.sales]
        + [FinancialRecord(kind="expense", date=e.expense_date, amount=e.amount, category=e.category)
           for e in rows.expenses]
    )
    return DogDetail(
        id=animal.id,
        name=animal.name,
        breed=animal.breed,
        gender=animal.gender,
        status=animal.status,
        birth_date=animal.birth_date,
        age_months=age_in_months(animal.birth_date, today),
        weight=animal.weight,
        health_score=health.health_score(rows.health_events, today),
        last_health_check=max(checkups, default=None),
        vaccination_records=vaccinations,
        breeding_records=_breeding_records(animal, rows.litters, animals_by_id),
        financial_records=finance,
    )


def _breeding_analysis(
    dogs: list[DogDetail], snapshot: Snapshot, animals_by_id: dict[str, Animal], today: date
) -> BreedingAnalysis:
    return BreedingAnalysis(
        female_dogs=[breeding.female_profile(d, today, animals_by_id) for d in dogs if d.gender == "female"],
        male_dogs=[breeding.male_profile(d) for d in dogs if d.gender == "male"],
        litter_statistics=breeding.litter_statistics(snapshot.litters, today),
    )


def _financial_analysis(
    dogs: list[DogDetail], per_dog: dict[str, _DogRows], snapshot: Snapshot
) -> FinancialAnalysis:
    summaries = []
    for d in dogs:
        rows = per_dog[d.id]
        summaries.append(financial.financial_summary(
            dog_id=d.id,
            name=d.name,
            purchase=rows.purchases[0] if rows.purchases else None,
            sale=rows.sales[0] if rows.sales else None,
            expenses=rows.expenses,
            estimated_market_value=financial.estimate_market_value(d.breed, d.age_months, d.gender),
        ))

    revenue = sum(s.amount for s in snapshot.sales)
    purchase_costs = sum(p.amount for p in snapshot.purchases)
    expenses = sum(e.amount for e in snapshot.expenses)
    net_profit = revenue - purchase_costs - expenses
    return FinancialAnalysis(
        dog_financials=summaries,
        litter_profitability=[
            financial.litter_profitability(l, snapshot.sales, snapshot.expenses)
            for l in snapshot.litters
            if l.birth_date is not None
        ],
        total_revenue=revenue,
        total_purchase_costs=purchase_costs,
        total_expenses=expenses,
        net_profit=net_profit,
        profit_margin=financial.profit_margin(revenue, net_profit),
        average_sale_price=round(revenue / len(snapshot.sales), 2) if snapshot.sales else 0.0,
        expense_categories=financial.categorize_expenses(snapshot.expenses),
        monthly_trends=financial.monthly_trends(snapshot.sales, snapshot.purchases, snapshot.expenses),
        seasonal_trends=financial.seasonal_trends(snapshot.sales),
    )


def _health_analysis(dogs: list[DogDetail], snapshot: Snapshot, today: date) -> HealthAnalysis:
    profiles = []
    for d in dogs:
        profiles.append(HealthProfile(
            dog_id=d.id,
            name=d.name,
            health_score=d.health_score,
            risk_level=health.risk_level(d.health_score),
            last_health_check=d.last_health_check,
            vaccination_status=health.vaccination_status(d.vaccination_records, today),
            upcoming_care=health.upcoming_care(d.vaccination_records, d.health_score, today),
        ))
    covered = sum(1 for p in profiles if p.vaccination_status.core_current)
    treatment_costs = sum(e.cost for e in snapshot.health_events if e.record_type == "treatment")
    return HealthAnalysis(
        dog_health=profiles,
        total_health_records=len(snapshot.health_events),
        vaccination_coverage=round(covered / len(profiles) * 100, 1) if profiles else 0.0,
        treatment_costs=treatment_costs,
        average_health_cost_per_dog=round(treatment_costs / len(dogs), 2) if dogs else 0.0,
        common_health_issues=health.common_health_issues(snapshot.health_events),
        health_trends=health.health_trends(snapshot.health_events),
    )


def _overview(animals: list[Animal], today: date) -> Overview:
    ages = [(today - a.birth_date).days / 365 for a in animals]
    return Overview(
        status_counts=dict(Counter(a.status for a in animals)),
        breed_distribution=dict(Counter(a.breed for a in animals)),
        average_age_years=round(sum(ages) / len(ages), 1) if ages else 0.0,
    )


def _performance(snapshot: Snapshot) -> PerformanceAnalysis:
    return PerformanceAnalysis(
        sales_conversion_rate=financial.sales_conversion_rate(snapshot.animals, snapshot.sales),
        average_time_to_sale_days=financial.average_time_to_sale(snapshot.animals, snapshot.sales),
        popular_breeds=financial.breed_popularity(snapshot.animals, snapshot.sales),
    )


def build_aggregate(snapshot: Snapshot, today: date) -> AggregateResult:
    """Derive the full business model from one snapshot. Pure: no I/O, no mutation."""
    animals_by_id = {a.id: a for a in snapshot.animals}
    purchases = _group_by_dog(snapshot.purchases)
    sales = _group_by_dog(snapshot.sales)
    expenses = _group_by_dog(snapshot.expenses)
    events = _group_by_dog(snapshot.health_events)
    litters: dict[str, list[LitterEvent]] = defaultdict(list)
    for l in snapshot.litters:
        litters[l.mother_id].append(l)
        if l.father_id != l.mother_id:
            litters[l.father_id].append(l)

    per_dog = {
        a.id: _DogRows(
            purchases=purchases.get(a.id, []),
            sales=sales.get(a.id, []),
            expenses=expenses.get(a.id, []),
            health_events=events.get(a.id, []),
            litters=litters.get(a.id, []),
        )
        for a in snapshot.animals
    }
    dogs = [build_dog_detail(a, per_dog[a.id], animals_by_id, today) for a in snapshot.animals]

    breeding_block = _breeding_analysis(dogs, snapshot, animals_by_id, today)
    financial_block = _financial_analysis(dogs, per_dog, snapshot)
    health_block = _health_analysis(dogs, snapshot, today)

    statuses = [p.breeding_status for p in breeding_block.female_dogs + breeding_block.male_dogs]
    summary = AggregateSummary(
        total_dogs=len(dogs),
        female_dogs=len(breeding_block.female_dogs),
        male_dogs=len(breeding_block.male_dogs),
        breeding_eligible=statuses.count("available"),
        pregnant_dogs=statuses.count("pregnant"),
        total_revenue=financial_block.total_revenue,
        total_expenses=financial_block.total_expenses,
        total_purchase_costs=financial_block.total_purchase_costs,
        net_profit=financial_block.net_profit,
        urgent_care_dogs=sum(
            1 for p in health_block.dog_health
            if any(i.priority == "urgent" for i in p.upcoming_care)
        ),
    )

    return AggregateResult(
        dogs=dogs,
        breeding_analysis=breeding_block,
        financial_analysis=financial_block,
        health_analysis=health_block,
        performance=_performance(snapshot),
        overview=_overview(snapshot.animals, today),
        summary=summary,
        collected_at=datetime.now(),
    )


class BusinessDataAggregator:
    """Reads a full snapshot from the repository and derives the business model."""

    def __init__(
        self,
        repository: EntityRepository,
        *,
        today: Callable[[], date] = date.today,
        sleep: Sleep = asyncio.sleep,
        timings: Timings | None = None,
    ):
        self._repository = repository
        self._today = today
        self._sleep = sleep
        self._timings = timings

    async def _fetch(self, label: str, fetch, timings: Timings):
        with timings.measure(f"fetch_{label}"):
            return await fetch_with_retry(fetch, label, sleep=self._sleep)

    async def fetch_snapshot(self, timings: Timings) -> Snapshot:
        # Serial on purpose: each read keeps its own retry/backoff state.
        repo = self._repository
        return Snapshot(
            animals=await self._fetch("animals", repo.fetch_animals, timings),
            purchases=await self._fetch("purchases", repo.fetch_purchases, timings),
            sales=await self._fetch("sales", repo.fetch_sales, timings),
            expenses=await self._fetch("expenses", repo.fetch_expenses, timings),
            health_events=await self._fetch("health_events", repo.fetch_health_events, timings),
            litters=await self._fetch("litters", repo.fetch_litters, timings),
        )

    async def aggregate(self) -> AggregateResult:
        timings = self._timings or Timings()
        snapshot = await self.fetch_snapshot(timings)
        logger.info(
            "Collected %d dogs, %d purchases, %d sales, %d expenses, %d health events, %d litters",
            len(snapshot.animals), len(snapshot.purchases), len(snapshot.sales),
            len(snapshot.expenses), len(snapshot.health_events), len(snapshot.litters),
        )
        with timings.measure("derive"):
            result = build_aggregate(snapshot, self._today())
        result.timings = timings.as_dict()
        return result
