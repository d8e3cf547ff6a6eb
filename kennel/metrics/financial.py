"""Profitability, market value, expense breakdowns and sales performance."""

from collections import defaultdict
from typing import Iterable, Optional

from kennel.models.analysis import BreedPopularity, LitterProfitability, MonthlyTrend
from kennel.models.detail import FinancialSummary, MonthlyAmount
from kennel.models.records import Animal, Expense, Gender, LitterEvent, Purchase, Sale

from .temporal import month_key

DEFAULT_BREED_BASE_VALUE = 2000.0
BREED_BASE_VALUES = {
    "golden retriever": 3000.0,
    "金毛": 3000.0,
    "labrador": 2800.0,
    "拉布拉多": 2800.0,
    "poodle": 3500.0,
    "泰迪": 3500.0,
    "corgi": 4000.0,
    "柯基": 4000.0,
    "french bulldog": 6000.0,
    "法斗": 6000.0,
    "husky": 2500.0,
    "哈士奇": 2500.0,
    "samoyed": 4500.0,
    "萨摩耶": 4500.0,
    "border collie": 3500.0,
    "边牧": 3500.0,
    "shiba inu": 5000.0,
    "柴犬": 5000.0,
    "german shepherd": 3200.0,
    "德牧": 3200.0,
}

# (upper bound in months, multiplier)
AGE_VALUE_MULTIPLIERS = [(3, 1.2), (12, 1.0), (24, 0.8)]
SENIOR_VALUE_MULTIPLIER = 0.6
BREEDING_FEMALE_PREMIUM = 1.1
BREEDING_FEMALE_AGE = (6, 60)

# Checked in order; the first group with a matching keyword wins
EXPENSE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("food", ("food", "feed", "diet", "食", "粮")),
    ("healthcare", ("medical", "health", "vet", "vaccin", "medicine", "treatment", "医", "药", "疫苗")),
    ("breeding", ("breed", "mating", "stud", "whelp", "繁殖", "配种")),
    ("grooming", ("groom", "bath", "美容", "洗护")),
]
EXPENSE_CATEGORIES = [name for name, _ in EXPENSE_KEYWORDS] + ["other"]

_SEASONS = {
    3: "spring", 4: "spring", 5: "spring",
    6: "summer", 7: "summer", 8: "summer",
    9: "autumn", 10: "autumn", 11: "autumn",
}


def roi(purchase_price: float, sale_price: float, total_expenses: float) -> float:
    """Return on investment as a percentage of the purchase price."""
    if purchase_price == 0:
        return 0.0
    return (sale_price - purchase_price - total_expenses) / purchase_price * 100


def estimate_market_value(breed: str, age_months: int, gender: Gender) -> float:
    """Heuristic value from a breed base price, age and breeding potential."""
    value = BREED_BASE_VALUES.get(breed.strip().lower(), DEFAULT_BREED_BASE_VALUE)
    multiplier = SENIOR_VALUE_MULTIPLIER
    for upper, m in AGE_VALUE_MULTIPLIERS:
        if age_months < upper:
            multiplier = m
            break
    value *= multiplier
    low, high = BREEDING_FEMALE_AGE
    if gender == "female" and low <= age_months <= high:
        value *= BREEDING_FEMALE_PREMIUM
    return round(value, 2)


def expense_category(category: str) -> str:
    text = category.lower()
    for name, keywords in EXPENSE_KEYWORDS:
        if any(kw in text for kw in keywords):
            return name
    return "other"


def categorize_expenses(expenses: Iterable[Expense]) -> dict[str, float]:
    """Total spend per category bucket; every bucket is always present."""
    buckets = {name: 0.0 for name in EXPENSE_CATEGORIES}
    for e in expenses:
        buckets[expense_category(e.category)] += e.amount
    return buckets


def monthly_costs(expenses: Iterable[Expense]) -> list[MonthlyAmount]:
    totals: dict[str, float] = defaultdict(float)
    for e in expenses:
        totals[month_key(e.expense_date)] += e.amount
    return [MonthlyAmount(month=m, amount=totals[m]) for m in sorted(totals)]


def financial_summary(
    dog_id: str,
    name: str,
    purchase: Optional[Purchase],
    sale: Optional[Sale],
    expenses: list[Expense],
    estimated_market_value: float,
) -> FinancialSummary:
    purchase_price = purchase.amount if purchase else 0.0
    sale_price = sale.amount if sale else 0.0
    total_expenses = sum(e.amount for e in expenses)
    return FinancialSummary(
        dog_id=dog_id,
        name=name,
        purchase_price=purchase_price,
        sale_price=sale_price,
        estimated_market_value=estimated_market_value,
        total_expenses=total_expenses,
        profit_loss=sale_price - purchase_price - total_expenses,
        roi_percentage=round(roi(purchase_price, sale_price, total_expenses), 2),
        expense_breakdown=categorize_expenses(expenses),
        monthly_costs=monthly_costs(expenses),
    )


def litter_profitability(
    litter: LitterEvent, sales: list[Sale], expenses: list[Expense]
) -> LitterProfitability:
    """Revenue and costs of the sales and expenses tagged to one litter."""
    tagged_sales = [s for s in sales if litter.id is not None and s.litter_id == litter.id]
    tagged_expenses = [e for e in expenses if litter.id is not None and e.litter_id == litter.id]
    revenue = sum(s.amount for s in tagged_sales)
    costs = sum(e.amount for e in tagged_expenses)
    puppies = litter.puppies_count
    return LitterProfitability(
        litter_id=litter.id,
        mother_id=litter.mother_id,
        father_id=litter.father_id,
        birth_date=litter.birth_date,
        puppies_count=puppies,
        puppies_sold=len(tagged_sales),
        total_revenue=revenue,
        total_costs=costs,
        net_profit=revenue - costs,
        cost_per_puppy=round(costs / puppies, 2) if puppies else 0.0,
        average_sale_price=round(revenue / len(tagged_sales), 2) if tagged_sales else 0.0,
    )


def monthly_trends(
    sales: list[Sale], purchases: list[Purchase], expenses: list[Expense], months: int = 12
) -> list[MonthlyTrend]:
    """Revenue, spend and profit per month, keeping the most recent months."""
    trends: dict[str, MonthlyTrend] = {}

    def bucket(key: str) -> MonthlyTrend:
        return trends.setdefault(key, MonthlyTrend(month=key))

    for s in sales:
        bucket(month_key(s.sale_date)).revenue += s.amount
    for p in purchases:
        bucket(month_key(p.purchase_date)).expenses += p.amount
    for e in expenses:
        bucket(month_key(e.expense_date)).expenses += e.amount
    for t in trends.values():
        t.profit = t.revenue - t.expenses

    return [trends[k] for k in sorted(trends)][-months:]


def seasonal_trends(sales: list[Sale]) -> dict[str, int]:
    seasons = {"spring": 0, "summer": 0, "autumn": 0, "winter": 0}
    for s in sales:
        seasons[_SEASONS.get(s.sale_date.month, "winter")] += 1
    return seasons


def profit_margin(revenue: float, net_profit: float) -> float:
    return round(net_profit / revenue * 100, 2) if revenue > 0 else 0.0


# ─── Sales performance ────────────────────────────────────────────────────────

POPULAR_BREEDS_LIMIT = 10


def sales_conversion_rate(animals: Iterable[Animal], sales: list[Sale]) -> float:
    """Sales as a percentage of sales plus animals still listed for sale."""
    for_sale = sum(1 for a in animals if a.status == "for_sale")
    total = for_sale + len(sales)
    return round(len(sales) / total * 100, 2) if total else 0.0


def average_time_to_sale(animals: Iterable[Animal], sales: list[Sale]) -> float:
    """Mean days from an animal's registration to its sale.

    Sales of unknown animals, animals without a registration date and
    non-positive intervals are left out.
    """
    registered = {a.id: a.created_at for a in animals if a.created_at is not None}
    intervals = [
        (s.sale_date - registered[s.dog_id]).days
        for s in sales
        if s.dog_id in registered
    ]
    intervals = [d for d in intervals if d > 0]
    return round(sum(intervals) / len(intervals), 1) if intervals else 0.0


def breed_popularity(
    animals: Iterable[Animal], sales: list[Sale], limit: int = POPULAR_BREEDS_LIMIT
) -> list[BreedPopularity]:
    """Head count per breed with the average price of the breed's sales, largest breeds first."""
    animals = list(animals)
    breed_of = {a.id: a.breed for a in animals}
    counts: dict[str, int] = defaultdict(int)
    for a in animals:
        counts[a.breed] += 1
    sold: dict[str, list[float]] = defaultdict(list)
    for s in sales:
        if s.dog_id in breed_of:
            sold[breed_of[s.dog_id]].append(s.amount)

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)[:limit]
    return [
        BreedPopularity(
            breed=breed,
            count=count,
            sold=len(sold[breed]),
            average_sale_price=round(sum(sold[breed]) / len(sold[breed]), 2) if sold[breed] else 0.0,
        )
        for breed, count in ranked
    ]
