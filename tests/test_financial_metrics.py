"""Unit tests for the financial metrics."""

from datetime import date

import pytest

from kennel.metrics.financial import (
    average_time_to_sale,
    breed_popularity,
    categorize_expenses,
    estimate_market_value,
    expense_category,
    financial_summary,
    litter_profitability,
    monthly_costs,
    monthly_trends,
    profit_margin,
    roi,
    sales_conversion_rate,
    seasonal_trends,
)
from kennel.models.records import Animal, Expense, LitterEvent, Purchase, Sale


def _expense(amount, category, day=date(2026, 1, 10), litter_id=None):
    return Expense(dog_id="1", amount=amount, category=category, expense_date=day, litter_id=litter_id)


# ─── ROI ──────────────────────────────────────────────────────────────────────

def test_roi():
    assert roi(purchase_price=1000, sale_price=1500, total_expenses=200) == pytest.approx(30)


def test_roi_zero_purchase_price():
    assert roi(purchase_price=0, sale_price=5000, total_expenses=300) == 0


def test_roi_loss_is_negative():
    assert roi(1000, 500, 0) == pytest.approx(-50)


# ─── Market value ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "breed, age, gender, expected",
    [
        ("Golden Retriever", 2, "male", 3600.0),      # puppy ×1.2
        ("poodle", 10, "female", 3850.0),             # ×1.0, breeding female ×1.1
        ("Corgi", 12, "female", 3520.0),              # ×0.8 ×1.1
        ("Corgi", 12, "male", 3200.0),
        ("unknown mix", 30, "male", 1200.0),          # default base ×0.6
        ("Husky", 70, "female", 1500.0),              # past breeding age, no premium
    ],
)
def test_estimate_market_value(breed, age, gender, expected):
    assert estimate_market_value(breed, age, gender) == pytest.approx(expected)


# ─── Expenses ─────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "category, bucket",
    [
        ("Dog food", "food"),
        ("Vet visit", "healthcare"),
        ("疫苗", "healthcare"),
        ("Stud fee", "breeding"),
        ("Grooming", "grooming"),
        ("toys", "other"),
        ("food and vet", "food"),  # first matching group wins
    ],
)
def test_expense_category(category, bucket):
    assert expense_category(category) == bucket


def test_categorize_expenses_has_every_bucket():
    buckets = categorize_expenses([_expense(40, "Dog food"), _expense(60, "dog food"), _expense(10, "toys")])
    assert buckets == {"food": 100, "healthcare": 0, "breeding": 0, "grooming": 0, "other": 10}


def test_monthly_costs_sorted_by_month():
    costs = monthly_costs([
        _expense(10, "food", date(2026, 2, 1)),
        _expense(5, "food", date(2026, 1, 3)),
        _expense(7, "food", date(2026, 2, 20)),
    ])
    assert [(c.month, c.amount) for c in costs] == [("2026-01", 5), ("2026-02", 17)]


def test_financial_summary():
    summary = financial_summary(
        dog_id="4",
        name="Luna",
        purchase=Purchase(dog_id="4", amount=1000, purchase_date=date(2025, 1, 1)),
        sale=Sale(dog_id="4", amount=1500, sale_date=date(2026, 1, 1)),
        expenses=[_expense(150, "Dog food"), _expense(50, "Vet")],
        estimated_market_value=3000,
    )
    assert summary.total_expenses == 200
    assert summary.profit_loss == 300
    assert summary.roi_percentage == pytest.approx(30)
    assert summary.expense_breakdown["food"] == 150
    assert summary.expense_breakdown["healthcare"] == 50


def test_financial_summary_without_purchase():
    summary = financial_summary("1", "Bella", None, None, [], 3000)
    assert summary.roi_percentage == 0
    assert summary.profit_loss == 0


# ─── Litters ──────────────────────────────────────────────────────────────────

def _litter(puppies=4, litter_id="L1"):
    return LitterEvent(
        id=litter_id, mother_id="1", father_id="2",
        mating_date=date(2025, 10, 1), birth_date=date(2025, 12, 3), puppies_count=puppies,
    )


def test_litter_profitability():
    sales = [
        Sale(dog_id="5", amount=1500, sale_date=date(2026, 2, 1), litter_id="L1"),
        Sale(dog_id="6", amount=1500, sale_date=date(2026, 2, 3), litter_id="L1"),
        Sale(dog_id="7", amount=9000, sale_date=date(2026, 2, 3)),
    ]
    expenses = [_expense(400, "whelping", litter_id="L1"), _expense(999, "food")]
    result = litter_profitability(_litter(), sales, expenses)
    assert result.total_revenue == 3000
    assert result.total_costs == 400
    assert result.net_profit == 2600
    assert result.cost_per_puppy == 100
    assert result.average_sale_price == 1500
    assert result.puppies_sold == 2


def test_litter_profitability_no_puppies_no_sales():
    result = litter_profitability(_litter(puppies=0), [], [_expense(300, "vet", litter_id="L1")])
    assert result.cost_per_puppy == 0
    assert result.average_sale_price == 0
    assert result.net_profit == -300


# ─── Trends ───────────────────────────────────────────────────────────────────

def test_monthly_trends():
    trends = monthly_trends(
        sales=[Sale(dog_id="1", amount=1000, sale_date=date(2026, 2, 10))],
        purchases=[Purchase(dog_id="1", amount=300, purchase_date=date(2026, 1, 5))],
        expenses=[_expense(100, "food", date(2026, 2, 1))],
    )
    assert [t.month for t in trends] == ["2026-01", "2026-02"]
    assert trends[0].profit == -300
    assert trends[1].revenue == 1000
    assert trends[1].profit == 900


def test_monthly_trends_keeps_last_months():
    sales = [Sale(dog_id="1", amount=1, sale_date=date(2025, m, 1)) for m in range(1, 13)]
    sales.append(Sale(dog_id="1", amount=1, sale_date=date(2026, 1, 1)))
    trends = monthly_trends(sales, [], [])
    assert len(trends) == 12
    assert trends[0].month == "2025-02"


def test_seasonal_trends():
    sales = [Sale(dog_id="1", amount=1, sale_date=date(2026, m, 1)) for m in (1, 4, 5, 7, 10, 12)]
    assert seasonal_trends(sales) == {"spring": 2, "summer": 1, "autumn": 1, "winter": 2}


def test_profit_margin():
    assert profit_margin(2000, 500) == 25.0
    assert profit_margin(0, -100) == 0.0


# ─── Sales performance ────────────────────────────────────────────────────────

def _animal(dog_id, breed="Corgi", status="owned", created_at=None):
    return Animal(id=dog_id, name=f"Dog {dog_id}", breed=breed, gender="female",
                  birth_date=date(2024, 1, 1), status=status, created_at=created_at)


def _sale(dog_id, amount=1000, day=date(2026, 2, 1)):
    return Sale(dog_id=dog_id, amount=amount, sale_date=day)


def test_sales_conversion_rate():
    animals = [_animal("1", status="for_sale"), _animal("2", status="sold"), _animal("3")]
    assert sales_conversion_rate(animals, [_sale("2"), _sale("9")]) == 66.67


def test_sales_conversion_rate_nothing_listed_or_sold():
    assert sales_conversion_rate([_animal("1")], []) == 0.0


def test_average_time_to_sale():
    animals = [
        _animal("1", created_at=date(2026, 1, 1)),
        _animal("2", created_at=date(2026, 1, 22)),
        _animal("3"),                                 # never registered
        _animal("4", created_at=date(2026, 3, 1)),    # registered after the sale
    ]
    sales = [_sale("1"), _sale("2"), _sale("3"), _sale("4"), _sale("9")]
    assert average_time_to_sale(animals, sales) == 20.5


def test_average_time_to_sale_without_intervals():
    assert average_time_to_sale([_animal("1", created_at=date(2026, 2, 1))], [_sale("1")]) == 0.0
    assert average_time_to_sale([], []) == 0.0


def test_breed_popularity():
    animals = [
        _animal("1", "Poodle"),
        _animal("2", "Corgi"),
        _animal("3", "Corgi"),
        _animal("4", "Beagle"),
    ]
    sales = [_sale("2", 1200), _sale("3", 1800), _sale("1", 900), _sale("9", 5000)]
    breeds = breed_popularity(animals, sales)
    assert [(b.breed, b.count, b.sold) for b in breeds] == [("Corgi", 2, 2), ("Poodle", 1, 1), ("Beagle", 1, 0)]
    assert breeds[0].average_sale_price == 1500
    assert breeds[2].average_sale_price == 0.0


def test_breed_popularity_limit():
    animals = [_animal(str(i), breed=f"Breed {i}") for i in range(12)]
    breeds = breed_popularity(animals, [])
    assert len(breeds) == 10
    assert len(breed_popularity(animals, [], limit=3)) == 3
