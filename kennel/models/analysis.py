"""Aggregated business model and expert analysis result."""

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel

from .detail import (
    BreedingHistoryEntry,
    BreedingStatus,
    CareItem,
    DogDetail,
    FinancialSummary,
    PregnancyDetail,
    VaccinationStatus,
)

ExpertRole = Literal["financial", "breeding", "health"]
RiskLevel = Literal["low", "medium", "high"]


# ─── Breeding ─────────────────────────────────────────────────────────────────

class FemaleBreedingProfile(BaseModel):
    dog_id: str
    name: str
    breed: str
    age_months: int
    breeding_status: BreedingStatus
    pregnancy_details: Optional[PregnancyDetail] = None
    next_heat_estimate: Optional[date] = None
    breeding_history: list[BreedingHistoryEntry] = []
    total_litters: int = 0
    total_puppies: int = 0


class MaleBreedingProfile(BaseModel):
    dog_id: str
    name: str
    breed: str
    age_months: int
    breeding_status: BreedingStatus
    breeding_history: list[BreedingHistoryEntry] = []
    total_matings: int = 0


class MonthlyBirths(BaseModel):
    month: str
    births: int = 0
    pregnancies: int = 0


class LitterStatistics(BaseModel):
    total_litters: int = 0
    active_pregnancies: int = 0
    completed_births: int = 0
    average_litter_size: float = 0.0
    breeding_success_rate: float = 0.0
    monthly_births: list[MonthlyBirths] = []


class BreedingAnalysis(BaseModel):
    female_dogs: list[FemaleBreedingProfile] = []
    male_dogs: list[MaleBreedingProfile] = []
    litter_statistics: LitterStatistics = LitterStatistics()


# ─── Financial ────────────────────────────────────────────────────────────────

class LitterProfitability(BaseModel):
    litter_id: Optional[str] = None
    mother_id: str
    father_id: str
    birth_date: Optional[date] = None
    puppies_count: int
    puppies_sold: int
    total_revenue: float
    total_costs: float
    net_profit: float
    cost_per_puppy: float
    average_sale_price: float


class MonthlyTrend(BaseModel):
    month: str
    revenue: float = 0.0
    expenses: float = 0.0
    profit: float = 0.0


class FinancialAnalysis(BaseModel):
    dog_financials: list[FinancialSummary] = []
    litter_profitability: list[LitterProfitability] = []
    total_revenue: float = 0.0
    total_purchase_costs: float = 0.0
    total_expenses: float = 0.0
    net_profit: float = 0.0
    profit_margin: float = 0.0
    average_sale_price: float = 0.0
    expense_categories: dict[str, float] = {}
    monthly_trends: list[MonthlyTrend] = []
    seasonal_trends: dict[str, int] = {}


# ─── Health ───────────────────────────────────────────────────────────────────

class HealthProfile(BaseModel):
    dog_id: str
    name: str
    health_score: int
    risk_level: RiskLevel
    last_health_check: Optional[date] = None
    vaccination_status: VaccinationStatus
    upcoming_care: list[CareItem] = []


class MonthlyHealth(BaseModel):
    month: str
    treatments: int = 0
    vaccinations: int = 0
    checkups: int = 0


class HealthAnalysis(BaseModel):
    dog_health: list[HealthProfile] = []
    total_health_records: int = 0
    vaccination_coverage: float = 0.0
    treatment_costs: float = 0.0
    average_health_cost_per_dog: float = 0.0
    common_health_issues: dict[str, int] = {}
    health_trends: list[MonthlyHealth] = []


# ─── Sales performance ────────────────────────────────────────────────────────

class BreedPopularity(BaseModel):
    breed: str
    count: int
    sold: int = 0
    average_sale_price: float = 0.0


class PerformanceAnalysis(BaseModel):
    sales_conversion_rate: float = 0.0
    average_time_to_sale_days: float = 0.0
    popular_breeds: list[BreedPopularity] = []


# ─── Aggregate ────────────────────────────────────────────────────────────────

class Overview(BaseModel):
    status_counts: dict[str, int] = {}
    breed_distribution: dict[str, int] = {}
    average_age_years: float = 0.0


class AggregateSummary(BaseModel):
    total_dogs: int = 0
    female_dogs: int = 0
    male_dogs: int = 0
    breeding_eligible: int = 0
    pregnant_dogs: int = 0
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    total_purchase_costs: float = 0.0
    net_profit: float = 0.0
    urgent_care_dogs: int = 0


class AggregateResult(BaseModel):
    """Full snapshot computed by one aggregation run."""
    dogs: list[DogDetail] = []
    breeding_analysis: BreedingAnalysis = BreedingAnalysis()
    financial_analysis: FinancialAnalysis = FinancialAnalysis()
    health_analysis: HealthAnalysis = HealthAnalysis()
    performance: PerformanceAnalysis = PerformanceAnalysis()
    overview: Overview = Overview()
    summary: AggregateSummary = AggregateSummary()
    timings: dict[str, float] = {}
    collected_at: datetime


class ExpertAnalysisResult(BaseModel):
    """Narratives produced for one report request."""
    expert_analyses: dict[str, str] = {}
    combined_analysis: Optional[str] = None
    failed_roles: list[str] = []
    summary: AggregateSummary
    generated_at: datetime
