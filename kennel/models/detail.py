"""Per-animal derived model built by the aggregator."""

import datetime as dt
from typing import Literal, Optional

from pydantic import BaseModel

from .records import Gender

BreedingKind = Literal["mating", "pregnancy", "birth"]
FinancialKind = Literal["purchase", "sale", "expense"]
FemaleBreedingStatus = Literal["available", "pregnant", "nursing", "too_young", "too_old"]
MaleBreedingStatus = Literal["available", "too_young", "retired"]
BreedingStatus = Literal["available", "pregnant", "nursing", "too_young", "too_old", "retired"]
GestationStage = Literal["early", "mid", "late", "imminent"]
VaccineState = Literal["current", "due", "overdue"]
CarePriority = Literal["urgent", "important"]


class VaccinationRecord(BaseModel):
    vaccine_type: str
    date: dt.date
    next_due: dt.date
    veterinarian: Optional[str] = None
    cost: float = 0.0


class BreedingRecord(BaseModel):
    """One step of a litter event as seen from one parent."""
    kind: BreedingKind
    date: dt.date
    partner_id: str
    partner_name: Optional[str] = None
    puppies_count: int = 0
    litter_id: Optional[str] = None
    birth_date: Optional[dt.date] = None


class FinancialRecord(BaseModel):
    kind: FinancialKind
    date: dt.date
    amount: float
    category: str


class DogDetail(BaseModel):
    id: str
    name: str
    breed: str
    gender: Gender
    status: str
    birth_date: dt.date
    age_months: int
    weight: Optional[float] = None
    health_score: int
    last_health_check: Optional[dt.date] = None
    vaccination_records: list[VaccinationRecord] = []
    breeding_records: list[BreedingRecord] = []
    financial_records: list[FinancialRecord] = []


class PartnerSnapshot(BaseModel):
    id: str
    name: Optional[str] = None
    breed: Optional[str] = None


class PregnancyDetail(BaseModel):
    mating_date: dt.date
    expected_birth: dt.date
    current_stage: GestationStage
    days_pregnant: int
    partner: PartnerSnapshot


class BreedingHistoryEntry(BaseModel):
    date: dt.date
    partner_id: str
    outcome: Literal["success", "failure"]
    puppies_count: int


class VaccineSlot(BaseModel):
    last_date: Optional[dt.date] = None
    next_due: Optional[dt.date] = None
    status: VaccineState = "overdue"


class OptionalVaccine(VaccineSlot):
    vaccine_type: str


class VaccinationStatus(BaseModel):
    rabies: VaccineSlot = VaccineSlot()
    dhpp: VaccineSlot = VaccineSlot()
    bordetella: VaccineSlot = VaccineSlot()
    optional_vaccines: list[OptionalVaccine] = []

    @property
    def core_current(self) -> bool:
        return all(s.status == "current" for s in (self.rabies, self.dhpp, self.bordetella))


class CareItem(BaseModel):
    kind: Literal["vaccination", "checkup"]
    description: str
    due_date: dt.date
    priority: CarePriority


class MonthlyAmount(BaseModel):
    month: str
    amount: float


class FinancialSummary(BaseModel):
    dog_id: str
    name: str
    purchase_price: float
    sale_price: float
    estimated_market_value: float
    total_expenses: float
    profit_loss: float
    roi_percentage: float
    expense_breakdown: dict[str, float]
    monthly_costs: list[MonthlyAmount] = []
