"""Breeding eligibility, pregnancy tracking and litter statistics."""

from datetime import date
from typing import Mapping, Optional, Sequence

from kennel.models.analysis import (
    FemaleBreedingProfile,
    LitterStatistics,
    MaleBreedingProfile,
    MonthlyBirths,
)
from kennel.models.detail import (
    BreedingHistoryEntry,
    BreedingRecord,
    DogDetail,
    FemaleBreedingStatus,
    MaleBreedingStatus,
    PartnerSnapshot,
    PregnancyDetail,
)
from kennel.models.records import Animal, LitterEvent

from .temporal import (
    PREGNANCY_WINDOW_DAYS,
    estimate_next_heat_cycle,
    expected_birth,
    gestation_days,
    gestation_stage,
    month_key,
)

FEMALE_MIN_AGE_MONTHS = 6
FEMALE_MAX_AGE_MONTHS = 96
MALE_MIN_AGE_MONTHS = 8
MALE_MAX_AGE_MONTHS = 96
NURSING_DAYS = 56


def classify_female(
    age_months: int,
    open_pregnancy: Optional[PregnancyDetail],
    *,
    last_birth_date: Optional[date] = None,
    today: Optional[date] = None,
) -> FemaleBreedingStatus:
    """Pregnancy wins over nursing, which wins over age limits."""
    if open_pregnancy is not None:
        return "pregnant"
    if last_birth_date and today and 0 <= (today - last_birth_date).days <= NURSING_DAYS:
        return "nursing"
    if age_months < FEMALE_MIN_AGE_MONTHS:
        return "too_young"
    if age_months > FEMALE_MAX_AGE_MONTHS:
        return "too_old"
    return "available"


def classify_male(age_months: int) -> MaleBreedingStatus:
    if age_months < MALE_MIN_AGE_MONTHS:
        return "too_young"
    if age_months > MALE_MAX_AGE_MONTHS:
        return "retired"
    return "available"


def current_pregnancy(
    breeding_records: Sequence[BreedingRecord],
    today: date,
    partners: Optional[Mapping[str, Animal]] = None,
) -> Optional[PregnancyDetail]:
    """Pregnancy from the latest mating without a recorded birth.

    A mating older than the pregnancy window is treated as stale and yields None.
    """
    open_matings = [r for r in breeding_records if r.kind == "mating" and r.birth_date is None]
    if not open_matings:
        return None
    latest = max(open_matings, key=lambda r: r.date)
    days = gestation_days(latest.date, today)
    if days > PREGNANCY_WINDOW_DAYS:
        return None

    partner = (partners or {}).get(latest.partner_id)
    return PregnancyDetail(
        mating_date=latest.date,
        expected_birth=expected_birth(latest.date),
        current_stage=gestation_stage(days),
        days_pregnant=days,
        partner=PartnerSnapshot(
            id=latest.partner_id,
            name=partner.name if partner else latest.partner_name,
            breed=partner.breed if partner else None,
        ),
    )


def breeding_history(breeding_records: Sequence[BreedingRecord]) -> list[BreedingHistoryEntry]:
    """Birth outcomes in input order."""
    return [
        BreedingHistoryEntry(
            date=r.date,
            partner_id=r.partner_id,
            outcome="success" if r.puppies_count > 0 else "failure",
            puppies_count=r.puppies_count,
        )
        for r in breeding_records
        if r.kind == "birth"
    ]


def female_profile(
    dog: DogDetail, today: date, partners: Optional[Mapping[str, Animal]] = None
) -> FemaleBreedingProfile:
    pregnancy = current_pregnancy(dog.breeding_records, today, partners)
    births = [r for r in dog.breeding_records if r.kind == "birth"]
    matings = [r.date for r in dog.breeding_records if r.kind == "mating"]
    last_birth = max((r.date for r in births), default=None)
    return FemaleBreedingProfile(
        dog_id=dog.id,
        name=dog.name,
        breed=dog.breed,
        age_months=dog.age_months,
        breeding_status=classify_female(
            dog.age_months, pregnancy, last_birth_date=last_birth, today=today
        ),
        pregnancy_details=pregnancy,
        # a mating marks the last observed heat
        next_heat_estimate=estimate_next_heat_cycle(max(matings, default=None), dog.age_months),
        breeding_history=breeding_history(dog.breeding_records),
        total_litters=len(births),
        total_puppies=sum(r.puppies_count for r in births),
    )


def male_profile(dog: DogDetail) -> MaleBreedingProfile:
    return MaleBreedingProfile(
        dog_id=dog.id,
        name=dog.name,
        breed=dog.breed,
        age_months=dog.age_months,
        breeding_status=classify_male(dog.age_months),
        breeding_history=breeding_history(dog.breeding_records),
        total_matings=sum(1 for r in dog.breeding_records if r.kind == "mating"),
    )


def litter_statistics(litters: Sequence[LitterEvent], today: date, months: int = 12) -> LitterStatistics:
    total = len(litters)
    completed = [l for l in litters if l.birth_date is not None]
    active = [
        l for l in litters
        if l.birth_date is None and gestation_days(l.mating_date, today) <= PREGNANCY_WINDOW_DAYS
    ]

    trend: dict[str, MonthlyBirths] = {}
    for l in litters:
        key = month_key(l.mating_date)
        trend.setdefault(key, MonthlyBirths(month=key)).pregnancies += 1
        if l.birth_date:
            key = month_key(l.birth_date)
            trend.setdefault(key, MonthlyBirths(month=key)).births += 1

    return LitterStatistics(
        total_litters=total,
        active_pregnancies=len(active),
        completed_births=len(completed),
        average_litter_size=(
            round(sum(l.puppies_count for l in completed) / len(completed), 1) if completed else 0.0
        ),
        breeding_success_rate=round(len(completed) / total * 100, 1) if total else 0.0,
        monthly_births=[trend[k] for k in sorted(trend)][-months:],
    )
