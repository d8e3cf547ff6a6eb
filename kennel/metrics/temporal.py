"""Date arithmetic for ages, gestation, vaccinations and heat cycles.

The gestation and heat-cycle values are biological approximations kept as
named constants so they can be tuned per breed without touching callers.
"""

import math
from datetime import date, timedelta
from typing import Optional

from kennel.models.detail import GestationStage

DAYS_PER_MONTH = 30.44
GESTATION_DAYS = 63
PREGNANCY_WINDOW_DAYS = 70
HEAT_INTERVAL_MONTHS = 6
MIN_HEAT_AGE_MONTHS = 6

# (upper bound in days, stage); the last stage has no upper bound
GESTATION_STAGES: list[tuple[int, GestationStage]] = [
    (21, "early"),
    (42, "mid"),
    (63, "late"),
]

DEFAULT_VACCINATION_INTERVAL_DAYS = 365
VACCINATION_INTERVAL_DAYS = {
    "rabies": 365,
    "dhpp": 365,
    "bordetella": 365,
    "leptospirosis": 365,
    "lyme": 365,
    "influenza": 365,
    "coronavirus": 365,
}


def age_in_months(birth_date: date, today: date) -> int:
    """Whole months elapsed since birth, using an average month length."""
    return math.floor((today - birth_date).days / DAYS_PER_MONTH)


def gestation_days(mating_date: date, today: date) -> int:
    """Days since mating; a mating date in the future counts as day 0."""
    return max(0, (today - mating_date).days)


def gestation_stage(days: int) -> GestationStage:
    for upper, stage in GESTATION_STAGES:
        if days < upper:
            return stage
    return "imminent"


def expected_birth(mating_date: date) -> date:
    return mating_date + timedelta(days=GESTATION_DAYS)


def next_vaccination_due(vaccine_type: str, last_date: date) -> date:
    """Next booster date. Unrecognized vaccine types use the default interval."""
    key = vaccine_type.strip().lower()
    interval = VACCINATION_INTERVAL_DAYS.get(key, DEFAULT_VACCINATION_INTERVAL_DAYS)
    return last_date + timedelta(days=interval)


def estimate_next_heat_cycle(last_heat_date: Optional[date], age_months: int) -> Optional[date]:
    """Approximate next heat, six average months after the last one."""
    if last_heat_date is None or age_months < MIN_HEAT_AGE_MONTHS:
        return None
    return last_heat_date + timedelta(days=round(HEAT_INTERVAL_MONTHS * DAYS_PER_MONTH))


def month_key(d: date) -> str:
    return d.strftime("%Y-%m")
