"""Health score, vaccination status and upcoming care."""

from collections import Counter, defaultdict
from datetime import date, timedelta
from typing import Iterable, Mapping, Sequence

from kennel.models.analysis import MonthlyHealth, RiskLevel
from kennel.models.detail import (
    CareItem,
    OptionalVaccine,
    VaccinationRecord,
    VaccinationStatus,
    VaccineSlot,
)
from kennel.models.records import HealthEvent

from .temporal import month_key

DEFAULT_HEALTH_SCORE = 70
BASE_HEALTH_SCORE = 80
RECENT_WINDOW_DAYS = 90
VACCINATION_BONUS, VACCINATION_BONUS_CAP = 5, 20
TREATMENT_PENALTY, TREATMENT_PENALTY_CAP = 10, 30
CHECKUP_THRESHOLD = 70
CARE_HORIZON_DAYS = 30

# Best-effort name matching. Extend the lists as new spellings show up in
# the records; a vaccine matching no slot is reported as optional.
VACCINE_SYNONYMS: dict[str, tuple[str, ...]] = {
    "rabies": ("rabies", "狂犬"),
    "dhpp": (
        "dhpp", "dapp", "dhlpp", "combo", "distemper", "parvo",
        "犬瘟", "细小", "四联", "六联", "八联",
    ),
    "bordetella": ("bordetella", "kennel cough", "窝咳", "支气管"),
}

# (label, keywords) checked in order
HEALTH_ISSUE_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("skin", ("skin", "dermat", "皮肤", "皮炎")),
    ("digestive", ("digest", "diarrh", "vomit", "消化", "腹泻", "呕吐")),
    ("respiratory", ("respirat", "cough", "呼吸", "咳嗽")),
    ("eye", ("eye", "眼")),
    ("joint", ("joint", "bone", "关节", "骨")),
    ("cold_fever", ("cold", "fever", "感冒", "发烧")),
]


def health_score(events: Sequence[HealthEvent], today: date) -> int:
    """Synthetic 0-100 index from recent vaccinations and treatments.

    An animal with no health events at all gets DEFAULT_HEALTH_SCORE, which
    is lower than the base so "unknown" never reads as "healthy".
    """
    if not events:
        return DEFAULT_HEALTH_SCORE
    since = today - timedelta(days=RECENT_WINDOW_DAYS)
    recent = [e for e in events if since <= e.record_date <= today]
    vaccinations = sum(1 for e in recent if e.record_type == "vaccination")
    treatments = sum(1 for e in recent if e.record_type == "treatment")
    score = (
        BASE_HEALTH_SCORE
        + min(vaccinations * VACCINATION_BONUS, VACCINATION_BONUS_CAP)
        - min(treatments * TREATMENT_PENALTY, TREATMENT_PENALTY_CAP)
    )
    return max(0, min(100, score))


def risk_level(score: int) -> RiskLevel:
    if score < 50:
        return "high"
    if score < CHECKUP_THRESHOLD:
        return "medium"
    return "low"


def classify_vaccine(
    vaccine_type: str, synonyms: Mapping[str, Iterable[str]] = VACCINE_SYNONYMS
) -> str | None:
    """Return the core slot a vaccine name belongs to, or None."""
    name = vaccine_type.lower()
    for slot, words in synonyms.items():
        if any(w in name for w in words):
            return slot
    return None


def _slot_state(next_due: date, today: date) -> str:
    return "current" if next_due > today else "due"


def vaccination_status(
    records: Sequence[VaccinationRecord],
    today: date,
    synonyms: Mapping[str, Iterable[str]] = VACCINE_SYNONYMS,
) -> VaccinationStatus:
    latest: dict[str, VaccinationRecord] = {}
    optional: dict[str, VaccinationRecord] = {}
    for rec in records:
        slot = classify_vaccine(rec.vaccine_type, synonyms)
        target, key = (latest, slot) if slot else (optional, rec.vaccine_type.lower())
        if key not in target or rec.date >= target[key].date:
            target[key] = rec

    slots = {
        slot: VaccineSlot(
            last_date=rec.date,
            next_due=rec.next_due,
            status=_slot_state(rec.next_due, today),
        )
        for slot, rec in latest.items()
        if slot in ("rabies", "dhpp", "bordetella")
    }
    return VaccinationStatus(
        **slots,
        optional_vaccines=[
            OptionalVaccine(
                vaccine_type=rec.vaccine_type,
                last_date=rec.date,
                next_due=rec.next_due,
                status=_slot_state(rec.next_due, today),
            )
            for rec in optional.values()
        ],
    )


def upcoming_care(
    records: Sequence[VaccinationRecord],
    score: int,
    today: date,
    synonyms: Mapping[str, Iterable[str]] = VACCINE_SYNONYMS,
) -> list[CareItem]:
    """Boosters due within the care horizon plus a checkup for low scores.

    Doses are grouped like vaccination_status groups them: by core slot,
    else by vaccine name.
    """
    horizon = today + timedelta(days=CARE_HORIZON_DAYS)

    def key(rec: VaccinationRecord) -> str:
        return classify_vaccine(rec.vaccine_type, synonyms) or rec.vaccine_type.lower()

    newest: dict[str, date] = {}
    for rec in records:
        newest[key(rec)] = max(newest.get(key(rec), rec.date), rec.date)

    items: list[CareItem] = []
    for rec in records:
        if rec.date < newest[key(rec)]:
            continue  # superseded by a later dose
        if rec.next_due <= horizon:
            items.append(CareItem(
                kind="vaccination",
                description=f"{rec.vaccine_type} booster",
                due_date=rec.next_due,
                priority="urgent" if rec.next_due < today else "important",
            ))
    if score < CHECKUP_THRESHOLD:
        items.append(CareItem(
            kind="checkup",
            description="General health checkup",
            due_date=today,
            priority="urgent",
        ))
    return sorted(items, key=lambda i: i.due_date)


def categorize_health_issue(description: str) -> str:
    text = description.lower()
    for label, keywords in HEALTH_ISSUE_KEYWORDS:
        if any(kw in text for kw in keywords):
            return label
    return "other"


def common_health_issues(events: Iterable[HealthEvent]) -> dict[str, int]:
    counts: Counter = Counter()
    for e in events:
        if e.record_type == "treatment" and (e.description or e.treatment_type):
            counts[categorize_health_issue(e.description or e.treatment_type)] += 1
    return dict(counts)


def health_trends(events: Iterable[HealthEvent], months: int = 6) -> list[MonthlyHealth]:
    """Treatment, vaccination and checkup counts for the most recent months."""
    field_for = {"treatment": "treatments", "vaccination": "vaccinations", "checkup": "checkups"}
    counts: dict[str, Counter] = defaultdict(Counter)
    for e in events:
        if e.record_type in field_for:
            counts[month_key(e.record_date)][field_for[e.record_type]] += 1
    return [
        MonthlyHealth(
            month=m,
            treatments=counts[m]["treatments"],
            vaccinations=counts[m]["vaccinations"],
            checkups=counts[m]["checkups"],
        )
        for m in sorted(counts)
    ][-months:]
