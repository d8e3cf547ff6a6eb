"""Role prompts for the expert analyses and the combined report template."""

import json

from kennel.models.analysis import AggregateResult, AggregateSummary, ExpertRole

COMBINED_EXCERPT_LINES = 10

# ─── Personas ─────────────────────────────────────────────────────────────────

_PERSONAS: dict[str, str] = {
    "financial": (
        "You are a financial advisor specialised in dog-breeding businesses. "
        "You read cost structures, pricing and return on investment with the eye of "
        "an accountant who also knows the pet market."
    ),
    "breeding": (
        "You are a canine reproduction specialist advising a professional kennel. "
        "You plan mating calendars, follow pregnancies and judge breeding stock."
    ),
    "health": (
        "You are a veterinarian responsible for the preventive health programme of a kennel. "
        "You track vaccinations, treatments and checkups across the whole population."
    ),
}

_DIMENSIONS: dict[str, list[str]] = {
    "financial": [
        "Revenue, costs and overall profitability (net profit, margin)",
        "Per-dog return on investment: best and worst performers",
        "Expense structure by category and cost-control opportunities",
        "Litter profitability and cost per puppy",
        "Monthly and seasonal trends, pricing recommendations",
    ],
    "breeding": [
        "Breeding stock: available, pregnant, nursing and retired animals",
        "Current pregnancies: stage, expected whelping dates and preparation",
        "Litter outcomes: success rate and average litter size",
        "Heat-cycle forecast and mating plan for the coming months",
        "Risks to the breeding programme (age, over-use of individuals)",
    ],
    "health": [
        "Overall health scores and animals at high risk",
        "Core vaccination coverage (rabies, DHPP, bordetella) and overdue boosters",
        "Urgent and upcoming care tasks, in priority order",
        "Recurring health issues and treatment costs",
        "Preventive measures for the next quarter",
    ],
}

_SECTION_HEADERS: dict[str, str] = {
    "financial": "## 💰 Financial analysis",
    "breeding": "## 🐕 Breeding analysis",
    "health": "## 🩺 Health analysis",
}

_ACTION_PLAN = """## 🎯 Prioritized action plan
1. **Immediate (this week):** handle urgent care items and overdue vaccinations.
2. **Short term (this month):** act on the cost and pricing recommendations above.
3. **Medium term (this quarter):** schedule matings for available females and routine checkups.
4. **Ongoing:** keep health, breeding and financial records complete so the next report is accurate."""


# ─── Prompt builders ──────────────────────────────────────────────────────────

def _summary_section(summary: AggregateSummary) -> str:
    return f"""## Business summary
- Dogs: {summary.total_dogs} ({summary.female_dogs} female, {summary.male_dogs} male)
- Breeding eligible: {summary.breeding_eligible} | Pregnant: {summary.pregnant_dogs}
- Revenue: {summary.total_revenue:.2f} | Purchases: {summary.total_purchase_costs:.2f} | Expenses: {summary.total_expenses:.2f}
- Net profit: {summary.net_profit:.2f}
- Dogs with urgent care items: {summary.urgent_care_dogs}"""


def _analysis_block(role: ExpertRole, data: AggregateResult) -> str:
    block = {
        "financial": data.financial_analysis,
        "breeding": data.breeding_analysis,
        "health": data.health_analysis,
    }[role]
    payload = block.model_dump(mode="json")
    if role == "financial":
        payload["performance"] = data.performance.model_dump(mode="json")
    return json.dumps(payload, indent=2, ensure_ascii=False)


def build_role_prompt(role: ExpertRole, data: AggregateResult) -> tuple[str, str]:
    """Return (system message, user prompt) for one expert role."""
    system_msg = (
        _PERSONAS[role]
        + " Base every statement on the figures provided; never invent numbers. "
        "Be concise and concrete, and give each recommendation a priority (high / medium / low)."
    )
    dimensions = "\n".join(f"{i}. {d}" for i, d in enumerate(_DIMENSIONS[role], start=1))
    prompt = f"""{_summary_section(data.summary)}

## {role.capitalize()} data (collected {data.collected_at.strftime('%d/%m/%Y %H:%M')})
```json
{_analysis_block(role, data)}
```

## Requested analysis
{dimensions}

## Output format
Start with a 3-line executive summary, then one short section per dimension above,
and finish with a list of prioritized recommendations.
"""
    return system_msg, prompt


def combine_narratives(analyses: dict[str, str]) -> str:
    """Excerpt each narrative under its header and append the action plan."""
    sections = []
    for role in ("financial", "breeding", "health"):
        text = analyses.get(role)
        if not text:
            continue
        excerpt = "\n".join(text.strip().splitlines()[:COMBINED_EXCERPT_LINES])
        sections.append(f"{_SECTION_HEADERS[role]}\n{excerpt}")
    return "# 📊 Combined expert report\n\n" + "\n\n".join(sections) + "\n\n" + _ACTION_PLAN
