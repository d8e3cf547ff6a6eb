"""Expert analysis orchestration: one resilient LLM call per role."""

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from typing import Protocol, Union, get_args

import anthropic

from kennel.errors import AllRolesFailed, ExternalServiceFailure, MalformedResponseError
from kennel.models.analysis import AggregateResult, ExpertAnalysisResult, ExpertRole

from .prompts import build_role_prompt, combine_narratives

logger = logging.getLogger(__name__)

ROLES: tuple[ExpertRole, ...] = get_args(ExpertRole)
MAX_ATTEMPTS = int(os.getenv("LLM_MAX_ATTEMPTS", "5"))
ATTEMPT_TIMEOUT = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
BASE_DELAY = 1.0
MAX_DELAY = 10.0
COMBINED_MIN_ROLES = 2

# Failures that count against a role's attempt budget
RETRYABLE_ERRORS = (anthropic.APIError, asyncio.TimeoutError, MalformedResponseError)

RoleRequest = Union[str, Iterable[str], None]


class NarrativeClient(Protocol):
    async def complete(self, system: str, prompt: str) -> str: ...


def resolve_roles(role: RoleRequest) -> list[ExpertRole]:
    """Normalise "all", a single role or a list of roles; unknown roles raise ValueError."""
    if role is None or role == "all":
        return list(ROLES)
    requested = [role] if isinstance(role, str) else list(role)
    unknown = [r for r in requested if r not in ROLES]
    if unknown or not requested:
        raise ValueError(f"Unknown analysis role(s): {unknown or requested}. Expected one of {ROLES} or 'all'")
    return list(dict.fromkeys(requested))


def backoff_delay(attempt: int, base: float = BASE_DELAY, cap: float = MAX_DELAY) -> float:
    """Exponential delay after a failed attempt (1-based), capped."""
    return min(base * 2 ** attempt, cap)


class ReportOrchestrator:
    """Runs the expert roles against the LLM and assembles the result.

    Each role has its own retry loop; a role that exhausts its attempts is
    reported in ``failed_roles`` and only an all-roles failure is raised.
    """

    def __init__(
        self,
        client: NarrativeClient,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        timeout: float = ATTEMPT_TIMEOUT,
        base_delay: float = BASE_DELAY,
        max_delay: float = MAX_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleep = sleep

    async def call_role(self, role: ExpertRole, data: AggregateResult) -> str:
        system_msg, prompt = build_role_prompt(role, data)
        last_exc: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            try:
                text = await asyncio.wait_for(
                    self._client.complete(system_msg, prompt), timeout=self._timeout
                )
                logger.info("%s analysis completed on attempt %d", role, attempt)
                return text
            except RETRYABLE_ERRORS as exc:
                last_exc = exc
                if attempt == self._max_attempts:
                    break
                delay = backoff_delay(attempt, self._base_delay, self._max_delay)
                logger.warning(
                    "%s analysis attempt %d/%d failed (%s: %s) — retrying in %.0fs",
                    role, attempt, self._max_attempts, type(exc).__name__, exc, delay,
                )
                await self._sleep(delay)
            except Exception as exc:
                # not worth retrying; fails this role only
                logger.exception("%s analysis attempt %d failed unexpectedly", role, attempt)
                raise ExternalServiceFailure(role, attempt, exc) from exc
        logger.error("%s analysis failed after %d attempts", role, self._max_attempts)
        raise ExternalServiceFailure(role, self._max_attempts, last_exc) from last_exc

    async def run(self, data: AggregateResult, role: RoleRequest = "all") -> ExpertAnalysisResult:
        roles = resolve_roles(role)
        outcomes = await asyncio.gather(
            *(self.call_role(r, data) for r in roles), return_exceptions=True
        )

        analyses: dict[str, str] = {}
        failures: dict[str, ExternalServiceFailure] = {}
        for r, outcome in zip(roles, outcomes):
            if isinstance(outcome, ExternalServiceFailure):
                failures[r] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                analyses[r] = outcome

        if not analyses:
            raise AllRolesFailed(failures)

        combined = None
        if (role is None or role == "all") and len(analyses) >= COMBINED_MIN_ROLES:
            combined = combine_narratives(analyses)

        logger.info(
            "Expert analyses done: %s succeeded, %s failed",
            sorted(analyses) or "none", sorted(failures) or "none",
        )
        return ExpertAnalysisResult(
            expert_analyses=analyses,
            combined_analysis=combined,
            failed_roles=sorted(failures),
            summary=data.summary,
            generated_at=datetime.now(),
        )


async def analyze_business(aggregator, orchestrator: ReportOrchestrator, role: RoleRequest = "all"):
    """Produce expert analyses for the requested role(s) from a fresh snapshot.

    Returns (aggregated data, analysis result).
    """
    data = await aggregator.aggregate()
    result = await orchestrator.run(data, role)
    return data, result
