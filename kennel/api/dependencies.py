"""Reusable FastAPI dependencies (DB, aggregator, orchestrator)."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

import aiosqlite
from fastapi import Depends, Request

from kennel.ai.client import LLMClient
from kennel.ai.orchestrator import ReportOrchestrator
from kennel.services.aggregator import BusinessDataAggregator
from kennel.services.database import get_db as _get_db
from kennel.services.repository import SqliteEntityRepository

logger = logging.getLogger(__name__)


async def db_dependency() -> AsyncGenerator[aiosqlite.Connection, None]:
    """Provide a SQLite connection for the duration of the request."""
    async with _get_db() as conn:
        yield conn


DbDep = Annotated[aiosqlite.Connection, Depends(db_dependency)]


def aggregator_dependency(db: DbDep) -> BusinessDataAggregator:
    """A fresh aggregator per request; nothing is cached between runs."""
    return BusinessDataAggregator(SqliteEntityRepository(db))


def get_llm_client(request: Request) -> LLMClient:
    """Return the shared LLM client, creating it on first use."""
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        client = LLMClient()
        request.app.state.llm_client = client
        logger.info("LLM client created (model=%s)", client.model)
    return client


def orchestrator_dependency(client: Annotated[LLMClient, Depends(get_llm_client)]) -> ReportOrchestrator:
    return ReportOrchestrator(client)


AggregatorDep = Annotated[BusinessDataAggregator, Depends(aggregator_dependency)]
OrchestratorDep = Annotated[ReportOrchestrator, Depends(orchestrator_dependency)]
