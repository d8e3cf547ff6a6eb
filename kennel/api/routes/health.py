"""Healthcheck endpoint."""

import os

from fastapi import APIRouter
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    llm_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return service status and whether an LLM API key is configured."""
    return HealthResponse(status="ok", llm_configured=bool(os.getenv("ANTHROPIC_API_KEY")))
