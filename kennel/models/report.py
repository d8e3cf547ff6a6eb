"""Stored expert analysis report model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from .analysis import AggregateSummary


class AnalysisReport(BaseModel):
    """Full report record returned from the database."""
    id: int
    role: str
    expert_analyses: dict[str, str] = {}
    combined_analysis: Optional[str] = None
    failed_roles: list[str] = []
    summary: AggregateSummary
    created_at: datetime

    model_config = {"from_attributes": True}


class AnalysisReportSummary(BaseModel):
    """Listing model without the narrative text."""
    id: int
    role: str
    roles_present: list[str] = []
    failed_roles: list[str] = []
    created_at: datetime
