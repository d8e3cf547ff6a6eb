"""AI analysis endpoints: business snapshot, expert reports and report history."""

import logging
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from kennel.ai.orchestrator import analyze_business
from kennel.api.dependencies import AggregatorDep, DbDep, OrchestratorDep
from kennel.errors import AllRolesFailed, RepositoryReadFailure
from kennel.models.analysis import AggregateResult, AggregateSummary
from kennel.models.report import AnalysisReport, AnalysisReportSummary
from kennel.services import report_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["analysis"])


class ReportRequest(BaseModel):
    role: Literal["financial", "breeding", "health", "all"] = "all"


class ReportResponse(BaseModel):
    role: str
    expert_analyses: dict[str, str]
    combined_analysis: Optional[str] = None
    failed_roles: list[str] = []
    summary: AggregateSummary
    timestamp: datetime
    report_id: Optional[int] = None


@router.get("/snapshot", response_model=AggregateResult)
async def business_snapshot(aggregator: AggregatorDep) -> AggregateResult:
    """Aggregate the current business records without calling the LLM."""
    try:
        return await aggregator.aggregate()
    except RepositoryReadFailure as exc:
        logger.error("Snapshot aggregation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Data collection failed, check the database connection")


@router.post("/report", response_model=ReportResponse)
async def expert_report(
    body: ReportRequest,
    db: DbDep,
    aggregator: AggregatorDep,
    orchestrator: OrchestratorDep,
) -> ReportResponse:
    """
    Run the expert analyses for one role or for all of them.

    - Roles that fail after retries are listed in ``failed_roles``.
    - With role "all" and at least two successful roles, a combined report is included.
    - The response is stored and can be fetched again from ``/analysis/history``.
    """
    try:
        _, result = await analyze_business(aggregator, orchestrator, body.role)
    except RepositoryReadFailure as exc:
        logger.error("Report aggregation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Data collection failed, check the database connection")
    except AllRolesFailed as exc:
        logger.error("Report generation failed: %s", exc)
        raise HTTPException(status_code=503, detail="AI service temporarily unavailable, please retry later")

    report = await report_service.save_report(db, body.role, result)

    return ReportResponse(
        role=body.role,
        expert_analyses=result.expert_analyses,
        combined_analysis=result.combined_analysis,
        failed_roles=result.failed_roles,
        summary=result.summary,
        timestamp=result.generated_at,
        report_id=report.id,
    )


@router.get("/history", response_model=list[AnalysisReportSummary])
async def list_analysis_history(
    db: DbDep,
    limit: int = Query(20, ge=1, le=100),
) -> list[AnalysisReportSummary]:
    """Return past analysis reports (newest first)."""
    return await report_service.list_reports(db, limit=limit)


@router.get("/history/{report_id}", response_model=AnalysisReport)
async def get_analysis_report(report_id: int, db: DbDep) -> AnalysisReport:
    """Return the full text of a specific past analysis report."""
    report = await report_service.get_report(db, report_id)
    if not report:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
    return report


@router.delete("/history/{report_id}", status_code=204)
async def delete_analysis_report(report_id: int, db: DbDep) -> None:
    """Delete a specific past analysis report."""
    deleted = await report_service.delete_report(db, report_id)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Report {report_id} not found")
