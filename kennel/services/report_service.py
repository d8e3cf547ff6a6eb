"""Persistence for expert analysis reports."""

import json
from datetime import datetime

import aiosqlite

from kennel.models.analysis import AggregateSummary, ExpertAnalysisResult
from kennel.models.report import AnalysisReport, AnalysisReportSummary


def _row_to_report(row: aiosqlite.Row) -> AnalysisReport:
    return AnalysisReport(
        id=row["id"],
        role=row["role"],
        expert_analyses=json.loads(row["analyses_json"] or "{}"),
        combined_analysis=row["combined_analysis"],
        failed_roles=json.loads(row["failed_roles_json"] or "[]"),
        summary=AggregateSummary.model_validate_json(row["summary_json"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_summary(row: aiosqlite.Row) -> AnalysisReportSummary:
    return AnalysisReportSummary(
        id=row["id"],
        role=row["role"],
        roles_present=sorted(json.loads(row["analyses_json"] or "{}")),
        failed_roles=json.loads(row["failed_roles_json"] or "[]"),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


async def save_report(
    db: aiosqlite.Connection, role: str, result: ExpertAnalysisResult
) -> AnalysisReport:
    """Persist an analysis result and return the full record."""
    cursor = await db.execute(
        """INSERT INTO analysis_reports
               (role, analyses_json, combined_analysis, failed_roles_json, summary_json, created_at)
           VALUES (?, ?, ?, ?, ?, ?)""",
        (
            role,
            json.dumps(result.expert_analyses),
            result.combined_analysis,
            json.dumps(result.failed_roles),
            result.summary.model_dump_json(),
            result.generated_at.isoformat(),
        ),
    )
    await db.commit()
    rows = await db.execute_fetchall(
        "SELECT * FROM analysis_reports WHERE id = ?", (cursor.lastrowid,)
    )
    return _row_to_report(rows[0])


async def get_report(db: aiosqlite.Connection, report_id: int) -> AnalysisReport | None:
    """Return a specific report by id."""
    async with db.execute(
        "SELECT * FROM analysis_reports WHERE id = ?", (report_id,)
    ) as cur:
        row = await cur.fetchone()
    return _row_to_report(row) if row else None


async def list_reports(db: aiosqlite.Connection, limit: int = 20) -> list[AnalysisReportSummary]:
    """Return the most recent report summaries."""
    rows = await db.execute_fetchall(
        """SELECT id, role, analyses_json, failed_roles_json, created_at
           FROM analysis_reports
           ORDER BY created_at DESC, id DESC
           LIMIT ?""",
        (limit,),
    )
    return [_row_to_summary(r) for r in rows]


async def delete_report(db: aiosqlite.Connection, report_id: int) -> bool:
    """Delete a report. Returns True if deleted."""
    cursor = await db.execute(
        "DELETE FROM analysis_reports WHERE id = ?", (report_id,)
    )
    await db.commit()
    return cursor.rowcount > 0
