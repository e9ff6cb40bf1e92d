"""
Report Audit Service

Records each report generation attempt in the generated_reports table
and reads the history back. Separated from the router to keep router
endpoints thin.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finreports.models import GeneratedReport
from finreports.services.report_compiler.types import (
    REPORT_METADATA,
    GeneratedDocument,
    ReportFormat,
    ReportType,
)

logger = logging.getLogger(__name__)


def _default_title(report_type: str) -> str:
    try:
        return REPORT_METADATA[ReportType(report_type)].title
    except ValueError:
        return str(report_type)


async def start_report_record(
    db: AsyncSession,
    report_type: str,
    report_format: str,
    parameters: Optional[Dict[str, Any]] = None,
    title: Optional[str] = None,
    description: Optional[str] = None,
) -> GeneratedReport:
    """Create a pending audit row for a generation attempt."""
    report_type = report_type.value if isinstance(report_type, ReportType) else str(report_type)
    report_format = report_format.value if isinstance(report_format, ReportFormat) else str(report_format)
    record = GeneratedReport(
        report_type=report_type,
        report_format=report_format,
        parameters=parameters or {},
        title=title or _default_title(report_type),
        description=description,
        status="pending",
    )
    db.add(record)
    await db.flush()
    return record


async def complete_report_record(
    db: AsyncSession,
    record: GeneratedReport,
    document: GeneratedDocument,
    generation_time_ms: int,
) -> GeneratedReport:
    record.status = "completed"
    record.file_name = document.file_name
    record.record_count = document.record_count
    record.file_size_bytes = document.size_bytes
    record.generation_time_ms = generation_time_ms
    record.completed_at = datetime.utcnow()
    await db.commit()
    await db.refresh(record)
    logger.info(
        f"Report {record.id} completed: {record.report_type}/{record.report_format}, "
        f"{record.record_count} rows, {record.file_size_bytes} bytes"
    )
    return record


async def fail_report_record(
    db: AsyncSession,
    record: GeneratedReport,
    error_message: str,
    generation_time_ms: int,
) -> GeneratedReport:
    record.status = "failed"
    record.error_message = error_message
    record.generation_time_ms = generation_time_ms
    record.completed_at = datetime.utcnow()
    await db.commit()
    await db.refresh(record)
    logger.warning(f"Report {record.id} failed: {error_message}")
    return record


async def list_report_history(
    db: AsyncSession,
    limit: int = 50,
    report_type: Optional[str] = None,
) -> List[GeneratedReport]:
    """Latest generation attempts, newest first."""
    query = select(GeneratedReport)
    if report_type:
        query = query.where(GeneratedReport.report_type == report_type)
    query = query.order_by(GeneratedReport.created_at.desc(), GeneratedReport.id.desc()).limit(limit)
    result = await db.execute(query)
    return list(result.scalars().all())
