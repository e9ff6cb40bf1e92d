"""
Reports API Router

Endpoints for listing report types, compiling report documents from
pre-aggregated rows, and viewing the generation history.
"""

import asyncio
import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from finreports.config import settings
from finreports.database import get_db
from finreports.exceptions import AppError, ValidationError
from finreports.schemas.reports import (
    GeneratedReportResponse,
    GenerateReportRequest,
    ReportTypeInfo,
)
from finreports.services import report_audit_service
from finreports.services.report_compiler import (
    REPORT_METADATA,
    ReportType,
    content_disposition,
    generate_report,
)
from finreports.services.report_compiler.dispatcher import coerce_report_format, coerce_report_type

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


# ----- Helper Functions -----

def _apply_defaults(body: GenerateReportRequest, report_type: ReportType) -> dict:
    """Request parameters with configured defaults filled in."""
    parameters = dict(body.parameters or {})
    if not parameters.get("currency"):
        parameters["currency"] = settings.default_currency

    if report_type == ReportType.MERCHANT_ANALYSIS:
        limit = parameters.get("limit")
        if limit is None:
            limit = settings.merchant_analysis_default_limit
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError(f"limit must be an integer, got {limit!r}")
        if limit < 1 or limit > settings.merchant_analysis_max_limit:
            raise ValidationError(
                f"limit must be between 1 and {settings.merchant_analysis_max_limit}"
            )
        parameters["limit"] = limit

    return parameters


def _missing_required_fields(report_type: ReportType, parameters: dict) -> List[str]:
    meta = REPORT_METADATA[report_type]
    missing = []
    if meta.requires_date_range:
        for key, alias in (("start_date", "startDate"), ("end_date", "endDate")):
            if not parameters.get(key) and not parameters.get(alias):
                missing.append(key)
    return missing


# ----- Endpoints -----

@router.get("/types", response_model=List[ReportTypeInfo])
async def list_report_types():
    """Catalogue of available report types and their formats."""
    return [
        ReportTypeInfo(report_type=report_type, **meta.to_dict())
        for report_type, meta in REPORT_METADATA.items()
    ]


@router.post("/generate")
async def generate_report_document(
    body: GenerateReportRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Compile a report document and stream it back as a download.

    Every attempt is recorded in the generation history, including
    failures.
    """
    report_type = coerce_report_type(body.report_type)
    report_format = coerce_report_format(body.report_format)
    parameters = _apply_defaults(body, report_type)
    missing = _missing_required_fields(report_type, parameters)
    if missing:
        raise ValidationError(f"Missing required parameters: {', '.join(missing)}")

    data = body.data
    if report_type == ReportType.MERCHANT_ANALYSIS and len(data) > parameters["limit"]:
        logger.debug(f"Merchant analysis trimmed from {len(data)} to {parameters['limit']} rows")
        data = data[:parameters["limit"]]

    record = await report_audit_service.start_report_record(
        db,
        report_type=report_type,
        report_format=report_format,
        parameters=parameters,
        title=body.title,
        description=body.description,
    )

    started = time.perf_counter()
    try:
        # Rendering is CPU-bound; keep it off the event loop
        document = await asyncio.to_thread(
            generate_report,
            report_type,
            report_format,
            data,
            parameters,
        )
    except AppError as e:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await report_audit_service.fail_report_record(db, record, e.message, elapsed_ms)
        raise
    except Exception as e:
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        logger.error(f"Error generating {report_type.value} report: {e}", exc_info=True)
        await report_audit_service.fail_report_record(db, record, str(e), elapsed_ms)
        raise HTTPException(status_code=500, detail="An internal error occurred")

    elapsed_ms = int((time.perf_counter() - started) * 1000)
    await report_audit_service.complete_report_record(db, record, document, elapsed_ms)

    return Response(
        content=document.content,
        media_type=document.mime_type,
        headers={
            "Content-Disposition": content_disposition(document.file_name),
            "X-Report-Id": str(record.id),
        },
    )


@router.get("/history", response_model=List[GeneratedReportResponse])
async def get_report_history(
    limit: Optional[int] = Query(None, ge=1, le=500),
    report_type: Optional[ReportType] = None,
    db: AsyncSession = Depends(get_db),
):
    """Latest report generation attempts, newest first."""
    try:
        records = await report_audit_service.list_report_history(
            db,
            limit=limit or settings.history_page_size,
            report_type=report_type.value if report_type else None,
        )
        return [GeneratedReportResponse.model_validate(r) for r in records]
    except (HTTPException, AppError):
        raise
    except Exception as e:
        logger.error(f"Error listing report history: {e}")
        raise HTTPException(status_code=500, detail="An internal error occurred")
