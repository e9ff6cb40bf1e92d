"""Centralized Pydantic schemas for API requests/responses"""

from .reports import GeneratedReportResponse, GenerateReportRequest, ReportTypeInfo

__all__ = [
    "GenerateReportRequest",
    "GeneratedReportResponse",
    "ReportTypeInfo",
]
