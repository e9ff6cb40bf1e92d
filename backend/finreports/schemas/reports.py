"""Report-related Pydantic schemas"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from finreports.services.report_compiler.types import ReportFormat, ReportType


class GenerateReportRequest(BaseModel):
    report_type: str
    report_format: str = ReportFormat.PDF.value
    parameters: Dict[str, Any] = Field(default_factory=dict)
    data: List[Dict[str, Any]] = Field(default_factory=list)
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None

    @field_validator("report_type", "report_format", mode="before")
    @classmethod
    def normalize_name(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ReportTypeInfo(BaseModel):
    report_type: ReportType
    title: str
    description: str
    category: str
    category_label: str
    supported_formats: List[str]
    default_format: str
    requires_date_range: bool
    supports_filters: bool


class GeneratedReportResponse(BaseModel):
    id: int
    report_type: str
    report_format: str
    title: str
    description: Optional[str] = None
    status: str
    error_message: Optional[str] = None
    file_name: Optional[str] = None
    record_count: Optional[int] = None
    file_size_bytes: Optional[int] = None
    generation_time_ms: Optional[int] = None
    parameters: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
