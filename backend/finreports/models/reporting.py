"""Reporting models: audit history of generated reports."""

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    JSON,
    String,
    Text,
)

from finreports.database import Base


class GeneratedReport(Base):
    """
    One report generation attempt, successful or failed.

    The compiler never stores the document itself; this row only records
    what was asked for and how it went (row count, byte size, timing).
    """
    __tablename__ = "generated_reports"

    id = Column(Integer, primary_key=True, index=True)
    report_type = Column(String, nullable=False, index=True)
    report_format = Column(String, nullable=False)
    parameters = Column(JSON, nullable=True)  # Frozen copy of request parameters
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String, nullable=False, default="pending")  # pending/completed/failed
    error_message = Column(Text, nullable=True)
    file_name = Column(String, nullable=True)
    record_count = Column(Integer, nullable=True)
    file_size_bytes = Column(Integer, nullable=True)
    generation_time_ms = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    completed_at = Column(DateTime, nullable=True)
