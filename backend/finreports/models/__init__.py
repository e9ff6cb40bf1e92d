"""
Database Models

All model classes are re-exported here:
    from finreports.models import GeneratedReport
"""

from finreports.database import Base  # noqa: F401
from finreports.models.reporting import GeneratedReport

__all__ = ["Base", "GeneratedReport"]
