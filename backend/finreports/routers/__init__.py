"""
API Routers
"""

from finreports.routers import reports_router

__all__ = ["reports_router"]
