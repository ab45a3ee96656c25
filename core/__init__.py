"""Core utilities and configuration for the dashboard"""
from core.config import settings
from core.exceptions import DashboardError, DatabaseError, NotFoundError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "DashboardError",
    "DatabaseError",
    "NotFoundError",
]
