"""
Data Models Package

This package contains all Pydantic models used in IffiDB.
Everything the store persists must conform to these schemas.
"""

from iffidb.models.record import (
    NOT_AVAILABLE,
    CsvExport,
    DashboardStats,
    Record,
    RecordCreate,
    RecordUpdate,
    User,
    UserRole,
    generate_id,
    local_now,
)
from iffidb.models.audit import (
    LogAction,
    LogEntry,
)

__all__ = [
    # Record models
    "NOT_AVAILABLE",
    "CsvExport",
    "DashboardStats",
    "Record",
    "RecordCreate",
    "RecordUpdate",
    "User",
    "UserRole",
    "generate_id",
    "local_now",
    # Audit models
    "LogAction",
    "LogEntry",
]
