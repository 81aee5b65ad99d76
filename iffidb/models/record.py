"""
Core Data Models for IffiDB

These models define the schemas for everything the store persists and the
services return. They are designed to:
1. Round-trip through the JSON key-value medium unchanged
2. Keep the persisted camelCase layout (createdAt, totalRecords, ...)
   while exposing snake_case attributes to Python code
3. Be immutable once built (updates produce a new Record)

DESIGN DECISION: Input models (RecordCreate, RecordUpdate) are separate from
the stored Record. Required-field checks for create are done by the record
service and raise its own ValidationError, so callers see one error taxonomy.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


NOT_AVAILABLE = "N/A"


def generate_id() -> str:
    """Short opaque identifier used for records and log entries."""
    return uuid4().hex[:9]


def local_now() -> datetime:
    """Current time as a timezone-aware local datetime."""
    return datetime.now().astimezone()


# =============================================================================
# RECORDS
# =============================================================================

class Record(BaseModel):
    """
    A stored contact entity.

    `id` and `created_at` are assigned by the record service at creation
    and never change afterwards.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    email: str
    phone: str = NOT_AVAILABLE
    address: str = NOT_AVAILABLE
    created_at: datetime = Field(..., alias="createdAt")

    @field_validator("created_at")
    @classmethod
    def assume_local_time(cls, v: datetime) -> datetime:
        """Naive timestamps are local time."""
        return v if v.tzinfo is not None else v.astimezone()

    def to_storage(self) -> dict[str, Any]:
        """Serialize with the persisted field names."""
        return self.model_dump(mode="json", by_alias=True)

    def summary(self) -> str:
        """One-line summary used by the console list command."""
        return f"[{self.id}] {self.name} ({self.email})"


class RecordCreate(BaseModel):
    """Fields accepted when creating a record."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None


class RecordUpdate(BaseModel):
    """
    Partial update for a record.

    Only fields that are set (not None) are applied. There is deliberately
    no way to express `id` or `created_at` here.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    def changes(self) -> dict[str, str]:
        """The fields this update actually sets."""
        return self.model_dump(exclude_none=True)

    @property
    def is_empty(self) -> bool:
        return not self.changes()


# =============================================================================
# SESSION
# =============================================================================

class UserRole(str, Enum):
    """Role of the signed-in operator."""
    ADMIN = "admin"
    USER = "user"


class User(BaseModel):
    """The single active session profile."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    email: str
    role: UserRole = UserRole.USER
    token: str

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# =============================================================================
# DASHBOARD
# =============================================================================

class DashboardStats(BaseModel):
    """
    Figures shown on the dashboard.

    `deleted_count` is SIMULATED: deletions are not tracked, so the service
    fills it with a random placeholder on every read.
    """

    model_config = ConfigDict(populate_by_name=True)

    total_records: int = Field(..., ge=0, alias="totalRecords")
    new_today: int = Field(..., ge=0, alias="newToday")
    deleted_count: int = Field(
        ...,
        ge=0,
        alias="deletedCount",
        description="Simulated placeholder, not a tracked quantity"
    )
    last_added: list[Record] = Field(default_factory=list, alias="lastAdded")


class CsvExport(BaseModel):
    """A rendered CSV export ready to be delivered as a download."""

    filename: str
    content: str
    row_count: int = Field(..., ge=0)
