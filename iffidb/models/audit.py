"""
Audit Models for IffiDB

Every significant action in the system is logged for audit purposes.
The same entries feed the console's log panel, so an entry doubles as
console output.

DESIGN DECISION: Audit logs are append-only. Entries are never modified;
the only removal is eviction of the oldest entries once the capacity is hit.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from iffidb.models.record import generate_id, local_now


class LogAction(str, Enum):
    """Closed set of audit actions."""
    LOGIN = "LOGIN"
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    ERROR = "ERROR"
    SYSTEM = "SYSTEM"


class LogEntry(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail and of the console output.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    timestamp: datetime = Field(default_factory=local_now)
    action: LogAction
    details: str = ""
    user: Optional[str] = None

    def to_storage(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "entry_id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "action": self.action.value,
            "details": self.details,
            "user": self.user,
        }

    def to_console_line(self) -> str:
        """Render as a log-panel line: `[HH:MM:SS] ACTION details`."""
        return f"[{self.timestamp.strftime('%H:%M:%S')}] {self.action.value} {self.details}"
