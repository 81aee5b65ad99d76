"""
Audit Log

DESIGN DECISION: Every mutating operation and every authentication attempt
writes an audit entry. The entries are also what the command console shows,
so the audit log doubles as the console's output panel.

The audit log:
- Is bounded (oldest entries evicted past the capacity, default 100)
- Always inserts at the head (most recent first)
- Mirrors every entry to the structured application log
"""

from typing import TYPE_CHECKING, Optional, Union

import structlog

from iffidb.models.audit import LogAction, LogEntry

if TYPE_CHECKING:
    from iffidb.services.storage import PersistentStore


DEFAULT_CAPACITY = 100
DEFAULT_OPERATOR = "Admin"


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLog:
    """
    Append-only, capacity-bounded audit trail.

    Persists through the store and logs each entry locally.
    """

    def __init__(
        self,
        store: "PersistentStore",
        capacity: int = DEFAULT_CAPACITY,
        default_user: str = DEFAULT_OPERATOR,
    ):
        """
        Initialize audit log.

        Args:
            store: Store that owns the log collection.
            capacity: Maximum number of entries retained.
            default_user: Attribution for entries appended without a user.
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._store = store
        self._capacity = capacity
        self._default_user = default_user
        self._logger = structlog.get_logger("iffidb.audit")

    @property
    def capacity(self) -> int:
        return self._capacity

    def append(
        self,
        action: Union[LogAction, str],
        details: str,
        user: Optional[str] = None,
    ) -> LogEntry:
        """
        Record an event at the head of the log and return it.

        Entries beyond the capacity are evicted, oldest first.
        """
        entry = LogEntry(
            action=LogAction(action),
            details=details,
            user=user or self._default_user,
        )
        self._store.mutate_logs(lambda entries: [entry, *entries][: self._capacity])

        log_dict = entry.to_log_dict()
        if entry.action == LogAction.ERROR:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        return entry

    def list(self) -> list[LogEntry]:
        """The full bounded collection, most recent first."""
        return self._store.load_logs()

    def system(self, details: str) -> LogEntry:
        """Log a SYSTEM event."""
        return self.append(LogAction.SYSTEM, details)

    def error(self, details: str) -> LogEntry:
        """Log an ERROR event."""
        return self.append(LogAction.ERROR, details)
