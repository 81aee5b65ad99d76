"""
Record Service

CRUD over the store's record collection, plus CSV export, sample data and
dashboard statistics. Used both by the command console and by the view.

Every mutating call:
1. Waits for the configured latency (mirrors a remote backend)
2. Does its read-modify-write through the store's lock
3. Appends an audit entry
4. Publishes a change notification

DESIGN DECISION: Failures raise. The command executor turns them into
ERROR log lines; the view shows them next to the form that caused them.
"""

import asyncio
import csv
import io
import random
from datetime import date, datetime
from typing import Optional, Union

from iffidb.audit import AuditLog
from iffidb.config.settings import LatencySettings
from iffidb.errors import IffiDBError
from iffidb.events import ChangeNotifier
from iffidb.models.audit import LogAction
from iffidb.models.record import (
    NOT_AVAILABLE,
    CsvExport,
    DashboardStats,
    Record,
    RecordCreate,
    RecordUpdate,
    generate_id,
    local_now,
)
from iffidb.services.capabilities import DownloadCapability
from iffidb.services.storage import PersistentStore


CSV_HEADERS = ["ID", "Name", "Email", "Phone", "Address", "Created At"]
DEFAULT_EXPORT_PREFIX = "iffidb_export"
RECENT_LIMIT = 5

SAMPLE_FIRST_NAMES = ["John", "Jane", "Ali", "Sara", "Mike", "Emily", "David", "Zara"]
SAMPLE_LAST_NAMES = ["Doe", "Smith", "Khan", "Baloch", "Taylor", "Wilson", "Brown", "Ahmed"]
SAMPLE_CITIES = ["New York", "London", "Karachi", "Lahore", "Dubai", "Toronto"]


class RecordServiceError(IffiDBError):
    """Base exception for record operations."""
    pass


class ValidationError(RecordServiceError):
    """Required record fields are missing."""
    pass


class NotFoundError(RecordServiceError):
    """No record has the requested id."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record with ID {record_id} not found.")


class EmptyExportError(RecordServiceError):
    """An export was requested for zero records."""
    pass


# =============================================================================
# CSV / filtering helpers
# =============================================================================

def format_created_at(value: datetime) -> str:
    """Localized creation time as shown in exports."""
    return value.astimezone().strftime("%m/%d/%Y, %I:%M:%S %p")


def export_filename(prefix: str, today: Optional[date] = None) -> str:
    """`<prefix>_<YYYY-MM-DD>.csv` for the current (or given) date."""
    today = today or local_now().date()
    return f"{prefix}_{today.isoformat()}.csv"


def render_csv(records: list[Record]) -> str:
    """
    Serialize records as CSV.

    The header row is bare; every data field is wrapped in double quotes
    with embedded quotes doubled. Rows are joined with a single newline and
    there is no trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for record in records:
        writer.writerow([
            record.id,
            record.name,
            record.email,
            record.phone,
            record.address,
            format_created_at(record.created_at),
        ])
    rows = buffer.getvalue()
    if rows.endswith("\n"):
        rows = rows[:-1]
    return "\n".join([",".join(CSV_HEADERS), rows]) if rows else ",".join(CSV_HEADERS)


def filter_records(
    records: list[Record],
    search: str = "",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[Record]:
    """
    Filter records the way the records page does.

    - search: case-insensitive substring of name or email
    - start_date / end_date: inclusive local calendar days on created_at
    """
    needle = search.strip().lower()

    matches = []
    for record in records:
        if needle and needle not in record.name.lower() and needle not in record.email.lower():
            continue
        day = record.created_at.astimezone().date()
        if start_date and day < start_date:
            continue
        if end_date and day > end_date:
            continue
        matches.append(record)
    return matches


# =============================================================================
# Service
# =============================================================================

class RecordService:
    """
    Record operations over the persistent store.

    The view and the command executor both go through this class; neither
    touches the store directly.
    """

    def __init__(
        self,
        store: PersistentStore,
        audit: AuditLog,
        notifier: ChangeNotifier,
        latency: Optional[LatencySettings] = None,
        downloader: Optional[DownloadCapability] = None,
        rng: Optional[random.Random] = None,
    ):
        self._store = store
        self._audit = audit
        self._notifier = notifier
        self._latency = latency or LatencySettings()
        self._downloader = downloader
        self._rng = rng or random.Random()

    @property
    def notifier(self) -> ChangeNotifier:
        return self._notifier

    async def _pause(self, seconds: float) -> None:
        if seconds > 0:
            await asyncio.sleep(seconds)

    async def get(self, record_id: str) -> Record:
        """Fetch one record by id."""
        await self._pause(self._latency.read)
        for record in self._store.load_records():
            if record.id == record_id:
                return record
        raise NotFoundError(record_id)

    async def create(self, fields: Union[RecordCreate, dict]) -> Record:
        """
        Create a record at the head of the collection.

        Raises:
            ValidationError: If name or email is empty
        """
        if isinstance(fields, dict):
            fields = RecordCreate.model_validate(fields)
        if not fields.name or not fields.email:
            raise ValidationError("Name and email are required.")

        await self._pause(self._latency.mutation)

        def insert(records: list[Record]) -> tuple[list[Record], Record]:
            taken = {r.id for r in records}
            record_id = generate_id()
            while record_id in taken:
                record_id = generate_id()

            created_at = local_now()
            if records and records[0].created_at > created_at:
                created_at = records[0].created_at

            record = Record(
                id=record_id,
                name=fields.name,
                email=fields.email,
                phone=fields.phone or NOT_AVAILABLE,
                address=fields.address or NOT_AVAILABLE,
                created_at=created_at,
            )
            return [record, *records], record

        record = self._store.mutate_records(insert)
        self._audit.append(LogAction.CREATE, f"Created record: {record.name}")
        self._notifier.publish()
        return record

    async def update(
        self,
        record_id: str,
        partial: Union[RecordUpdate, dict],
    ) -> Record:
        """
        Merge partial over an existing record.

        Fields not present in partial are unchanged; id and created_at are
        never overwritten.

        Raises:
            NotFoundError: If no record has record_id
        """
        if isinstance(partial, dict):
            partial = RecordUpdate.model_validate(partial)
        changes = partial.changes()

        await self._pause(self._latency.mutation)

        def merge(records: list[Record]) -> tuple[list[Record], Record]:
            for index, existing in enumerate(records):
                if existing.id == record_id:
                    updated = existing.model_copy(update=changes)
                    return [*records[:index], updated, *records[index + 1:]], updated
            raise NotFoundError(record_id)

        try:
            record = self._store.mutate_records(merge)
        except NotFoundError:
            self._audit.error(f"Update failed: Record {record_id} not found.")
            raise

        self._audit.append(LogAction.UPDATE, f"Updated record: {record.name}")
        self._notifier.publish()
        return record

    async def delete(self, record_id: str) -> None:
        """
        Permanently remove a record.

        Raises:
            NotFoundError: If no record has record_id
        """
        await self._pause(self._latency.mutation)

        def remove(records: list[Record]) -> tuple[list[Record], Record]:
            for index, existing in enumerate(records):
                if existing.id == record_id:
                    return [*records[:index], *records[index + 1:]], existing
            raise NotFoundError(record_id)

        try:
            removed = self._store.mutate_records(remove)
        except NotFoundError:
            self._audit.error(f"Delete failed: Record {record_id} not found.")
            raise

        self._audit.append(LogAction.DELETE, f"Deleted record: {removed.name or record_id}")
        self._notifier.publish()

    def export_csv(
        self,
        records: list[Record],
        prefix: str = DEFAULT_EXPORT_PREFIX,
    ) -> CsvExport:
        """
        Render records as CSV and hand the file to the download capability.

        The export is returned as well, so a caller without a download
        capability can still deliver it.

        Raises:
            EmptyExportError: If records is empty
        """
        if not records:
            raise EmptyExportError("No records to export.")

        export = CsvExport(
            filename=export_filename(prefix),
            content=render_csv(records),
            row_count=len(records),
        )
        if self._downloader is not None:
            self._downloader.deliver(export.filename, export.content)

        self._audit.system(f"Exported {export.row_count} records to CSV ({export.filename}).")
        return export

    def sample_fields(self) -> RecordCreate:
        """One randomized sample record drawn from the fixed word lists."""
        first = self._rng.choice(SAMPLE_FIRST_NAMES)
        last = self._rng.choice(SAMPLE_LAST_NAMES)
        return RecordCreate(
            name=f"{first} {last}",
            email=f"{first.lower()}.{last.lower()}@example.com",
            phone=f"+92 3{self._rng.randint(100, 999)} {self._rng.randrange(9000000)}",
            address=f"{self._rng.randrange(100)} St, {self._rng.choice(SAMPLE_CITIES)}",
        )

    async def generate_sample(self, count: int = 10) -> list[Record]:
        """Create count random records concurrently and log one summary entry."""
        if count < 1:
            raise ValueError("count must be at least 1")

        created = await asyncio.gather(
            *(self.create(self.sample_fields()) for _ in range(count))
        )
        self._audit.system(f"Generated {count} sample records.")
        self._notifier.publish()
        return list(created)

    async def stats(self) -> DashboardStats:
        """
        Dashboard figures.

        deleted_count is a random placeholder in [5, 25); deletions are not
        tracked anywhere.
        """
        await self._pause(self._latency.read)
        records = self._store.load_records()
        midnight = local_now().replace(hour=0, minute=0, second=0, microsecond=0)

        return DashboardStats(
            total_records=len(records),
            new_today=sum(1 for r in records if r.created_at >= midnight),
            deleted_count=self._rng.randrange(5, 25),
            last_added=records[:RECENT_LIMIT],
        )

    async def list(self) -> list[Record]:
        """All records, most recently created first."""
        await self._pause(self._latency.read)
        return self._store.load_records()
