"""Services package."""

from iffidb.services.auth import AuthError, AuthService
from iffidb.services.capabilities import (
    ClipboardCapability,
    DirectoryDownload,
    DownloadCapability,
    PendingDownload,
    SpeechCapability,
)
from iffidb.services.records import (
    EmptyExportError,
    NotFoundError,
    RecordService,
    RecordServiceError,
    ValidationError,
    filter_records,
    render_csv,
)
from iffidb.services.storage import (
    InMemoryMedium,
    JsonFileMedium,
    KeyValueMedium,
    PersistentStore,
    StorageError,
)

__all__ = [
    # Auth
    "AuthError",
    "AuthService",
    # Capabilities
    "ClipboardCapability",
    "DirectoryDownload",
    "DownloadCapability",
    "PendingDownload",
    "SpeechCapability",
    # Records
    "EmptyExportError",
    "NotFoundError",
    "RecordService",
    "RecordServiceError",
    "ValidationError",
    "filter_records",
    "render_csv",
    # Storage
    "InMemoryMedium",
    "JsonFileMedium",
    "KeyValueMedium",
    "PersistentStore",
    "StorageError",
]
