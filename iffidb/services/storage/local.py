"""
Local Key-Value Media

Two concrete media for PersistentStore:

- InMemoryMedium: a dict. Used by tests and throwaway sessions.
- JsonFileMedium: one JSON document on disk mapping key -> raw string.

DESIGN DECISION: The file medium re-reads the document on every access.
The Streamlit view and the terminal console may share one data file, and
the document stays small (100 log entries plus the record list), so there
is no cache to invalidate.

TRADEOFFS:
- Not suitable for large data sets (fine for a single-operator console)
- Whole-document rewrite per write (atomic via rename)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from iffidb.services.storage.interface import KeyValueMedium, StorageError


logger = structlog.get_logger(__name__)


def _log_write_retry(retry_state) -> None:
    logger.warning(
        "medium_write_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()),
    )


class InMemoryMedium(KeyValueMedium):
    """Dict-backed medium. Nothing survives the process."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)


class JsonFileMedium(KeyValueMedium):
    """
    File-backed medium holding every key in one JSON document.

    A missing or unreadable document is treated as empty. Writes go to a
    temporary file that is renamed over the document, and transient
    OSErrors are retried before surfacing as StorageError.
    """

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_document().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        document = self._read_document()
        document[key] = value
        self._save(document)

    def remove_item(self, key: str) -> None:
        document = self._read_document()
        if key in document:
            del document[key]
            self._save(document)

    def _read_document(self) -> dict:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("medium_read_failed", path=str(self._path), error=str(e))
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("medium_document_malformed", path=str(self._path))
            return {}

        if not isinstance(document, dict):
            logger.warning("medium_document_malformed", path=str(self._path))
            return {}
        return document

    def _save(self, document: dict) -> None:
        try:
            self._write_document(document)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}")

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, max=0.5),
        retry=retry_if_exception_type(OSError),
        before_sleep=_log_write_retry,
        reraise=True,
    )
    def _write_document(self, document: dict) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            dir=str(self._path.parent),
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(document, fh, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
