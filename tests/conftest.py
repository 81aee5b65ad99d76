"""
Shared fixtures.

Every component is built on an in-memory medium with zero latency, so
tests never sleep and never touch the disk unless they ask for tmp_path.
"""

import random

import pytest

from iffidb.audit import AuditLog
from iffidb.commands import CommandExecutor
from iffidb.config import LatencySettings
from iffidb.events import ChangeNotifier
from iffidb.orchestrator import CommandConsole
from iffidb.services import (
    InMemoryMedium,
    PendingDownload,
    PersistentStore,
    RecordService,
)


@pytest.fixture
def zero_latency() -> LatencySettings:
    return LatencySettings(login=0, mutation=0, read=0)


@pytest.fixture
def medium() -> InMemoryMedium:
    return InMemoryMedium()


@pytest.fixture
def store(medium) -> PersistentStore:
    return PersistentStore(medium)


@pytest.fixture
def audit(store) -> AuditLog:
    return AuditLog(store)


@pytest.fixture
def notifier() -> ChangeNotifier:
    return ChangeNotifier()


@pytest.fixture
def downloads() -> PendingDownload:
    return PendingDownload()


@pytest.fixture
def records(store, audit, notifier, zero_latency, downloads) -> RecordService:
    return RecordService(
        store,
        audit,
        notifier,
        latency=zero_latency,
        downloader=downloads,
        rng=random.Random(42),
    )


@pytest.fixture
def executor(records, audit) -> CommandExecutor:
    return CommandExecutor(records, audit)


@pytest.fixture
def console(executor, audit) -> CommandConsole:
    return CommandConsole(executor, audit)


def log_details(audit: AuditLog) -> list[str]:
    """Audit details oldest first, the way the console shows them."""
    return [entry.details for entry in reversed(audit.list())]
