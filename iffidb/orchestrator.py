"""
Main Orchestrator for IffiDB

This module ties the components together and defines the console flow:

    typed line / final voice transcript
        -> NaturalLanguageInterpreter (optional rewrite)
        -> CommandExecutor (tokenize, dispatch)
        -> RecordService (store + audit + notify)

DESIGN DECISION: The orchestrator owns wiring, nothing else.
- One store, one notifier and one audit log per app, shared by every flow
- Optional capabilities (speech, clipboard, download) are injected and
  may be missing; the console keeps working without them
"""

import asyncio
from dataclasses import dataclass
from typing import Optional

from iffidb.audit import AuditLog
from iffidb.commands import (
    CLEAR_MARKER,
    CommandExecutor,
    CommandOutcome,
    NaturalLanguageInterpreter,
)
from iffidb.config import Settings, get_settings
from iffidb.events import ChangeNotifier
from iffidb.models.audit import LogEntry
from iffidb.services.auth import AuthService
from iffidb.services.capabilities import (
    ClipboardCapability,
    DirectoryDownload,
    DownloadCapability,
    SpeechCapability,
)
from iffidb.services.records import RecordService
from iffidb.services.storage import (
    InMemoryMedium,
    JsonFileMedium,
    KeyValueMedium,
    PersistentStore,
)


class CommandConsole:
    """
    Orchestrates the command console.

    Flow:
    1. Typed input executes literally (interpret=True routes it through
       the interpreter first)
    2. Interim voice transcripts only update pending_input
    3. Final voice transcripts are interpreted, announced if the create
       rule rewrote them, then executed

    Output goes to the audit log; log_lines()/visible_entries() render it.
    """

    def __init__(
        self,
        executor: CommandExecutor,
        audit: AuditLog,
        interpreter: Optional[NaturalLanguageInterpreter] = None,
        speech: Optional[SpeechCapability] = None,
        clipboard: Optional[ClipboardCapability] = None,
    ):
        self._executor = executor
        self._audit = audit
        self._interpreter = interpreter or NaturalLanguageInterpreter()
        self._speech = speech
        self._clipboard = clipboard
        self._listening = False
        self._tasks: set[asyncio.Task] = set()
        self.pending_input = ""

    @property
    def can_listen(self) -> bool:
        return self._speech is not None

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def executor(self) -> CommandExecutor:
        return self._executor

    async def submit(self, text: str, interpret: bool = False) -> Optional[CommandOutcome]:
        """Run one line of operator input."""
        self.pending_input = ""
        command = text
        if interpret:
            interpretation = self._interpreter.interpret(text)
            if interpretation.announce:
                self._audit.system(
                    f'AI Interpreted: "{text}" -> "{interpretation.command}"'
                )
            command = interpretation.command
        return await self._executor.execute(command)

    async def handle_transcript(
        self,
        transcript: str,
        is_final: bool,
    ) -> Optional[CommandOutcome]:
        """Route a speech transcript: interim ones are display-only."""
        self.pending_input = transcript
        if not is_final:
            return None
        self._listening = False
        return await self.submit(transcript, interpret=True)

    # -------------------------------------------------------------------------
    # Voice
    # -------------------------------------------------------------------------

    async def start_listening(self) -> bool:
        """
        Start the speech capability.

        Returns False (and does nothing) if no capability is available.
        Recognizer callbacks may arrive from any thread; they are handed
        to the running event loop.
        """
        if self._speech is None:
            return False
        if self._listening:
            return True

        loop = asyncio.get_running_loop()

        def on_transcript(text: str, is_final: bool) -> None:
            loop.call_soon_threadsafe(self._schedule_transcript, text, is_final)

        def on_error(code: str) -> None:
            loop.call_soon_threadsafe(self._voice_error, code)

        self._listening = True
        self._audit.system("Listening for voice command...")
        self._speech.start(on_transcript, on_error)
        return True

    def stop_listening(self) -> bool:
        if self._speech is None:
            return False
        if self._listening:
            self._speech.stop()
            self._listening = False
        return True

    async def toggle_listening(self) -> bool:
        """Start or stop listening. Returns the new listening state."""
        if self._listening:
            self.stop_listening()
        else:
            await self.start_listening()
        return self._listening

    async def wait_idle(self) -> None:
        """Wait until every scheduled transcript has been executed."""
        await asyncio.sleep(0)
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _schedule_transcript(self, text: str, is_final: bool) -> None:
        task = asyncio.ensure_future(self.handle_transcript(text, is_final))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _voice_error(self, code: str) -> None:
        self._listening = False
        self._audit.error(f"Voice Error: {code}")

    # -------------------------------------------------------------------------
    # History and output
    # -------------------------------------------------------------------------

    def history_previous(self) -> Optional[str]:
        command = self._executor.history.previous()
        if command is not None:
            self.pending_input = command
        return command

    def history_next(self) -> Optional[str]:
        command = self._executor.history.next()
        if command is not None:
            self.pending_input = command
        return command

    def visible_entries(self) -> list[LogEntry]:
        """Log entries oldest first, starting after the latest clear marker."""
        entries = list(reversed(self._audit.list()))
        for index in range(len(entries) - 1, -1, -1):
            if entries[index].details == CLEAR_MARKER:
                return entries[index + 1:]
        return entries

    def log_lines(self) -> list[str]:
        """The whole log, oldest first, as `[HH:MM:SS] ACTION details` lines."""
        return [entry.to_console_line() for entry in reversed(self._audit.list())]

    def copy_logs(self) -> str:
        """Copy the log text to the clipboard if one is available; return it."""
        text = "\n".join(self.log_lines())
        if self._clipboard is not None:
            self._clipboard.copy(text)
        return text


@dataclass
class AppComponents:
    """Everything a view needs, built once per process."""
    settings: Settings
    store: PersistentStore
    notifier: ChangeNotifier
    audit: AuditLog
    records: RecordService
    auth: AuthService
    console: CommandConsole


def create_medium(settings: Settings) -> KeyValueMedium:
    store_settings = settings.store
    if store_settings.backend == "memory":
        return InMemoryMedium()
    return JsonFileMedium(store_settings.path)


def create_app_components(
    settings: Optional[Settings] = None,
    medium: Optional[KeyValueMedium] = None,
    downloader: Optional[DownloadCapability] = None,
    speech: Optional[SpeechCapability] = None,
    clipboard: Optional[ClipboardCapability] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use (defaults to get_settings()).
        medium: Key-value medium (defaults to the configured backend).
        downloader: Download capability; defaults to the configured export
                    directory, or none.
        speech: Speech-to-text capability, if the platform has one.
        clipboard: Clipboard capability, if the platform has one.
    """
    settings = settings or get_settings()
    store_settings = settings.store
    console_settings = settings.console
    latency = settings.latency

    store = PersistentStore(
        medium or create_medium(settings),
        key_prefix=store_settings.key_prefix,
    )
    notifier = ChangeNotifier()
    audit = AuditLog(
        store,
        capacity=store_settings.log_capacity,
        default_user=store_settings.default_operator,
    )

    if downloader is None and console_settings.export_dir is not None:
        downloader = DirectoryDownload(console_settings.export_dir)

    records = RecordService(
        store,
        audit,
        notifier,
        latency=latency,
        downloader=downloader,
    )
    auth = AuthService(store, audit, settings=settings.auth, latency=latency)

    executor = CommandExecutor(
        records,
        audit,
        export_prefix=console_settings.export_prefix,
        list_preview=console_settings.list_preview,
    )
    console = CommandConsole(executor, audit, speech=speech, clipboard=clipboard)

    return AppComponents(
        settings=settings,
        store=store,
        notifier=notifier,
        audit=audit,
        records=records,
        auth=auth,
        console=console,
    )
