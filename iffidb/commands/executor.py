"""
Command Executor

Runs one console command line against the record service.

DESIGN DECISION: The executor is the single recovery boundary for console
input. Whatever goes wrong (bad usage, unknown verb, a missing record, an
empty export, even an unexpected bug) becomes an ERROR entry in the audit
log and execute() returns normally. The operator only ever sees the log
panel.

Each call is independent: nothing but the command history carries over
between invocations.
"""

from typing import Awaitable, Callable, Optional

import structlog
from pydantic import BaseModel

from iffidb.audit import AuditLog
from iffidb.commands.tokenizer import parse_field_flags, parse_update, tokenize
from iffidb.errors import IffiDBError
from iffidb.models.record import RecordCreate
from iffidb.services.records import DEFAULT_EXPORT_PREFIX, RecordService


logger = structlog.get_logger(__name__)

CLEAR_MARKER = "--- CONSOLE CLEARED ---"

HELP_LINES = (
    "Available Commands:",
    "  list : View recent records",
    "  create -n [Name] -e [Email] -p [Phone] -a [Address] : Add record",
    "  update [ID] -n [Name] ... : Update record",
    "  delete [ID] : Delete record",
    "  export : Download CSV",
    "  clear : Clear console view",
    '  Voice AI: Click Mic and say "Create record name John email john@test.com"',
)


class CommandError(IffiDBError):
    """Base exception for malformed console input."""
    pass


class UsageError(CommandError):
    """A known verb was given the wrong arguments."""
    pass


class UnknownCommandError(CommandError):
    """The verb is not recognized."""

    def __init__(self, verb: str):
        self.verb = verb
        super().__init__(f"Unknown command '{verb}'. Type 'help' or try voice commands.")


class CommandOutcome(BaseModel):
    """What happened to one command line."""

    command: str
    verb: Optional[str] = None
    success: bool
    error: Optional[str] = None


class CommandHistory:
    """
    Submitted command lines with arrow-key style navigation.

    previous() walks back from the newest entry; next() walks forward and
    returns "" once it passes the newest entry again.
    """

    def __init__(self):
        self._entries: list[str] = []
        self._cursor = -1

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def record(self, command: str) -> None:
        self._entries.append(command)
        self._cursor = -1

    def previous(self) -> Optional[str]:
        if self._cursor < len(self._entries) - 1:
            self._cursor += 1
            return self._entries[-1 - self._cursor]
        return None

    def next(self) -> Optional[str]:
        if self._cursor > 0:
            self._cursor -= 1
            return self._entries[-1 - self._cursor]
        if self._cursor == 0:
            self._cursor = -1
            return ""
        return None

    def __len__(self) -> int:
        return len(self._entries)


class CommandExecutor:
    """
    Tokenizes a line, dispatches on its verb and reports through the audit log.

    Verbs: help, clear, list, export, delete, create, update.
    """

    def __init__(
        self,
        records: RecordService,
        audit: AuditLog,
        export_prefix: str = DEFAULT_EXPORT_PREFIX,
        list_preview: int = 5,
        history: Optional[CommandHistory] = None,
    ):
        self._records = records
        self._audit = audit
        self._export_prefix = export_prefix
        self._list_preview = list_preview
        self._history = history or CommandHistory()
        self._handlers: dict[str, Callable[[list[str]], Awaitable[None]]] = {
            "help": self._help,
            "clear": self._clear,
            "list": self._list,
            "export": self._export,
            "delete": self._delete,
            "create": self._create,
            "update": self._update,
        }

    @property
    def history(self) -> CommandHistory:
        return self._history

    @property
    def verbs(self) -> list[str]:
        return sorted(self._handlers)

    async def execute(self, raw: str) -> Optional[CommandOutcome]:
        """
        Run one command line.

        Blank input is ignored (returns None). Otherwise the line is
        echoed to the log, added to the history and executed; any error
        is logged as `Command Failed: <message>` and never raised.
        """
        command = raw.strip()
        if not command:
            return None

        self._history.record(command)
        self._audit.system(f"> {command}")

        args = tokenize(command)
        verb = args[0].lower() if args else None

        try:
            handler = self._handlers.get(verb or "")
            if handler is None:
                raise UnknownCommandError(verb or "")
            await handler(args[1:])
        except IffiDBError as e:
            self._audit.error(f"Command Failed: {e}")
            return CommandOutcome(command=command, verb=verb, success=False, error=str(e))
        except Exception as e:
            logger.exception("command_crashed", command=command)
            self._audit.error(f"Command Failed: {e}")
            return CommandOutcome(command=command, verb=verb, success=False, error=str(e))

        return CommandOutcome(command=command, verb=verb, success=True)

    # -------------------------------------------------------------------------
    # Verb handlers
    # -------------------------------------------------------------------------

    async def _help(self, args: list[str]) -> None:
        for line in HELP_LINES:
            self._audit.system(line)

    async def _clear(self, args: list[str]) -> None:
        self._audit.system(CLEAR_MARKER)

    async def _list(self, args: list[str]) -> None:
        records = await self._records.list()
        if not records:
            self._audit.system("Database is empty.")
            return

        shown = records[: self._list_preview]
        self._audit.system(f"Found {len(records)} records. Showing last {len(shown)}:")
        for record in shown:
            self._audit.system(record.summary())

    async def _export(self, args: list[str]) -> None:
        records = await self._records.list()
        self._records.export_csv(records, prefix=self._export_prefix)

    async def _delete(self, args: list[str]) -> None:
        if not args:
            raise UsageError("Usage: delete [ID]")
        await self._records.delete(args[0])

    async def _create(self, args: list[str]) -> None:
        fields = parse_field_flags(args)
        if not fields.get("name") or not fields.get("email"):
            raise UsageError("Name (-n) and Email (-e) are required.")
        await self._records.create(RecordCreate(**fields))

    async def _update(self, args: list[str]) -> None:
        if not args:
            raise UsageError("Usage: update [ID] -n [Name] ...")
        partial = parse_update(args[1:])
        if partial.is_empty:
            raise UsageError("No fields to update provided.")
        await self._records.update(args[0], partial)
