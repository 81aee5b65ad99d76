"""
Terminal REPL for the IffiDB command console.

    python -m iffidb

Lines are executed literally. Prefix a line with `:nl ` to send it through
the natural-language interpreter. `exit` or Ctrl+D quits.
"""

import asyncio
import sys
from typing import Optional

from iffidb.orchestrator import CommandConsole, create_app_components


NL_PREFIX = ":nl "


def _read_input() -> Optional[str]:
    try:
        sys.stdout.write("\n> ")
        sys.stdout.flush()
        raw = sys.stdin.buffer.readline()
        if not raw:
            return None
        return raw.decode("utf-8", errors="replace").rstrip("\n")
    except EOFError:
        return None


def _print_new_entries(console: CommandConsole, seen: set[str]) -> None:
    for entry in console.visible_entries():
        if entry.id in seen:
            continue
        seen.add(entry.id)
        print(entry.to_console_line())


async def run_repl() -> None:
    components = create_app_components()
    console = components.console
    loop = asyncio.get_running_loop()

    print("IffiDB command console (type 'help', ':nl <text>' or 'exit')")
    print("-" * 60)

    # Entries already in the log are not echoed again.
    seen = {entry.id for entry in components.audit.list()}

    while True:
        try:
            line = await loop.run_in_executor(None, _read_input)
        except (EOFError, KeyboardInterrupt):
            print("\nBye!")
            break

        if line is None or line.strip().lower() in ("exit", "quit"):
            print("Bye!")
            break

        if line.startswith(NL_PREFIX):
            await console.submit(line[len(NL_PREFIX):], interpret=True)
        else:
            await console.submit(line)

        _print_new_entries(console, seen)


def main() -> None:
    try:
        asyncio.run(run_repl())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
