"""
Optional External Capabilities

The console can use three things the core cannot provide by itself:
file downloads, the clipboard and speech-to-text. Each is a narrow
interface here. Every consumer accepts None for a capability and keeps
working without that feature.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, MutableMapping, Optional


TranscriptCallback = Callable[[str, bool], None]
SpeechErrorCallback = Callable[[str], None]


class DownloadCapability(ABC):
    """Delivers a generated file to the operator."""

    @abstractmethod
    def deliver(self, filename: str, content: str) -> None:
        pass


class ClipboardCapability(ABC):
    """Places text on the operator's clipboard."""

    @abstractmethod
    def copy(self, text: str) -> None:
        pass


class SpeechCapability(ABC):
    """
    External speech-to-text.

    While listening, the recognizer calls on_transcript(text, is_final)
    with the transcript so far, and on_error(code) if recognition fails.
    """

    @abstractmethod
    def start(
        self,
        on_transcript: TranscriptCallback,
        on_error: SpeechErrorCallback,
    ) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        pass


class DirectoryDownload(DownloadCapability):
    """Writes downloads into a directory (terminal console)."""

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    def deliver(self, filename: str, content: str) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        (self._directory / filename).write_text(content, encoding="utf-8")

    def path_for(self, filename: str) -> Path:
        return self._directory / filename


class PendingDownload(DownloadCapability):
    """
    Holds the most recent download until a view hands it to the browser.

    Used by the Streamlit view, which can only offer a download button
    on its next render.

    The file is kept in the mapping returned by `state`, resolved on every
    call. The view passes its per-session state so one shared instance
    never hands a session's export to another session.
    """

    SLOT = "iffidb_pending_download"

    def __init__(self, state: Optional[Callable[[], MutableMapping]] = None):
        local: dict = {}
        self._state = state or (lambda: local)

    def deliver(self, filename: str, content: str) -> None:
        self._state()[self.SLOT] = (filename, content)

    def take(self) -> Optional[tuple[str, str]]:
        """Return and clear the pending (filename, content), if any."""
        return self._state().pop(self.SLOT, None)
