"""Flow tests for the command console and app wiring."""

import pytest

from iffidb.commands import CLEAR_MARKER
from iffidb.config import Settings
from iffidb.models.audit import LogAction
from iffidb.orchestrator import CommandConsole, create_app_components
from iffidb.services import ClipboardCapability, InMemoryMedium, SpeechCapability

from conftest import log_details


class FakeSpeech(SpeechCapability):
    """Recognizer driven by the test."""

    def __init__(self):
        self.on_transcript = None
        self.on_error = None
        self.stopped = 0

    def start(self, on_transcript, on_error) -> None:
        self.on_transcript = on_transcript
        self.on_error = on_error

    def stop(self) -> None:
        self.stopped += 1


class FakeClipboard(ClipboardCapability):
    def __init__(self):
        self.text = None

    def copy(self, text: str) -> None:
        self.text = text


@pytest.fixture
def speech() -> FakeSpeech:
    return FakeSpeech()


@pytest.fixture
def voice_console(executor, audit, speech) -> CommandConsole:
    return CommandConsole(executor, audit, speech=speech)


class TestSubmit:
    """Tests for typed and interpreted input."""

    @pytest.mark.asyncio
    async def test_typed_input_runs_literally(self, console, audit):
        """Test that typed text is not rewritten."""
        await console.submit("show records")
        assert log_details(audit)[-1].startswith("Command Failed: Unknown command 'show'")

    @pytest.mark.asyncio
    async def test_interpreted_create_is_announced(self, console, records, audit):
        """Test the announcement and the resulting record."""
        text = "create record name Jane Doe email jane@x.com"
        await console.submit(text, interpret=True)

        details = log_details(audit)
        assert details[0] == f'AI Interpreted: "{text}" -> "create -n "Jane Doe" -e "jane@x.com""'
        assert details[1] == '> create -n "Jane Doe" -e "jane@x.com"'
        assert (await records.list())[0].name == "Jane Doe"

    @pytest.mark.asyncio
    async def test_interpreted_keyword_is_not_announced(self, console, audit):
        """Test that only the create rule announces."""
        await console.submit("show records", interpret=True)
        assert log_details(audit) == ["> list", "Database is empty."]

    @pytest.mark.asyncio
    async def test_clear_phrase(self, console, audit):
        """Test a clear request in a longer sentence."""
        await console.submit("please clear logs now", interpret=True)
        assert log_details(audit) == ["> clear", CLEAR_MARKER]

    @pytest.mark.asyncio
    async def test_uninterpretable_text_fails_as_command(self, console, audit):
        """Test that text no rule understands reaches the executor unchanged."""
        await console.submit("what time is it", interpret=True)
        assert log_details(audit) == [
            "> what time is it",
            "Command Failed: Unknown command 'what'. Type 'help' or try voice commands.",
        ]

    @pytest.mark.asyncio
    async def test_generate_shortcut(self, console, records):
        """Test the sample shortcut through the whole flow."""
        await console.submit("generate data", interpret=True)
        listed = await records.list()
        assert [(r.name, r.email) for r in listed] == [("Sample User", "sample@test.com")]

    @pytest.mark.asyncio
    async def test_submit_clears_pending_input(self, console):
        """Test that submitting empties the input line."""
        console.pending_input = "half typed"
        await console.submit("help")
        assert console.pending_input == ""


class TestVoice:
    """Tests for the speech flow."""

    @pytest.mark.asyncio
    async def test_interim_then_final(self, voice_console, speech, audit):
        """Test that only the final transcript executes."""
        assert await voice_console.start_listening()
        assert voice_console.is_listening
        assert log_details(audit) == ["Listening for voice command..."]

        speech.on_transcript("show rec", False)
        await voice_console.wait_idle()
        assert voice_console.pending_input == "show rec"
        assert voice_console.is_listening
        assert len(audit.list()) == 1

        speech.on_transcript("show records", True)
        await voice_console.wait_idle()
        assert not voice_console.is_listening
        assert log_details(audit)[1:] == ["> list", "Database is empty."]

    @pytest.mark.asyncio
    async def test_voice_error(self, voice_console, speech, audit):
        """Test recognizer failure."""
        await voice_console.start_listening()
        speech.on_error("network")
        await voice_console.wait_idle()

        assert not voice_console.is_listening
        entry = audit.list()[0]
        assert entry.action == LogAction.ERROR
        assert entry.details == "Voice Error: network"

    @pytest.mark.asyncio
    async def test_toggle(self, voice_console, speech):
        """Test start and stop through toggle."""
        assert await voice_console.toggle_listening() is True
        assert await voice_console.toggle_listening() is False
        assert speech.stopped == 1

    @pytest.mark.asyncio
    async def test_without_speech_capability(self, console, audit):
        """Test that voice is simply unavailable."""
        assert not console.can_listen
        assert await console.start_listening() is False
        assert console.stop_listening() is False
        assert await console.toggle_listening() is False
        assert audit.list() == []


class TestOutput:
    """Tests for history, visible entries and copying."""

    @pytest.mark.asyncio
    async def test_history_fills_input(self, console):
        """Test arrow-key recall into pending_input."""
        await console.submit("list")
        await console.submit("help")

        assert console.history_previous() == "help"
        assert console.pending_input == "help"
        assert console.history_previous() == "list"
        assert console.history_next() == "help"
        assert console.history_next() == ""
        assert console.pending_input == ""

    @pytest.mark.asyncio
    async def test_visible_entries_after_clear(self, console, audit):
        """Test that clear hides older entries without deleting them."""
        await console.submit("list")
        await console.submit("clear")
        await console.submit("help")

        visible = [e.details for e in console.visible_entries()]
        assert visible[0] == "> help"
        assert CLEAR_MARKER not in visible
        assert "> list" in log_details(audit)

    @pytest.mark.asyncio
    async def test_visible_entries_without_clear(self, console):
        """Test that everything is visible before any clear."""
        await console.submit("list")
        assert [e.details for e in console.visible_entries()] == ["> list", "Database is empty."]

    @pytest.mark.asyncio
    async def test_copy_logs(self, executor, audit):
        """Test copying the log text."""
        clipboard = FakeClipboard()
        console = CommandConsole(executor, audit, clipboard=clipboard)
        await console.submit("list")

        text = console.copy_logs()

        assert clipboard.text == text
        lines = text.split("\n")
        assert lines[0].endswith("SYSTEM > list")
        assert lines[1].endswith("SYSTEM Database is empty.")

    def test_copy_logs_without_clipboard(self, console):
        """Test that copying still returns the text."""
        assert console.copy_logs() == ""


class TestAppComponents:
    """Tests for the component factory."""

    @pytest.fixture
    def settings(self, monkeypatch) -> Settings:
        monkeypatch.setenv("IFFIDB_STORE_BACKEND", "memory")
        monkeypatch.setenv("IFFIDB_LATENCY_LOGIN", "0")
        monkeypatch.setenv("IFFIDB_LATENCY_MUTATION", "0")
        monkeypatch.setenv("IFFIDB_LATENCY_READ", "0")
        return Settings()

    @pytest.mark.asyncio
    async def test_end_to_end(self, settings):
        """Test login, a console command and the shared notifier."""
        components = create_app_components(settings=settings)
        changes = []
        components.notifier.subscribe(lambda: changes.append(1))

        await components.auth.login("iffibaloch334@gmail.com", "admin")
        await components.console.submit('create -n "Ann" -e ann@x.com')

        assert [r.name for r in await components.records.list()] == ["Ann"]
        assert changes == [1]
        assert components.auth.current_user() is not None

    @pytest.mark.asyncio
    async def test_explicit_medium(self, settings):
        """Test that a supplied medium is used as-is."""
        medium = InMemoryMedium()
        components = create_app_components(settings=settings, medium=medium)
        await components.records.create({"name": "Ann", "email": "ann@x.com"})
        assert medium.get_item("iffidb_records") is not None

    @pytest.mark.asyncio
    async def test_export_dir_download(self, settings, monkeypatch, tmp_path):
        """Test that the export directory becomes the download target."""
        monkeypatch.setenv("IFFIDB_CONSOLE_EXPORT_DIR", str(tmp_path))
        components = create_app_components(settings=settings)
        await components.records.create({"name": "Ann", "email": "ann@x.com"})

        await components.console.submit("export")

        exported = list(tmp_path.glob("iffidb_export_*.csv"))
        assert len(exported) == 1
        assert "Ann" in exported[0].read_text(encoding="utf-8")
